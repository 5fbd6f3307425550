#!/usr/bin/env python3
# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Iterable, Iterator, List, Tuple

from . import parser, strip_declaration
from .errors import SignatureParseError


def main(argv: list[str] | None = None) -> int:
	args = _parse_args(argv)
	failed = False
	for label, line_no, shift, text in _collect_inputs(args):
		try:
			node = parser.parse(text, start=args.start)
		except SignatureParseError as exc:
			failed = True
			span = exc.span.with_source_line(line_no, label, column_shift=shift)
			print(f"[parse error] {span}: {exc.message}", file=sys.stderr)
			continue
		name = node.name if args.start == "function" else text
		print(f"[ok] {name}")
		if args.dump:
			print(f"  {node!r}")
	return 1 if failed else 0


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
	ap = argparse.ArgumentParser(
		prog="nativesig",
		description="Parse native function signatures (one per line) and report failures",
	)
	ap.add_argument(
		"paths",
		nargs="*",
		type=Path,
		help="signature listings, one declaration per line ('-' or nothing reads stdin)",
	)
	ap.add_argument(
		"-e",
		"--expr",
		action="append",
		default=[],
		metavar="TEXT",
		help="parse TEXT instead of reading files (repeatable)",
	)
	ap.add_argument(
		"--start",
		choices=parser.START_RULES,
		default="function",
		help="grammar component to run (default: function)",
	)
	ap.add_argument("--dump", action="store_true", help="print the parsed AST for every successful line")
	return ap.parse_args(argv)


def _collect_inputs(args: argparse.Namespace) -> Iterator[Tuple[str, int, int, str]]:
	"""Yield (label, line number, column shift, signature text) for every declaration."""
	if args.expr:
		for idx, text in enumerate(args.expr, start=1):
			yield f"<expr{idx}>", 1, 0, text
		return
	sources: List[Tuple[str, Iterable[str]]] = []
	if not args.paths or args.paths == [Path("-")]:
		sources.append(("<stdin>", sys.stdin))
	else:
		for path in args.paths:
			sources.append((str(path), path.read_text().splitlines()))
	for label, lines in sources:
		for line_no, line in enumerate(lines, start=1):
			text = strip_declaration(line)
			if text is not None:
				yield label, line_no, line.find(text), text


if __name__ == "__main__":
	raise SystemExit(main())
