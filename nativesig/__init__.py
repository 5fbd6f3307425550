# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Parser for native tensor-library function signatures.

Turns declarations such as

	fft(Tensor self, int64_t signal_ndim, bool normalized=false) -> Tensor

into immutable FunctionDescriptor trees for binding code generators. Each
signature is parsed on its own; `parse_signature_lines` runs a whole listing
and reports failures as diagnostics without letting one bad line affect the
others.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from .ast import *  # noqa: F401,F403
from .ast import __all__ as _ast_all
from .ast import FunctionDescriptor
from .diagnostics import Diagnostic, Span
from .errors import ErrorKind, SignatureParseError
from .parser import (
	START_RULES,
	parse,
	parse_default_value,
	parse_function,
	parse_identifier,
	parse_parameter,
	parse_parameters,
	parse_return_type,
	parse_type,
)

__version__ = "0.1.0"

_FUNC_PREFIX = "func:"


def strip_declaration(line: str) -> Optional[str]:
	"""
	Normalize one listing line to bare signature text.

	Returns None for blank lines and `#` comments. A leading `- func:` or
	`func:` marker, as found in native-function listings, is dropped.
	"""
	text = line.strip()
	if not text or text.startswith("#"):
		return None
	if text.startswith("- "):
		text = text[2:].lstrip()
	if text.startswith(_FUNC_PREFIX):
		text = text[len(_FUNC_PREFIX):].strip()
	return text or None


def parse_signature_lines(
	lines: Iterable[str],
	file: Optional[str] = None,
) -> Tuple[List[Optional[FunctionDescriptor]], List[Diagnostic]]:
	"""
	Parse every line of a signature listing independently.

	Returns one entry per input line: the parsed FunctionDescriptor, or None
	for skipped and failed lines. Each failed line contributes exactly one
	diagnostic whose span is relocated to that line (1-based) of `file`.
	"""
	results: List[Optional[FunctionDescriptor]] = []
	diagnostics: List[Diagnostic] = []
	for line_no, line in enumerate(lines, start=1):
		text = strip_declaration(line)
		if text is None:
			results.append(None)
			continue
		try:
			results.append(parse_function(text))
		except SignatureParseError as err:
			results.append(None)
			diag = err.to_diagnostic()
			diag.span = err.span.with_source_line(line_no, file, column_shift=line.find(text))
			diagnostics.append(diag)
	return results, diagnostics


__all__ = list(_ast_all) + [
	"Diagnostic",
	"Span",
	"ErrorKind",
	"SignatureParseError",
	"START_RULES",
	"parse",
	"parse_identifier",
	"parse_type",
	"parse_default_value",
	"parse_parameter",
	"parse_parameters",
	"parse_return_type",
	"parse_function",
	"strip_declaration",
	"parse_signature_lines",
]
