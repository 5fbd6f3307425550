# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Source spans and diagnostics for signature parsing.

A Span always carries the absolute character offset into the parsed text plus
the 1-based line/column lark reports. Batch parsing additionally fills in the
file name and rewrites `line` to the input line the signature came from.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional


@dataclass(frozen=True)
class Span:
	"""Represents a position inside one signature string."""

	offset: int = 0
	line: Optional[int] = None
	column: Optional[int] = None
	file: Optional[str] = None

	def with_source_line(self, line: int, file: Optional[str] = None, column_shift: int = 0) -> "Span":
		"""
		Relocate a single-line span to `line` of an enclosing listing.

		`column_shift` accounts for text stripped in front of the signature
		(indentation, a `func:` marker). `offset` stays relative to the
		signature text itself.
		"""
		column = self.column + column_shift if self.column is not None else None
		return replace(self, line=line, column=column, file=file if file is not None else self.file)

	def __str__(self) -> str:
		parts = [self.file or "<input>"]
		if self.line is not None:
			parts.append(str(self.line))
		if self.column is not None:
			parts.append(str(self.column))
		return ":".join(parts)


@dataclass
class Diagnostic:
	"""Represents a parse diagnostic (error/warning/etc.)."""

	message: str
	code: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		# Callers may pass span=None; keep a structured object for renderers.
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	def render(self) -> str:
		text = f"{self.span}: {self.severity}: {self.message}"
		for note in self.notes:
			text += f"\n  note: {note}"
		return text


__all__ = ["Span", "Diagnostic"]
