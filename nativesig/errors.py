# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from enum import Enum
from typing import Sequence, Tuple

from .diagnostics import Diagnostic, Span


class ErrorKind(Enum):
	LEXICAL_MISMATCH = "E-SIG-LEX"
	UNTERMINATED_CONSTRUCT = "E-SIG-UNTERMINATED"
	UNSUPPORTED_ELEMENT = "E-SIG-UNSUPPORTED"


class SignatureParseError(ValueError):
	"""
	Failure to parse one signature string.

	All grammar failures surface as this one exception. `kind` says which
	class of failure it was, `span` points at the absolute offset where
	parsing stopped, and `expected` lists what would have been accepted there
	(empty when the failure is not about the next token).
	"""

	def __init__(
		self,
		message: str,
		*,
		kind: ErrorKind,
		span: Span,
		source: str,
		expected: Sequence[str] = (),
	) -> None:
		super().__init__(message)
		self.message = message
		self.kind = kind
		self.span = span
		self.source = source
		self.expected: Tuple[str, ...] = tuple(expected)

	@property
	def offset(self) -> int:
		return self.span.offset

	def __str__(self) -> str:
		where = f"offset {self.span.offset}"
		if self.span.line is not None and self.span.column is not None:
			where += f" (line {self.span.line}, column {self.span.column})"
		return f"{self.message} at {where}"

	def to_diagnostic(self) -> Diagnostic:
		notes = []
		if self.expected:
			notes.append("expected one of: " + ", ".join(self.expected))
		return Diagnostic(
			message=self.message,
			code=self.kind.value,
			span=self.span,
			notes=notes,
		)


__all__ = ["ErrorKind", "SignatureParseError"]
