# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from nativesig import (
	ErrorKind,
	FunctionDescriptor,
	parse_function,
	parse_signature_lines,
	strip_declaration,
)


def test_strip_declaration() -> None:
	assert strip_declaration("- func: log10_(Tensor self) -> Tensor") == "log10_(Tensor self) -> Tensor"
	assert strip_declaration("  func:  fft(Tensor self) -> Tensor  ") == "fft(Tensor self) -> Tensor"
	assert strip_declaration("log10_(Tensor self) -> Tensor") == "log10_(Tensor self) -> Tensor"
	assert strip_declaration("   ") is None
	assert strip_declaration("# comment") is None
	assert strip_declaration("func:") is None


def test_lines_are_parsed_independently() -> None:
	lines = [
		"- func: log10_(Tensor self) -> Tensor",
		"broken(Tensor self -> Tensor",
		"",
		"# skipped",
		"einsum(std::string equation, TensorList tensors) -> Tensor",
	]
	results, diagnostics = parse_signature_lines(lines, file="native_functions.txt")
	assert len(results) == len(lines)
	assert isinstance(results[0], FunctionDescriptor)
	assert results[0] == parse_function("log10_(Tensor self) -> Tensor")
	assert results[1] is None
	assert results[2] is None
	assert results[3] is None
	assert results[4] is not None and results[4].name == "einsum"

	assert len(diagnostics) == 1
	diag = diagnostics[0]
	assert diag.code == ErrorKind.UNTERMINATED_CONSTRUCT.value
	assert diag.span.file == "native_functions.txt"
	assert diag.span.line == 2
	assert diag.span.column == len("broken(Tensor self ") + 1


def test_column_accounts_for_stripped_prefix() -> None:
	line = "  - func: f(Tensr self) -> Tensor"
	_results, diagnostics = parse_signature_lines([line])
	assert len(diagnostics) == 1
	assert diagnostics[0].span.column == line.index("Tensr") + 1
	assert diagnostics[0].span.offset == len("f(")


def test_all_failures_are_reported() -> None:
	results, diagnostics = parse_signature_lines(["a(", "b(Tensor x) ->", "c() -> Tensor"])
	assert results[:2] == [None, None]
	assert results[2] is not None
	assert [d.span.line for d in diagnostics] == [1, 2]
