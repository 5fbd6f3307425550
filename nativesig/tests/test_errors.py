# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest
from lark.exceptions import UnexpectedInput

from nativesig import parser as p
from nativesig.errors import ErrorKind, SignatureParseError


def _fail(fn, text: str) -> SignatureParseError:
	with pytest.raises(SignatureParseError) as excinfo:
		fn(text)
	return excinfo.value


def test_error_is_a_value_error() -> None:
	err = _fail(p.parse_function, "log10_(Tensor self")
	assert isinstance(err, ValueError)
	assert isinstance(err.__cause__, UnexpectedInput)


def test_missing_close_paren_at_end() -> None:
	text = "log10_(Tensor self"
	err = _fail(p.parse_function, text)
	assert err.kind is ErrorKind.UNTERMINATED_CONSTRUCT
	assert err.offset == len(text)
	assert "')'" in err.expected
	assert "end of input" in err.message


def test_missing_close_paren_before_arrow() -> None:
	text = "log10_(Tensor self -> Tensor"
	err = _fail(p.parse_function, text)
	assert err.kind is ErrorKind.UNTERMINATED_CONSTRUCT
	assert err.offset == text.index("->")
	assert err.span.line == 1
	assert err.span.column == text.index("->") + 1


def test_unterminated_dimension_list() -> None:
	err = _fail(p.parse_type, "IntList[1 2]")
	assert err.kind is ErrorKind.UNTERMINATED_CONSTRUCT
	assert err.offset == len("IntList[1 ")
	assert "']'" in err.expected


def test_unterminated_fixed_array() -> None:
	err = _fail(p.parse_type, "std::array<bool,2")
	assert err.kind is ErrorKind.UNTERMINATED_CONSTRUCT
	assert err.offset == len("std::array<bool,2")


def test_unknown_type_keyword() -> None:
	text = "fft(Tensr self) -> Tensor"
	err = _fail(p.parse_function, text)
	assert err.kind is ErrorKind.LEXICAL_MISMATCH
	assert err.offset == text.index("Tensr")
	assert "'Tensor'" in err.expected
	assert "'TensorOptions'" in err.expected


def test_unknown_character() -> None:
	text = "fft(Tensor self) => Tensor"
	err = _fail(p.parse_function, text)
	assert err.kind is ErrorKind.LEXICAL_MISMATCH
	assert err.offset == text.index("=>")
	assert "'->'" in err.expected


def test_unsupported_array_element() -> None:
	text = "f(std::array<Tensor,2> mask) -> Tensor"
	err = _fail(p.parse_function, text)
	assert err.kind is ErrorKind.UNSUPPORTED_ELEMENT
	assert err.offset == text.index("Tensor,")
	assert "std::array" in err.message


def test_str_mentions_position() -> None:
	err = _fail(p.parse_function, "log10_(Tensor self")
	assert "offset 18" in str(err)
	assert "line 1, column 19" in str(err)


def test_to_diagnostic() -> None:
	err = _fail(p.parse_function, "log10_(Tensor self")
	diag = err.to_diagnostic()
	assert diag.severity == "error"
	assert diag.code == ErrorKind.UNTERMINATED_CONSTRUCT.value
	assert diag.span == err.span
	assert diag.notes and diag.notes[0].startswith("expected one of:")
	assert diag.render().startswith("<input>:1:19: error:")


def test_failure_does_not_affect_next_parse() -> None:
	_fail(p.parse_function, "broken(Tensor")
	assert p.parse_function("log10_(Tensor self) -> Tensor").name == "log10_"
