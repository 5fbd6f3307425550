# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Set, Tuple, TypeVar

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken
from lark.lexer import PatternStr

from .ast import (
	BoolValue,
	CType,
	CTypeKind,
	DefaultValue,
	DeviceType,
	DoubleValue,
	EmptyDict,
	EnumConstant,
	EnumConstantKind,
	FixedArrayType,
	FunctionDescriptor,
	GeneratorType,
	IntValue,
	NoneValue,
	NullPointer,
	Parameter,
	ParameterDescriptor,
	StorageType,
	StringType,
	TensorKind,
	TensorType,
	TupleType,
	TypeDescriptor,
	VariadicMarker,
)
from .diagnostics import Span
from .errors import ErrorKind, SignatureParseError

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

START_RULES: Tuple[str, ...] = (
	"function",
	"identifier",
	"type",
	"default_value",
	"param",
	"params",
	"returns",
)

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="contextual",
	start=list(START_RULES),
	propagate_positions=True,
	maybe_placeholders=False,
)

_TENSOR_KINDS: Dict[str, TensorKind] = {
	"TENSOR_OPTIONS": TensorKind.TENSOR_OPTIONS,
	"TENSOR_Q": TensorKind.OPTIONAL_TENSOR,
	"TENSOR_LIST": TensorKind.TENSOR_LIST,
	"TENSOR": TensorKind.TENSOR,
	"INDEX_TENSOR": TensorKind.INDEX_TENSOR,
	"BOOL_TENSOR_Q": TensorKind.OPTIONAL_BOOL_TENSOR,
	"BOOL_TENSOR": TensorKind.BOOL_TENSOR,
	"SCALAR_Q": TensorKind.OPTIONAL_SCALAR,
	"SCALAR_TYPE": TensorKind.SCALAR_TYPE,
	"SCALAR": TensorKind.SCALAR,
	"SPARSE_TENSOR_REF": TensorKind.SPARSE_TENSOR_REF,
}

_CTYPE_KINDS: Dict[str, CTypeKind] = {
	"BOOL": CTypeKind.BOOL,
	"VOID": CTypeKind.VOID,
	"DOUBLE": CTypeKind.DOUBLE,
	"INT64_Q": CTypeKind.OPTIONAL_INT64,
	"INT64": CTypeKind.INT64,
}

_UNIT_TYPES: Dict[str, Callable[[], TypeDescriptor]] = {
	"string_type": StringType,
	"device_type": DeviceType,
	"generator_type": GeneratorType,
	"storage_type": StorageType,
}

# Keyword literals map to fixed values; `{}` and `{0,1}` deliberately collapse.
_CONSTANT_DEFAULTS: Dict[str, DefaultValue] = {
	"TRUE": BoolValue(True),
	"FALSE": BoolValue(False),
	"NULLPTR": NullPointer(),
	"NONE": NoneValue(),
	"REDUCTION_MEAN": EnumConstant(EnumConstantKind.REDUCTION_MEAN),
	"AT_KLONG": EnumConstant(EnumConstantKind.AT_KLONG),
	"EMPTY_DICT": EmptyDict(),
	"DICT_0_1": EmptyDict(),
}

_T = TypeVar("_T")


class _UnsupportedElement(ValueError):
	def __init__(self, message: str, *, offset: int) -> None:
		super().__init__(message)
		self.offset = offset


def parse_identifier(source: str) -> str:
	return _run(source, "identifier", _build_identifier)


def parse_type(source: str) -> TypeDescriptor:
	"""Parse a type descriptor such as `Tensor?`, `IntList[3]` or `std::array<bool,4>`."""
	return _run(source, "type", _build_type)


def parse_default_value(source: str) -> DefaultValue:
	"""Parse the literal that follows `=` in a parameter."""
	return _run(source, "default_value", _build_default_value)


def parse_parameter(source: str) -> ParameterDescriptor:
	return _run(source, "param", _build_param)


def parse_parameters(source: str) -> Tuple[ParameterDescriptor, ...]:
	"""Parse a comma-separated parameter list without the enclosing parentheses."""
	return _run(source, "params", _build_params)


def parse_return_type(source: str) -> TypeDescriptor:
	"""
	Parse a return type.

	A parenthesized list collapses to a TupleType; names attached to the
	returned values are accepted and dropped.
	"""
	return _run(source, "returns", _build_returns)


def parse_function(source: str) -> FunctionDescriptor:
	"""
	Parse one full declaration: `name(params) -> returns`.

	The whole string must be consumed. Any failure raises SignatureParseError
	and no partial descriptor is produced.
	"""
	return _run(source, "function", _build_function)


def parse(source: str, start: str = "function"):
	"""Dispatch to the entry point for grammar component `start`."""
	try:
		entry = _ENTRY_POINTS[start]
	except KeyError:
		raise ValueError(f"unknown start rule {start!r}; expected one of {', '.join(START_RULES)}") from None
	return entry(source)


def _run(source: str, start: str, build: Callable[[Tree], _T]) -> _T:
	try:
		tree = _PARSER.parse(source, start=start)
	except UnexpectedInput as err:
		raise _error_from_lark(err, source) from err
	try:
		return build(tree)
	except _UnsupportedElement as err:
		raise SignatureParseError(
			str(err),
			kind=ErrorKind.UNSUPPORTED_ELEMENT,
			span=_span_at(source, err.offset),
			source=source,
		) from err


# Tree builders


def _name(node: object) -> str:
	if isinstance(node, Tree):
		return str(node.data)
	if isinstance(node, Token):
		return node.type
	raise TypeError(f"Unexpected node type: {type(node)}")


def _subtrees(tree: Tree) -> List[Tree]:
	return [child for child in tree.children if isinstance(child, Tree)]


def _tokens(tree: Tree, *types: str) -> List[Token]:
	return [child for child in tree.children if isinstance(child, Token) and child.type in types]


def _only_token(tree: Tree) -> Token:
	toks = [child for child in tree.children if isinstance(child, Token)]
	if len(toks) != 1:
		raise ValueError(f"{_name(tree)} expects exactly one token, got {len(toks)}")
	return toks[0]


def _build_identifier(tree: Tree) -> str:
	return str(_tokens(tree, "NAME")[0])


def _build_type(node: Tree) -> TypeDescriptor:
	kind = _name(node)
	if kind == "tuple_type":
		return TupleType(tuple(_build_type(child) for child in _subtrees(node)))
	if kind == "tensor_type":
		return TensorType(_TENSOR_KINDS[_only_token(node).type])
	if kind == "int_list":
		dims = tuple(int(tok) for tok in _tokens(node, "DIM"))
		return TensorType(TensorKind.INT_LIST, dims or None)
	if kind == "c_type":
		return CType(_CTYPE_KINDS[_only_token(node).type])
	if kind == "fixed_array":
		return _build_fixed_array(node)
	unit = _UNIT_TYPES.get(kind)
	if unit is not None:
		return unit()
	raise ValueError(f"unsupported type node: {kind}")


def _build_fixed_array(tree: Tree) -> FixedArrayType:
	element_node = _subtrees(tree)[0]
	element = _build_type(element_node)
	if not isinstance(element, CType):
		raise _UnsupportedElement(
			f"std::array element must be a C scalar type (bool, void, double, int64_t), got {type(element).__name__}",
			offset=getattr(element_node.meta, "start_pos", 0),
		)
	length = int(_tokens(tree, "DIM")[0])
	return FixedArrayType(element=element.kind, length=length)


def _build_returns(node: Tree) -> TypeDescriptor:
	kind = _name(node)
	if kind == "return_tuple":
		return TupleType(tuple(_build_returns(child) for child in _subtrees(node)))
	if kind == "return_single":
		# A trailing NAME token, if any, is the discarded result name.
		return _build_type(_subtrees(node)[0])
	raise ValueError(f"unsupported return node: {kind}")


def _build_default_value(tree: Tree) -> DefaultValue:
	tok = _only_token(tree)
	if tok.type == "FLOAT":
		return DoubleValue(float(tok))
	if tok.type == "SIGNED_INT":
		return IntValue(int(tok))
	try:
		return _CONSTANT_DEFAULTS[tok.type]
	except KeyError:
		raise ValueError(f"unsupported default literal token {tok.type}") from None


def _build_param(tree: Tree) -> ParameterDescriptor:
	if _name(tree) == "variadic":
		return VariadicMarker()
	if _name(tree) != "parameter":
		raise ValueError(f"expected parameter, got {_name(tree)}")
	subtrees = _subtrees(tree)
	type_node = subtrees[0]
	default: Optional[DefaultValue] = None
	if len(subtrees) > 1:
		default = _build_default_value(subtrees[1])
	name_tok = _tokens(tree, "NAME")[0]
	return Parameter(type=_build_type(type_node), name=str(name_tok), default=default)


def _build_params(tree: Tree) -> Tuple[ParameterDescriptor, ...]:
	return tuple(_build_param(child) for child in _subtrees(tree))


def _build_function(tree: Tree) -> FunctionDescriptor:
	ident, params, returns = _subtrees(tree)
	return FunctionDescriptor(
		name=_build_identifier(ident),
		parameters=_build_params(params),
		return_type=_build_returns(returns),
	)


_ENTRY_POINTS: Dict[str, Callable[[str], object]] = {
	"function": parse_function,
	"identifier": parse_identifier,
	"type": parse_type,
	"default_value": parse_default_value,
	"param": parse_parameter,
	"params": parse_parameters,
	"returns": parse_return_type,
}


# Error conversion

_CLOSERS: FrozenSet[str] = frozenset({")", "]", ">"})
_CONTINUATIONS: FrozenSet[str] = _CLOSERS | {",", "="}

_REGEX_DESCRIPTIONS: Dict[str, str] = {
	"NAME": "identifier",
	"DIM": "non-negative integer",
	"SIGNED_INT": "integer",
	"FLOAT": "floating-point literal",
	"TRUE": "'true'",
	"FALSE": "'false'",
}


def _terminal_text(name: str) -> Optional[str]:
	"""Literal spelling of a string terminal, or None for regex terminals and $END."""
	if name == "$END":
		return None
	try:
		term = _PARSER.get_terminal(name)
	except KeyError:
		return None
	if isinstance(term.pattern, PatternStr):
		return term.pattern.value
	return None


def _describe_terminal(name: str) -> str:
	if name == "$END":
		return "end of input"
	text = _terminal_text(name)
	if text is not None:
		return repr(text)
	return _REGEX_DESCRIPTIONS.get(name, name)


def _span_at(source: str, offset: int) -> Span:
	line_start = source.rfind("\n", 0, offset) + 1
	return Span(offset=offset, line=source.count("\n", 0, offset) + 1, column=offset - line_start + 1)


def _is_unterminated(expected: Iterable[str]) -> bool:
	"""
	True when the parser was only waiting for the rest of an open construct:
	a closing delimiter, separator, `=` or a trailing name.
	"""
	texts: Set[str] = set()
	for name in expected:
		if name == "NAME":
			continue
		text = _terminal_text(name)
		if text is None or text not in _CONTINUATIONS:
			return False
		texts.add(text)
	return bool(texts & _CLOSERS)


def _error_from_lark(err: UnexpectedInput, source: str) -> SignatureParseError:
	at_end = False
	if isinstance(err, UnexpectedToken):
		expected = set(err.expected or ())
		at_end = err.token.type == "$END"
		offset = len(source) if at_end else err.token.start_pos
		found = "end of input" if at_end else repr(str(err.token))
	elif isinstance(err, UnexpectedCharacters):
		expected = set(err.allowed or ())
		offset = err.pos_in_stream
		found = repr(err.char)
	elif isinstance(err, UnexpectedEOF):
		expected = set(err.expected or ())
		at_end = True
		offset = len(source)
		found = "end of input"
	else:
		expected = set()
		offset = max(getattr(err, "pos_in_stream", 0) or 0, 0)
		found = "input"

	offset = min(max(offset or 0, 0), len(source))
	if at_end or _is_unterminated(expected):
		kind = ErrorKind.UNTERMINATED_CONSTRUCT
	else:
		kind = ErrorKind.LEXICAL_MISMATCH
	described = tuple(sorted({_describe_terminal(name) for name in expected}))
	message = f"unexpected {found}"
	if described:
		message += f"; expected {', '.join(described)}"
	return SignatureParseError(
		message,
		kind=kind,
		span=_span_at(source, offset),
		source=source,
		expected=described,
	)


__all__ = [
	"START_RULES",
	"parse",
	"parse_identifier",
	"parse_type",
	"parse_default_value",
	"parse_parameter",
	"parse_parameters",
	"parse_return_type",
	"parse_function",
]
