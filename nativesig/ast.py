# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Tuple, Union


class TensorKind(Enum):
	"""Tensor-family type kinds. Optionality (`?`) is its own kind, never a wrapper."""

	SCALAR = auto()
	TENSOR = auto()
	OPTIONAL_TENSOR = auto()
	TENSOR_OPTIONS = auto()
	TENSOR_LIST = auto()
	INDEX_TENSOR = auto()
	BOOL_TENSOR = auto()
	OPTIONAL_BOOL_TENSOR = auto()
	INT_LIST = auto()
	OPTIONAL_SCALAR = auto()
	SCALAR_TYPE = auto()
	SPARSE_TENSOR_REF = auto()


class CTypeKind(Enum):
	BOOL = auto()
	VOID = auto()
	DOUBLE = auto()
	INT64 = auto()
	OPTIONAL_INT64 = auto()


class EnumConstantKind(Enum):
	AT_KLONG = auto()
	REDUCTION_MEAN = auto()


# Type descriptors


@dataclass(frozen=True)
class PointerType:
	inner: "TypeDescriptor"


@dataclass(frozen=True)
class TensorType:
	kind: TensorKind
	# Only meaningful for TensorKind.INT_LIST: `IntList[1,2]` -> (1, 2), bare `IntList` -> None.
	dims: Optional[Tuple[int, ...]] = None

	def __post_init__(self) -> None:
		if self.dims is None:
			return
		if self.kind is not TensorKind.INT_LIST:
			raise ValueError(f"{self.kind.name} does not take dimensions")
		if not self.dims:
			raise ValueError("IntList dimensions must not be empty")
		if any(d < 0 for d in self.dims):
			raise ValueError(f"IntList dimensions must be non-negative, got {self.dims}")


@dataclass(frozen=True)
class DeviceType:
	pass


@dataclass(frozen=True)
class GeneratorType:
	pass


@dataclass(frozen=True)
class StorageType:
	pass


@dataclass(frozen=True)
class CType:
	kind: CTypeKind


@dataclass(frozen=True)
class FixedArrayType:
	"""`std::array<elem,len>`; the element is always a C scalar kind."""

	element: CTypeKind
	length: int

	def __post_init__(self) -> None:
		if self.length < 0:
			raise ValueError(f"std::array length must be non-negative, got {self.length}")


@dataclass(frozen=True)
class StringType:
	pass


@dataclass(frozen=True)
class TupleType:
	elements: Tuple["TypeDescriptor", ...]


TypeDescriptor = Union[
	PointerType,
	TensorType,
	DeviceType,
	GeneratorType,
	StorageType,
	CType,
	FixedArrayType,
	StringType,
	TupleType,
]


# Default-value literals


@dataclass(frozen=True)
class BoolValue:
	value: bool


@dataclass(frozen=True)
class IntValue:
	value: int


@dataclass(frozen=True)
class DoubleValue:
	value: float


@dataclass(frozen=True)
class EmptyDict:
	"""Both `{}` and `{0,1}` spell this value."""


@dataclass(frozen=True)
class EnumConstant:
	kind: EnumConstantKind


@dataclass(frozen=True)
class NullPointer:
	pass


@dataclass(frozen=True)
class NoneValue:
	pass


DefaultValue = Union[
	BoolValue,
	IntValue,
	DoubleValue,
	EmptyDict,
	EnumConstant,
	NullPointer,
	NoneValue,
]


# Parameters and functions


@dataclass(frozen=True)
class Parameter:
	type: TypeDescriptor
	name: str
	default: Optional[DefaultValue] = None


@dataclass(frozen=True)
class VariadicMarker:
	"""The bare `*` separating positional from keyword-only parameters."""


ParameterDescriptor = Union[Parameter, VariadicMarker]


@dataclass(frozen=True)
class FunctionDescriptor:
	name: str
	parameters: Tuple[ParameterDescriptor, ...]
	return_type: TypeDescriptor

	@property
	def named_parameters(self) -> Tuple[Parameter, ...]:
		return tuple(p for p in self.parameters if isinstance(p, Parameter))


__all__ = [
	"TensorKind",
	"CTypeKind",
	"EnumConstantKind",
	"PointerType",
	"TensorType",
	"DeviceType",
	"GeneratorType",
	"StorageType",
	"CType",
	"FixedArrayType",
	"StringType",
	"TupleType",
	"TypeDescriptor",
	"BoolValue",
	"IntValue",
	"DoubleValue",
	"EmptyDict",
	"EnumConstant",
	"NullPointer",
	"NoneValue",
	"DefaultValue",
	"Parameter",
	"VariadicMarker",
	"ParameterDescriptor",
	"FunctionDescriptor",
]
