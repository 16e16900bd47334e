"""
Type Mapping Utilities for usdtgen.

This module provides the closed mapping between the provider DSL type names,
the C types used at the ABI boundary, the ctypes types used by generated
bindings and the Python host types seen by application code. All type
conversion logic lives here so the three generators and the invocation
checker agree on one model.
"""

from __future__ import annotations

import ctypes
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from .logging import get_logger

logger = get_logger(__name__)

POINTER_SIZE = ctypes.sizeof(ctypes.c_void_p)


class DslType(Enum):
    """Argument types accepted in provider definitions."""

    # Signed integer types
    INT8 = "int8_t"
    INT16 = "int16_t"
    INT32 = "int32_t"
    INT64 = "int64_t"

    # Unsigned integer types
    UINT8 = "uint8_t"
    UINT16 = "uint16_t"
    UINT32 = "uint32_t"
    UINT64 = "uint64_t"

    # Pointer-sized types
    UINTPTR = "uintptr_t"
    STRING = "char *"


@dataclass(frozen=True)
class HostType:
    """
    A Python-side value type as seen by the invocation checker.

    ``kind`` is one of ``int``, ``bool``, ``float``, ``str``, ``bytes``,
    ``none`` or ``any``. Integers may carry a fixed width and signedness
    (declared slots, ctypes values) or a statically known value (literals).
    """

    kind: str
    bits: Optional[int] = None
    signed: Optional[bool] = None
    value: Optional[int] = None

    @property
    def annotation(self) -> str:
        """Name of the builtin used in generated type annotations."""
        return self.kind

    @property
    def is_sized_int(self) -> bool:
        return self.kind == "int" and self.bits is not None

    def __str__(self) -> str:
        if self.kind == "int" and self.value is not None:
            return f"int literal {self.value}"
        if self.is_sized_int:
            return f"int ({'' if self.signed else 'u'}int{self.bits}_t)"
        return self.kind


ANY = HostType("any")
BOOL = HostType("bool")
FLOAT = HostType("float")
STR = HostType("str")
BYTES = HostType("bytes")
NONE = HostType("none")
INT = HostType("int")


def sized_int(bits: int, signed: bool) -> HostType:
    return HostType("int", bits=bits, signed=signed)


def int_literal(value: int) -> HostType:
    return HostType("int", value=value)


@dataclass(frozen=True)
class TypeInfo:
    """Information about a DSL type."""

    dsl_type: DslType
    abi_type: str
    ctypes_type: Any
    host_type: HostType
    size_bytes: int
    is_signed: bool
    is_pointer: bool
    description: str
    macro_cast: str = ""

    @property
    def dsl_name(self) -> str:
        return self.dsl_type.value

    @property
    def is_string(self) -> bool:
        return self.dsl_type is DslType.STRING

    @property
    def ctypes_name(self) -> str:
        return self.ctypes_type.__name__


class TypeMapper:
    """
    Closed, total mapper between DSL, ABI, ctypes and host type systems.

    Every DSL type resolves to exactly one ABI type and one host type. Names
    outside the table are rejected rather than defaulted.
    """

    def __init__(self):
        """Initialize the type mapper with the closed table."""
        self._type_info = self._build_type_info_map()
        self._string_to_dsl = self._build_string_to_dsl_map()

    def _build_type_info_map(self) -> Dict[DslType, TypeInfo]:
        """Build the type information table."""
        pointer_bits = POINTER_SIZE * 8
        return {
            DslType.INT8: TypeInfo(
                DslType.INT8, "int8_t", ctypes.c_int8, sized_int(8, True), 1, True, False,
                "8-bit signed integer"
            ),
            DslType.INT16: TypeInfo(
                DslType.INT16, "int16_t", ctypes.c_int16, sized_int(16, True), 2, True, False,
                "16-bit signed integer"
            ),
            DslType.INT32: TypeInfo(
                DslType.INT32, "int32_t", ctypes.c_int32, sized_int(32, True), 4, True, False,
                "32-bit signed integer"
            ),
            DslType.INT64: TypeInfo(
                DslType.INT64, "int64_t", ctypes.c_int64, sized_int(64, True), 8, True, False,
                "64-bit signed integer"
            ),
            DslType.UINT8: TypeInfo(
                DslType.UINT8, "uint8_t", ctypes.c_uint8, sized_int(8, False), 1, False, False,
                "8-bit unsigned integer"
            ),
            DslType.UINT16: TypeInfo(
                DslType.UINT16, "uint16_t", ctypes.c_uint16, sized_int(16, False), 2, False, False,
                "16-bit unsigned integer"
            ),
            DslType.UINT32: TypeInfo(
                DslType.UINT32, "uint32_t", ctypes.c_uint32, sized_int(32, False), 4, False, False,
                "32-bit unsigned integer"
            ),
            DslType.UINT64: TypeInfo(
                DslType.UINT64, "uint64_t", ctypes.c_uint64, sized_int(64, False), 8, False, False,
                "64-bit unsigned integer"
            ),
            DslType.UINTPTR: TypeInfo(
                DslType.UINTPTR, "uintptr_t", ctypes.c_void_p, sized_int(pointer_bits, False),
                POINTER_SIZE, False, True, "pointer-sized opaque integer"
            ),
            DslType.STRING: TypeInfo(
                DslType.STRING, "const char *", ctypes.c_char_p, STR, POINTER_SIZE, False, True,
                "borrowed NUL-terminated string", macro_cast="(char *)"
            ),
        }

    def _build_string_to_dsl_map(self) -> Dict[str, DslType]:
        """Build mapping from accepted spellings to DSL types."""
        mapping = {dsl_type.value: dsl_type for dsl_type in DslType}
        mapping["char*"] = DslType.STRING
        return mapping

    def resolve(self, type_name: str) -> DslType:
        """
        Convert a DSL spelling to its type.

        Args:
            type_name: Type as written in the provider definition

        Returns:
            Corresponding DSL type

        Raises:
            KeyError: If the name is not in the closed table
        """
        if type_name not in self._string_to_dsl:
            raise KeyError(type_name)
        return self._string_to_dsl[type_name]

    def is_known(self, type_name: str) -> bool:
        """Check if a DSL spelling is part of the closed table."""
        return type_name in self._string_to_dsl

    def get_type_info(self, dsl_type: Union[DslType, str]) -> TypeInfo:
        """
        Get comprehensive information about a type.

        Args:
            dsl_type: DSL type (enum or spelling)

        Returns:
            Type information
        """
        if isinstance(dsl_type, str):
            dsl_type = self.resolve(dsl_type)
        return self._type_info[dsl_type]

    def get_supported_types(self) -> List[DslType]:
        """Get list of all supported DSL types, in table order."""
        return list(self._type_info.keys())

    def host_type(self, dsl_type: Union[DslType, str]) -> HostType:
        """Get the Python-side type of a DSL type."""
        return self.get_type_info(dsl_type).host_type

    def value_range(self, info: TypeInfo) -> Tuple[int, int]:
        """
        Get the inclusive range of an integer type.

        Raises:
            TypeError: If the type is not an integer type
        """
        if info.is_string:
            raise TypeError(f"{info.dsl_name} has no integer range")
        bits = info.size_bytes * 8
        if info.is_signed:
            return -(1 << (bits - 1)), (1 << (bits - 1)) - 1
        return 0, (1 << bits) - 1

    def to_abi(self, info: TypeInfo, value: Any) -> Any:
        """
        Convert a host value into its ctypes representation.

        Values are never truncated: out-of-range integers raise and strings
        with embedded NUL bytes are rejected. Strings are encoded as UTF-8
        and only borrowed for the duration of the call.

        Args:
            info: Target type
            value: Host value

        Returns:
            ctypes instance holding the value

        Raises:
            TypeError: If the value has the wrong host type
            OverflowError: If an integer does not fit the ABI type
            ValueError: If a string contains a NUL byte
        """
        if info.is_string:
            if isinstance(value, str):
                data = value.encode("utf-8")
            elif isinstance(value, bytes):
                data = value
            else:
                raise TypeError(f"{info.dsl_name} expects str or bytes, got {type(value).__name__}")
            if b"\0" in data:
                raise ValueError(f"{info.dsl_name} value contains an embedded NUL byte")
            return info.ctypes_type(data)

        if not isinstance(value, int):
            raise TypeError(f"{info.dsl_name} expects int, got {type(value).__name__}")
        low, high = self.value_range(info)
        if not low <= value <= high:
            raise OverflowError(f"{value} does not fit in {info.dsl_name} [{low}, {high}]")
        return info.ctypes_type(int(value))

    def from_abi(self, info: TypeInfo, raw: Any) -> Any:
        """Convert a ctypes value (or plain value) back into its host value."""
        value = getattr(raw, "value", raw)
        if info.is_string:
            return value.decode("utf-8") if isinstance(value, bytes) else value
        if value is None:
            # c_void_p reports NULL as None
            return 0
        return int(value)


# Global type mapper instance
_global_type_mapper: Optional[TypeMapper] = None


def get_type_mapper() -> TypeMapper:
    """Get the global type mapper instance."""
    global _global_type_mapper
    if _global_type_mapper is None:
        _global_type_mapper = TypeMapper()
    return _global_type_mapper


def is_supported_type(type_name: str) -> bool:
    """Check if a DSL type spelling is supported."""
    return get_type_mapper().is_known(type_name)


def get_type_info(type_name: Union[DslType, str]) -> TypeInfo:
    """Get type information for a DSL type."""
    return get_type_mapper().get_type_info(type_name)


def canonical_type_name(type_name: str) -> str:
    """Return the canonical spelling of a DSL type."""
    return get_type_mapper().resolve(type_name).value


def annotate(provider_file, mapper: Optional[TypeMapper] = None):
    """
    Attach ABI and host type information to every argument of a file.

    The input is not modified; a new, fully annotated ProviderFile is
    returned for the generators to share.

    Args:
        provider_file: Validated ProviderFile
        mapper: Type mapper to use, defaults to the global instance

    Returns:
        Annotated copy of the file

    Raises:
        KeyError: If an argument type is outside the closed table
    """
    from dataclasses import replace

    mapper = mapper or get_type_mapper()
    return provider_file.with_arguments(
        lambda arg: replace(
            arg,
            type_name=mapper.resolve(arg.type_name).value,
            type_info=mapper.get_type_info(arg.type_name),
        )
    )
