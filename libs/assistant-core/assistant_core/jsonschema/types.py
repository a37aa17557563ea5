"""
Type descriptors understood by the schema walker.

Python annotations are used directly as the type descriptors. This module
adds the pieces Python does not spell natively (integer and float widths)
and the helpers that strip the wrappers which are transparent to the
schema shape: `Optional`, `Annotated`, `NewType` and `type` aliases.
"""

import dataclasses
import types
import typing
from dataclasses import dataclass
from typing import Annotated, Any, Union, get_args, get_origin

from assistant_core.errors import UnsupportedTypeError

_TypeAliasType = getattr(typing, "TypeAliasType", None)


@dataclass(frozen=True)
class IntegerFormat:
    """Width marker for integers, used as `Annotated[int, IntegerFormat(32)]`."""

    bits: int = 64
    signed: bool = True

    @property
    def format(self) -> str:
        return "int32" if self.bits <= 32 else "int64"


@dataclass(frozen=True)
class NumberFormat:
    """Width marker for floats, used as `Annotated[float, NumberFormat(32)]`."""

    bits: int = 64

    @property
    def format(self) -> str:
        return "float" if self.bits <= 32 else "double"


Int8 = Annotated[int, IntegerFormat(8)]
Int16 = Annotated[int, IntegerFormat(16)]
Int32 = Annotated[int, IntegerFormat(32)]
Int64 = Annotated[int, IntegerFormat(64)]
UInt8 = Annotated[int, IntegerFormat(8, signed=False)]
UInt16 = Annotated[int, IntegerFormat(16, signed=False)]
UInt32 = Annotated[int, IntegerFormat(32, signed=False)]
UInt64 = Annotated[int, IntegerFormat(64, signed=False)]
UInt = UInt64
Float32 = Annotated[float, NumberFormat(32)]
Float64 = Annotated[float, NumberFormat(64)]

WidthMarker = IntegerFormat | NumberFormat


def type_name(tp: Any) -> str:
    """Human readable name of a type, for error messages and logs."""
    if isinstance(tp, type) and get_origin(tp) is None:
        return tp.__qualname__
    return repr(tp).replace("typing.", "")


def is_record(tp: Any) -> bool:
    return isinstance(tp, type) and dataclasses.is_dataclass(tp)


def unwrap(tp: Any, field: str | None = None) -> tuple[Any, WidthMarker | None]:
    """Strip the wrappers around `tp` that do not change its schema.

    Returns the inner type together with the first width marker found in any
    `Annotated` layer on the way down.
    """
    marker: WidthMarker | None = None
    while True:
        if _TypeAliasType is not None and isinstance(tp, _TypeAliasType):
            tp = tp.__value__
            continue

        origin = get_origin(tp)
        if origin is Annotated:
            inner, *metadata = get_args(tp)
            if marker is None:
                marker = next((m for m in metadata if isinstance(m, WidthMarker)), None)
            tp = inner
            continue

        if origin is Union or origin is types.UnionType:
            args = get_args(tp)
            members = [arg for arg in args if arg is not type(None)]
            if len(members) != 1:
                raise UnsupportedTypeError(type_name(tp), field)
            tp = members[0]
            continue

        supertype = getattr(tp, "__supertype__", None)
        if supertype is not None:
            tp = supertype
            continue

        return tp, marker
