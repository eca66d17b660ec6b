"""Structural kinds of record field types.

Responsibilities:
- Classify a resolved type hint into one closed `Kind` variant.
- Provide width-annotated numeric aliases (`Int8`, `Uint32`, `Float32`, ...).
- Compute zero values and zero checks used for idempotent filling.
- Build zero-valued record instances.

Key types:
- `Kind`: closed set of structural kinds, with `UNSUPPORTED` as the terminal variant.
- `Width`: bit-width marker carried in `typing.Annotated` metadata.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
import enum
import functools
import ipaddress
from pathlib import PurePath
import types
import typing
from typing import Annotated, Any, Callable, Union
from uuid import UUID

from .durations import parse_duration
from .netaddr import (
    IPAddress,
    IPMask,
    IPNetwork,
    parse_ip,
    parse_ip_mask,
    parse_ip_network,
    parse_ipv4,
    parse_ipv4_network,
    parse_ipv6,
    parse_ipv6_network,
)


class Kind(enum.Enum):
    """Structural kind of a destination type."""

    STRING = "string"
    SIGNED = "signed"
    UNSIGNED = "unsigned"
    FLOAT = "float"
    COMPLEX = "complex"
    BOOL = "bool"
    SEQUENCE = "sequence"
    ARRAY = "array"
    MAPPING = "mapping"
    OPTIONAL = "optional"
    TEXT = "text"
    RECORD = "record"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True, slots=True)
class Width:
    """Bit width of a numeric destination.

    Attributes:
        bits: Number of bits of the destination.
        signed: Whether an integer destination accepts negative values.
        name: Printable type name used in diagnostics.
    """

    bits: int
    signed: bool = True
    name: str = ""


Int8 = Annotated[int, Width(8, True, "int8")]
Int16 = Annotated[int, Width(16, True, "int16")]
Int32 = Annotated[int, Width(32, True, "int32")]
Int64 = Annotated[int, Width(64, True, "int64")]
Uint = Annotated[int, Width(64, False, "uint")]
Uint8 = Annotated[int, Width(8, False, "uint8")]
Uint16 = Annotated[int, Width(16, False, "uint16")]
Uint32 = Annotated[int, Width(32, False, "uint32")]
Uint64 = Annotated[int, Width(64, False, "uint64")]
Float32 = Annotated[float, Width(32, True, "float32")]
Float64 = Annotated[float, Width(64, True, "float64")]
Complex64 = Annotated[complex, Width(64, True, "complex64")]
Complex128 = Annotated[complex, Width(128, True, "complex128")]

_DEFAULT_WIDTHS = {
    int: Width(64, True, "int"),
    float: Width(64, True, "float"),
    complex: Width(128, True, "complex"),
}

_TEXT_CLASSES = (PurePath, Decimal, UUID, enum.Enum)

# Types handled by dedicated parsers before structural dispatch.
SPECIAL_PARSERS: tuple[tuple[Any, Callable[[str], Any]], ...] = (
    (timedelta, parse_duration),
    (IPAddress, parse_ip),
    (ipaddress.IPv4Address, parse_ipv4),
    (ipaddress.IPv6Address, parse_ipv6),
    (IPMask, parse_ip_mask),
    (IPNetwork, parse_ip_network),
    (ipaddress.IPv4Network, parse_ipv4_network),
    (ipaddress.IPv6Network, parse_ipv6_network),
)

SPECIAL_TYPES = tuple(special for special, _ in SPECIAL_PARSERS)


def strip_annotated(tp: Any) -> tuple[Any, Width | None]:
    """Return the base type of an `Annotated` hint and its `Width`, if any."""

    if typing.get_origin(tp) is Annotated:
        base, *extras = typing.get_args(tp)
        width = next((item for item in extras if isinstance(item, Width)), None)
        return base, width
    return tp, None


def width_of(tp: Any) -> Width:
    """Return the effective bit width of a numeric hint."""

    base, width = strip_annotated(tp)
    if width is not None:
        return width
    return _DEFAULT_WIDTHS.get(base, Width(64))


def is_union(tp: Any) -> bool:
    """Return whether a hint is a `Union`/`X | Y` type."""

    origin = typing.get_origin(tp)
    return origin is Union or origin is types.UnionType


def optional_inner(tp: Any) -> Any | None:
    """Return `T` for `T | None`, or `None` when `tp` does not admit `None`.

    With several non-`None` members the remaining union is returned.
    """

    if not is_union(tp):
        return None
    args = typing.get_args(tp)
    members = [arg for arg in args if arg is not type(None)]
    if len(members) == len(args):
        return None
    if len(members) == 1:
        return members[0]
    return Union[tuple(members)]


def is_record(tp: Any) -> bool:
    """Return whether a hint names a dataclass type."""

    base, _ = strip_annotated(tp)
    return isinstance(base, type) and dataclasses.is_dataclass(base)


def is_text_decodable(tp: Any) -> bool:
    """Return whether a class can be built from a single text value."""

    if not isinstance(tp, type) or typing.get_origin(tp) is not None:
        return False
    if callable(getattr(tp, "from_text", None)):
        return True
    return issubclass(tp, _TEXT_CLASSES)


def is_special(tp: Any) -> bool:
    """Return whether a hint is matched by one of the dedicated format parsers."""

    base, _ = strip_annotated(tp)
    return any(base == special for special in SPECIAL_TYPES)


def special_parser(tp: Any) -> Callable[[str], Any] | None:
    """Return the dedicated format parser for a hint, if it has one."""

    base, _ = strip_annotated(tp)
    for special, parser in SPECIAL_PARSERS:
        if base == special:
            return parser
    return None


def kind_of(tp: Any) -> Kind:
    """Classify a resolved type hint into its structural `Kind`."""

    base, width = strip_annotated(tp)
    if base is bool:
        return Kind.BOOL
    if base is str:
        return Kind.STRING
    if base is int:
        if width is not None and not width.signed:
            return Kind.UNSIGNED
        return Kind.SIGNED
    if base is float:
        return Kind.FLOAT
    if base is complex:
        return Kind.COMPLEX
    if base is bytes:
        return Kind.SEQUENCE

    origin = typing.get_origin(base)
    args = typing.get_args(base)
    if origin is list and len(args) == 1:
        return Kind.SEQUENCE
    if origin is tuple and args:
        if len(args) == 2 and args[1] is Ellipsis:
            return Kind.SEQUENCE
        if Ellipsis not in args:
            return Kind.ARRAY
        return Kind.UNSUPPORTED
    if origin is dict and len(args) == 2:
        return Kind.MAPPING
    if optional_inner(base) is not None:
        return Kind.OPTIONAL
    if is_text_decodable(base):
        return Kind.TEXT
    if is_record(base):
        return Kind.RECORD
    return Kind.UNSUPPORTED


def type_name(tp: Any) -> str:
    """Return a printable name for a hint, used in diagnostics."""

    base, width = strip_annotated(tp)
    if width is not None and width.name:
        return width.name
    if base is type(None):
        return "None"
    if base is Ellipsis:
        return "..."
    if is_union(base):
        return " | ".join(type_name(arg) for arg in typing.get_args(base))

    origin = typing.get_origin(base)
    args = typing.get_args(base)
    if origin is not None and args:
        origin_name = getattr(origin, "__name__", str(origin))
        return f"{origin_name}[{', '.join(type_name(arg) for arg in args)}]"
    if isinstance(base, type):
        return base.__name__
    name = getattr(base, "__name__", None)
    if name is not None and getattr(base, "__supertype__", None) is not None:
        return name
    return str(base)


@functools.cache
def record_hints(cls: type) -> dict[str, Any]:
    """Resolve and cache the type hints of a record class, keeping `Annotated` extras."""

    return typing.get_type_hints(cls, include_extras=True)


def zero_value(tp: Any) -> Any:
    """Return the zero value of a hint.

    Opaque, optional, and address-like destinations have `None` as their zero.
    """

    base, _ = strip_annotated(tp)
    if base is timedelta:
        return timedelta(0)
    if is_special(base):
        return None

    kind = kind_of(base)
    if kind is Kind.STRING:
        return ""
    if kind in (Kind.SIGNED, Kind.UNSIGNED):
        return 0
    if kind is Kind.FLOAT:
        return 0.0
    if kind is Kind.COMPLEX:
        return 0j
    if kind is Kind.BOOL:
        return False
    if kind is Kind.SEQUENCE:
        if base is bytes:
            return b""
        return () if typing.get_origin(base) is tuple else []
    if kind is Kind.ARRAY:
        return tuple(zero_value(arg) for arg in typing.get_args(base))
    if kind is Kind.MAPPING:
        return {}
    if kind is Kind.RECORD:
        return new_record(base)
    return None


def is_zero(value: Any, tp: Any) -> bool:
    """Return whether `value` is the zero value of `tp`."""

    if value is None:
        return True
    return value == zero_value(tp)


def new_record(cls: type) -> Any:
    """Construct a record whose fields without Python defaults hold zero values."""

    hints = record_hints(cls)
    init_values: dict[str, Any] = {}
    late_values: dict[str, Any] = {}
    for item in dataclasses.fields(cls):
        has_default = (
            item.default is not dataclasses.MISSING
            or item.default_factory is not dataclasses.MISSING
        )
        if has_default:
            continue
        target = init_values if item.init else late_values
        target[item.name] = zero_value(hints[item.name])

    instance = cls(**init_values)
    for name, value in late_values.items():
        object.__setattr__(instance, name, value)
    return instance
