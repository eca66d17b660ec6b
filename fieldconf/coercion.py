"""Type-directed conversion of field text into typed values.

Responsibilities:
- Parse special textual formats (durations, IP addresses, masks, networks)
  before any structural dispatch.
- Dispatch every other destination on its structural `Kind`.
- Fill a leaf field in place, skipping empty text and already-set slots.

Key public functions:
- `coerce`: convert text into a value of a given type hint.
- `assign_text`: coerce text into a `FieldNode` slot.
"""

from __future__ import annotations

import enum
import typing
from typing import Any, Callable

from loguru import logger

from .errors import (
    ArrayLengthError,
    ConfigError,
    FieldError,
    UnsupportedTypeError,
)
from .kinds import (
    Kind,
    Uint8,
    kind_of,
    is_zero,
    optional_inner,
    special_parser,
    strip_annotated,
    type_name,
    width_of,
    zero_value,
)
from .parsing import parse_bool, parse_complex, parse_float, parse_int
from .reflection import FieldNode


_SEQUENCE_SEPARATOR = ","
_PAIR_SEPARATOR = ":"


def _coerce_string(tp: Any, raw: str) -> str:
    return raw


def _coerce_integer(tp: Any, raw: str) -> int:
    width = width_of(tp)
    return parse_int(raw, bits=width.bits, signed=width.signed)


def _coerce_float(tp: Any, raw: str) -> float:
    return parse_float(raw, bits=width_of(tp).bits)


def _coerce_complex(tp: Any, raw: str) -> complex:
    return parse_complex(raw, bits=width_of(tp).bits)


def _coerce_bool(tp: Any, raw: str) -> bool:
    return parse_bool(raw)


def _coerce_sequence(tp: Any, raw: str) -> Any:
    """Split on commas, drop empty segments, and coerce each element."""

    base, _ = strip_annotated(tp)
    element = Uint8 if base is bytes else typing.get_args(base)[0]
    items = [
        coerce(element, segment)
        for segment in raw.split(_SEQUENCE_SEPARATOR)
        if segment
    ]
    if base is bytes:
        return bytes(items)
    if typing.get_origin(base) is tuple:
        return tuple(items)
    return items


def _coerce_array(tp: Any, raw: str) -> tuple[Any, ...]:
    """Assign comma segments positionally; empty segments keep the zero element."""

    base, _ = strip_annotated(tp)
    elements = typing.get_args(base)
    segments = raw.split(_SEQUENCE_SEPARATOR)
    if len(segments) > len(elements):
        raise ArrayLengthError(len(elements))

    values = [zero_value(element) for element in elements]
    for index, segment in enumerate(segments):
        if segment:
            values[index] = coerce(elements[index], segment)
    return tuple(values)


def _coerce_mapping(tp: Any, raw: str) -> dict[Any, Any]:
    """Parse `key:value` entries; malformed entries are dropped."""

    base, _ = strip_annotated(tp)
    key_type, value_type = typing.get_args(base)
    result: dict[Any, Any] = {}
    for entry in raw.split(_SEQUENCE_SEPARATOR):
        pair = entry.split(_PAIR_SEPARATOR)
        if len(pair) != 2:
            logger.debug("dropping malformed mapping entry {!r}", entry)
            continue
        result[coerce_or_zero(key_type, pair[0])] = coerce_or_zero(value_type, pair[1])
    return result


def _coerce_optional(tp: Any, raw: str) -> Any:
    base, _ = strip_annotated(tp)
    return coerce(optional_inner(base), raw)


def _coerce_text(tp: Any, raw: str) -> Any:
    """Build an opaque value from text (`from_text`, enums, paths, decimals, UUIDs)."""

    cls, _ = strip_annotated(tp)
    from_text = getattr(cls, "from_text", None)
    if callable(from_text):
        return from_text(raw)
    if issubclass(cls, enum.Enum):
        return _decode_enum(cls, raw)
    return cls(raw)


def _decode_enum(cls: type[enum.Enum], raw: str) -> enum.Enum:
    """Resolve an enum member by name, then by value or value text."""

    if raw in cls.__members__:
        return cls[raw]
    for member in cls:
        if member.value == raw or str(member.value) == raw:
            return member
    raise ValueError(f'invalid {cls.__name__} value "{raw}"')


_HANDLERS: dict[Kind, Callable[[Any, str], Any]] = {
    Kind.STRING: _coerce_string,
    Kind.SIGNED: _coerce_integer,
    Kind.UNSIGNED: _coerce_integer,
    Kind.FLOAT: _coerce_float,
    Kind.COMPLEX: _coerce_complex,
    Kind.BOOL: _coerce_bool,
    Kind.SEQUENCE: _coerce_sequence,
    Kind.ARRAY: _coerce_array,
    Kind.MAPPING: _coerce_mapping,
    Kind.OPTIONAL: _coerce_optional,
    Kind.TEXT: _coerce_text,
}


def coerce(tp: Any, raw: str) -> Any:
    """Convert `raw` text into a value of type `tp`.

    Raises:
        NumError: For malformed or out-of-range numeric and boolean text.
        ArrayLengthError: When a fixed array receives too many segments.
        DurationError: For malformed duration text.
        InvalidAddressError: For malformed address or CIDR text.
        UnsupportedTypeError: When `tp` has no coercion.
    """

    special = special_parser(tp)
    if special is not None:
        return special(raw)

    handler = _HANDLERS.get(kind_of(tp))
    if handler is None:
        raise UnsupportedTypeError(type_name(tp))
    return handler(tp, raw)


def coerce_or_zero(tp: Any, raw: str) -> Any:
    """Coerce `raw` into a fresh value of `tp`; empty text yields the zero value."""

    if not raw:
        return zero_value(tp)
    return coerce(tp, raw)


def assign_text(node: FieldNode, raw: str, override: bool = False) -> bool:
    """Coerce `raw` into the slot of `node`.

    Empty text is ignored. Unless `override` is set, a slot that already holds
    a non-zero value is left untouched, which makes repeated filling idempotent.

    Returns:
        Whether the slot was assigned.

    Raises:
        FieldError: Wrapping the coercion failure with the field name.
    """

    if not raw:
        return False
    if not override and not is_zero(node.get(), node.type):
        return False

    try:
        value = coerce(node.type, raw)
    except (ConfigError, ValueError, ArithmeticError) as exc:
        raise FieldError(node.name, exc) from exc

    node.set(value)
    return True
