"""Shared parsing helpers for numeric, boolean, and complex field text.

Responsibilities:
- Parse base-10 integers, floats, booleans, and complex literals strictly.
- Respect the bit width of the destination and report range overflows.
- Raise `NumError` carrying the offending text and the cause description.
"""

from __future__ import annotations

import math
import re
import struct

from .errors import NumError


_TRUE_BOOLEAN_TOKENS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_BOOLEAN_TOKENS = frozenset({"0", "f", "F", "FALSE", "false", "False"})

_SIGNED_PATTERN = re.compile(r"[+-]?[0-9]+")
_UNSIGNED_PATTERN = re.compile(r"[0-9]+")
_FLOAT32_MAX = struct.unpack(">f", b"\x7f\x7f\xff\xff")[0]
_INF_TOKENS = frozenset({"inf", "+inf", "-inf", "infinity", "+infinity", "-infinity"})


def normalize_optional_string(value: object) -> str | None:
    """Normalize an optional value to a stripped non-empty string.

    Args:
        value: Arbitrary input value.

    Returns:
        Stripped string value, or `None` when the value is empty after trimming.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text


def parse_bool(text: str) -> bool:
    """Parse a canonical boolean literal (`1 t T TRUE true True`, `0 f F FALSE false False`).

    Raises:
        NumError: If the token is not a canonical boolean literal.
    """

    if text in _TRUE_BOOLEAN_TOKENS:
        return True
    if text in _FALSE_BOOLEAN_TOKENS:
        return False
    raise NumError("parse_bool", text, NumError.SYNTAX)


def parse_int(text: str, bits: int = 64, signed: bool = True) -> int:
    """Parse a base-10 integer that must fit in `bits` bits.

    Args:
        text: Integer literal without whitespace or digit separators.
        bits: Bit width of the destination.
        signed: Whether the destination is signed.

    Raises:
        NumError: On malformed text (`invalid syntax`) or overflow
            (`value out of range`).
    """

    func = "parse_int" if signed else "parse_uint"
    pattern = _SIGNED_PATTERN if signed else _UNSIGNED_PATTERN
    if pattern.fullmatch(text) is None:
        raise NumError(func, text, NumError.SYNTAX)

    value = int(text)
    if signed:
        low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    else:
        low, high = 0, (1 << bits) - 1
    if not low <= value <= high:
        raise NumError(func, text, NumError.RANGE)
    return value


def parse_float(text: str, bits: int = 64) -> float:
    """Parse a float literal, rounding to single precision when `bits` is 32.

    Raises:
        NumError: On malformed text or when the value overflows the width.
    """

    if "_" in text or text != text.strip():
        raise NumError("parse_float", text, NumError.SYNTAX)
    try:
        value = float(text)
    except ValueError:
        raise NumError("parse_float", text, NumError.SYNTAX) from None

    if math.isinf(value) and text.lower() not in _INF_TOKENS:
        raise NumError("parse_float", text, NumError.RANGE)
    if bits == 32 and math.isfinite(value):
        if abs(value) > _FLOAT32_MAX:
            raise NumError("parse_float", text, NumError.RANGE)
        value = struct.unpack(">f", struct.pack(">f", value))[0]
    return value


def parse_complex(text: str, bits: int = 128) -> complex:
    """Parse a complex literal such as `(64+3i)`, `64+3i`, `3i`, or `64`.

    Both the `i` and the `j` imaginary suffix are accepted. For `bits == 64`
    each component is checked and rounded as a single-precision float.

    Raises:
        NumError: On malformed text or component overflow.
    """

    body = text
    if len(body) >= 2 and body.startswith("(") and body.endswith(")"):
        body = body[1:-1]
    if body.endswith("i"):
        body = body[:-1] + "j"
    if not body or "_" in body or body != body.strip():
        raise NumError("parse_complex", text, NumError.SYNTAX)
    try:
        value = complex(body)
    except ValueError:
        raise NumError("parse_complex", text, NumError.SYNTAX) from None

    component_bits = bits // 2
    try:
        real = _fit_component(value.real, component_bits)
        imag = _fit_component(value.imag, component_bits)
    except OverflowError:
        raise NumError("parse_complex", text, NumError.RANGE) from None
    return complex(real, imag)


def _fit_component(value: float, bits: int) -> float:
    """Round one complex component to the destination width."""

    if bits != 32 or not math.isfinite(value):
        return value
    if abs(value) > _FLOAT32_MAX:
        raise OverflowError(value)
    return struct.unpack(">f", struct.pack(">f", value))[0]
