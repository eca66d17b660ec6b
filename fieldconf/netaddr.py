"""Network address, mask, and range parsing for record fields.

Key types:
- `IPAddress`: either IPv4 or IPv6 address.
- `IPNetwork`: either IPv4 or IPv6 network (CIDR range).
- `IPMask`: a 32-bit netmask stored as an `IPv4Address`.
"""

from __future__ import annotations

import ipaddress
from typing import Any, NewType, Union

from .errors import InvalidAddressError, NumError
from .parsing import parse_int


IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]
IPNetwork = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]
IPMask = NewType("IPMask", ipaddress.IPv4Address)

_MASK_BITS = 32
_MASK_SEPARATOR = "/"


def parse_ip(text: str) -> ipaddress.IPv4Address | ipaddress.IPv6Address:
    """Parse dotted IPv4 or colon-hex IPv6 text."""

    try:
        return ipaddress.ip_address(text)
    except ValueError:
        raise InvalidAddressError(f'invalid IP address "{text}"') from None


def parse_ipv4(text: str) -> ipaddress.IPv4Address:
    """Parse dotted IPv4 text, rejecting IPv6 addresses."""

    return _narrow(parse_ip(text), ipaddress.IPv4Address, f'invalid IP address "{text}"')


def parse_ipv6(text: str) -> ipaddress.IPv6Address:
    """Parse colon-hex IPv6 text, rejecting IPv4 addresses."""

    return _narrow(parse_ip(text), ipaddress.IPv6Address, f'invalid IP address "{text}"')


def parse_ip_mask(text: str) -> ipaddress.IPv4Address:
    """Parse `/<prefix-length>` text into a 32-bit netmask.

    Raises:
        InvalidAddressError: When the text does not start with `/`.
        NumError: When the prefix length is not a decimal integer or exceeds 32 bits.
    """

    if not text.startswith(_MASK_SEPARATOR):
        raise InvalidAddressError(f'invalid IP mask "{text}"')
    length_text = text[len(_MASK_SEPARATOR):]
    length = parse_int(length_text, bits=64)
    if not 0 <= length <= _MASK_BITS:
        raise NumError("parse_ip_mask", length_text, NumError.RANGE)
    mask = ((1 << length) - 1) << (_MASK_BITS - length)
    return ipaddress.IPv4Address(mask)


def parse_ip_network(text: str) -> ipaddress.IPv4Network | ipaddress.IPv6Network:
    """Parse CIDR text; host bits are masked off rather than rejected."""

    if "/" not in text:
        raise InvalidAddressError(f"invalid CIDR address: {text}")
    try:
        return ipaddress.ip_network(text, strict=False)
    except ValueError:
        raise InvalidAddressError(f"invalid CIDR address: {text}") from None


def parse_ipv4_network(text: str) -> ipaddress.IPv4Network:
    return _narrow(parse_ip_network(text), ipaddress.IPv4Network, f"invalid CIDR address: {text}")


def parse_ipv6_network(text: str) -> ipaddress.IPv6Network:
    return _narrow(parse_ip_network(text), ipaddress.IPv6Network, f"invalid CIDR address: {text}")


def _narrow(value: Any, cls: type, message: str) -> Any:
    if not isinstance(value, cls):
        raise InvalidAddressError(message)
    return value


def mask_prefix_length(mask: ipaddress.IPv4Address) -> int:
    """Return the number of leading one bits of a netmask."""

    value = int(mask)
    return _MASK_BITS - (value ^ ((1 << _MASK_BITS) - 1)).bit_length()
