"""Domain exceptions for record traversal, coercion, and source loading.

Responsibilities:
- Expose one exception type per failure category so callers can branch on type.
- Keep message formats stable where users and tests match on them.

Key types:
- `ConfigError`: base for every error raised by `fieldconf`.
- `ShapeError`: wrong root value handed to a traversal.
- `NumError`: numeric/boolean text that could not be parsed.
- `FieldError`: coercion failure wrapped with the field name.
- `MissingRequiredFieldsError`: aggregated required-field report.
- `SourceError`: stage-scoped failure raised by source loaders.
"""

from __future__ import annotations

from dataclasses import dataclass


class ConfigError(Exception):
    """Base class for all `fieldconf` errors."""


class ShapeError(ConfigError, TypeError):
    """Raised when a traversal root is not a mutable record."""

    prefix = "expect record"

    def __init__(self, kind: str) -> None:
        """Initialize a shape error for the offending value kind."""

        super().__init__(f'{self.prefix}, got "{kind}"')
        self.kind = kind


class ExpectPointerError(ShapeError):
    """Raised when the root cannot be mutated in place."""

    prefix = "expect pointer"


class ExpectStructError(ShapeError):
    """Raised when the root is mutable but is not a record."""

    prefix = "expect struct field"


class NumError(ConfigError, ValueError):
    """Raised when numeric, boolean, or complex text cannot be parsed.

    Attributes:
        func: Name of the parser that failed (`parse_int`, `parse_bool`, ...).
        num: The offending input text.
        err: Cause description (`invalid syntax` or `value out of range`).
    """

    SYNTAX = "invalid syntax"
    RANGE = "value out of range"

    def __init__(self, func: str, num: str, err: str) -> None:
        """Initialize a structured parse error."""

        super().__init__(f'parsing "{num}": {err}')
        self.func = func
        self.num = num
        self.err = err


class ArrayLengthError(ConfigError, ValueError):
    """Raised when more comma segments are given than a fixed array holds."""

    def __init__(self, capacity: int) -> None:
        """Initialize with the fixed capacity of the destination."""

        super().__init__(f"array length exceeds {capacity} elements")
        self.capacity = capacity


class UnsupportedTypeError(ConfigError, TypeError):
    """Raised when no coercion exists for a destination type."""

    def __init__(self, type_name: str) -> None:
        """Initialize with a printable destination type name."""

        super().__init__(f"unsupported type: {type_name}")
        self.type_name = type_name


class InvalidAddressError(ConfigError, ValueError):
    """Raised for malformed IP address, mask, or CIDR text."""


class DurationError(ConfigError, ValueError):
    """Raised for malformed duration text."""


class FieldError(ConfigError):
    """Coercion failure wrapped with the name of the field being filled."""

    def __init__(self, field: str, cause: Exception) -> None:
        """Initialize a field-scoped wrapper around `cause`."""

        super().__init__(f'failed to set field "{field}": {cause}')
        self.field = field
        self.cause = cause


class EnvDecodeError(ConfigError, ValueError):
    """Raised when an environment tree does not fit the destination record."""


class FlagError(ConfigError, ValueError):
    """Raised when a record cannot be bound to, or parsed from, command-line flags."""


class HelpRequested(ConfigError):
    """Raised by the flag source after help output was printed for `--help`."""

    def __init__(self, command: str) -> None:
        """Initialize for the command whose help was shown."""

        super().__init__(f"help requested for {command}")
        self.command = command


@dataclass(frozen=True, slots=True)
class MissingField:
    """One required field that still holds its zero value.

    Attributes:
        field: Attribute name of the field.
        type: Printable type name of the field.
        path: Dotted attribute path from the root record.
    """

    field: str
    type: str
    path: str

    def __str__(self) -> str:
        if self.field == self.path:
            return f"field `{self.field}` <{self.type}> is required"
        return f"field `{self.field}` <{self.type}> in path `{self.path}` is required"


class MissingRequiredFieldsError(ConfigError):
    """Aggregated report of every required field left unset."""

    def __init__(self, missing: list[MissingField]) -> None:
        """Initialize from the ordered list of missing fields."""

        lines = ["missing required fields:", *(str(item) for item in missing)]
        super().__init__("\n\t- ".join(lines))
        self.missing = list(missing)


class SourceError(ConfigError):
    """Raised when a specific configuration source fails."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped source error."""

        super().__init__(f"({stage}) {detail}")
        self.stage = stage
        self.detail = detail
        self.hint = hint
