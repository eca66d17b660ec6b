"""Required-field validation across a whole record graph."""

from __future__ import annotations

from typing import Any

from ..errors import MissingField, MissingRequiredFieldsError, SourceError
from ..kinds import is_zero, type_name
from ..reflection import ReflectOptions, reflect_fields_of


STAGE = "require"


def collect_missing_fields(dest: Any) -> list[MissingField]:
    """Return every public required leaf of `dest` that still holds its zero value.

    Fields are reported in traversal order: top-level fields first, then the
    fields of nested records level by level.
    """

    missing: list[MissingField] = []
    for node, err in reflect_fields_of(dest, ReflectOptions(can_interface=True)):
        if err is not None:
            raise SourceError(stage=STAGE, detail=str(err)) from err
        if not node.options.required:
            continue
        if not is_zero(node.get(), node.type):
            continue
        missing.append(
            MissingField(field=node.name, type=type_name(node.type), path=node.path)
        )
    return missing


def validate_required_fields(dest: Any) -> None:
    """Raise one aggregated error when any required field of `dest` is unset.

    Raises:
        SourceError: If `dest` is not a mutable record.
        MissingRequiredFieldsError: Listing every missing field.
    """

    missing = collect_missing_fields(dest)
    if missing:
        raise MissingRequiredFieldsError(missing)
