"""Default-value source: fill zero-valued fields from their `default` metadata."""

from __future__ import annotations

from typing import Any

from ..coercion import assign_text
from ..errors import FieldError, SourceError
from ..reflection import ReflectOptions, reflect_fields_of
from ..tags import DEFAULT_TAG


STAGE = "defaults"


def set_defaults(dest: Any, as_field: tuple[Any, ...] = ()) -> None:
    """Fill every settable zero-valued leaf of `dest` from its `default` text.

    Args:
        dest: Mutable record instance.
        as_field: Record types to fill as opaque values instead of descending.

    Raises:
        SourceError: On a malformed root or the first field that fails to coerce.
    """

    options = ReflectOptions(can_set=True, as_field=as_field, materialize=True)
    for node, err in reflect_fields_of(dest, options):
        if err is not None:
            raise SourceError(stage=STAGE, detail=str(err)) from err

        raw = node.options.lookup(DEFAULT_TAG)
        try:
            assign_text(node, raw)
        except FieldError as exc:
            raise SourceError(stage=STAGE, detail=str(exc)) from exc
