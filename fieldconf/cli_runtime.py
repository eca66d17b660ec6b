"""CLI runtime helpers.

This module isolates record class resolution and field inspection from the
command wiring layer.
"""

from __future__ import annotations

from dataclasses import dataclass
import importlib
import os
from typing import Any

from .errors import SourceError
from .kinds import is_record, new_record, type_name
from .loaders.envs import env_variable_name
from .reflection import ReflectOptions, reflect_fields_of
from .tags import DEFAULT_TAG


@dataclass(frozen=True, slots=True)
class FieldRow:
    """Printable summary of one record leaf.

    Attributes:
        path: Dotted attribute path from the root record.
        type: Printable type name.
        flag: Long flag name, or an empty string.
        env: Full environment variable name, or an empty string.
        default: Default text, or an empty string.
        required: Whether the field is required.
    """

    path: str
    type: str
    flag: str
    env: str
    default: str
    required: bool


def resolve_record_class(target: str) -> type:
    """Import a record class given as `package.module:ClassName`.

    Raises:
        SourceError: When the target is malformed, cannot be imported, or is
            not a dataclass.
    """

    module_name, sep, attribute = target.partition(":")
    if not sep or not module_name or not attribute:
        raise SourceError(
            stage="target",
            detail=f"Invalid record target `{target}`.",
            hint="Use the `package.module:ClassName` form.",
        )

    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise SourceError(
            stage="target",
            detail=f"Could not import module `{module_name}`: {exc}",
            hint="Check that the module is importable from the current environment.",
        ) from exc

    cls: Any = module
    for part in attribute.split("."):
        cls = getattr(cls, part, None)
        if cls is None:
            raise SourceError(
                stage="target",
                detail=f"Module `{module_name}` has no attribute `{attribute}`.",
            )

    if not is_record(cls):
        raise SourceError(
            stage="target",
            detail=f"`{target}` is not a dataclass.",
            hint="Point the target at a dataclass declared with `setting(...)` fields.",
        )
    return cls


def build_record(target: str) -> Any:
    """Resolve `target` and return a zero-valued instance of it."""

    return new_record(resolve_record_class(target))


def collect_field_rows(record: Any, env_prefix: str = "") -> list[FieldRow]:
    """Summarize every public leaf of `record` in traversal order."""

    rows: list[FieldRow] = []
    for node, err in reflect_fields_of(record, ReflectOptions(can_interface=True)):
        if err is not None:
            raise SourceError(stage="fields", detail=str(err)) from err
        options = node.options
        rows.append(
            FieldRow(
                path=node.path,
                type=type_name(node.type),
                flag=options.full_name,
                env=env_variable_name(node, env_prefix),
                default=options.lookup(DEFAULT_TAG),
                required=options.required,
            )
        )
    return rows


def process_env_entries() -> list[str]:
    """Return the process environment as `NAME=VALUE` entries."""

    return [f"{key}={value}" for key, value in os.environ.items()]
