"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
field listings, and JSON rendering of loaded records.
"""

from __future__ import annotations

import dataclasses
from datetime import timedelta
import enum
import json
import typing
from typing import Any, NoReturn

import typer

from .cli_runtime import FieldRow
from .durations import format_duration
from .errors import SourceError
from .kinds import optional_inner, record_hints, strip_annotated
from .netaddr import IPMask, mask_prefix_length


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, SourceError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_field_rows(rows: list[FieldRow]) -> None:
    """Print one deterministic line per record leaf."""

    if not rows:
        typer.echo("No fields.")
        return
    for row in rows:
        tokens = [f"{row.path} <{row.type}>"]
        if row.flag:
            tokens.append(f"flag=--{row.flag}")
        if row.env:
            tokens.append(f"env={row.env}")
        if row.default:
            tokens.append(f"default={row.default}")
        if row.required:
            tokens.append("required")
        typer.echo(" ".join(tokens))


def echo_json(payload: Any) -> None:
    """Print a JSON document with sorted keys."""

    typer.echo(json.dumps(payload, indent=2, sort_keys=True))


def record_to_jsonable(record: Any) -> dict[str, Any]:
    """Convert a loaded record into JSON-compatible values, guided by its field types."""

    hints = record_hints(type(record))
    return {
        item.name: to_jsonable(getattr(record, item.name), hints[item.name])
        for item in dataclasses.fields(record)
    }


def to_jsonable(value: Any, tp: Any) -> Any:
    """Convert one field value into a JSON-compatible value."""

    base, _ = strip_annotated(tp)
    if value is None:
        return None
    if base is IPMask:
        return f"/{mask_prefix_length(value)}"
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return record_to_jsonable(value)
    if isinstance(value, enum.Enum):
        return value.name
    if isinstance(value, (int, float, str)):
        return value
    if isinstance(value, timedelta):
        return format_duration(value)
    if isinstance(value, bytes):
        return value.hex()

    inner = optional_inner(base)
    if inner is not None:
        return to_jsonable(value, inner)

    args = typing.get_args(base)
    if isinstance(value, dict):
        value_type = args[1] if len(args) == 2 else Any
        return {str(key): to_jsonable(item, value_type) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        if typing.get_origin(base) is tuple and Ellipsis not in args and len(args) == len(value):
            return [to_jsonable(item, element) for item, element in zip(value, args)]
        element = args[0] if args else Any
        return [to_jsonable(item, element) for item in value]
    return str(value)
