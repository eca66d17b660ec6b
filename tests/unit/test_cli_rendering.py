"""Unit tests for CLI output and error rendering helpers."""

from __future__ import annotations

from datetime import timedelta
from ipaddress import IPv4Address
import json

import pytest
import typer

from fieldconf.cli_rendering import (
    echo_field_rows,
    echo_json,
    exit_with_command_error,
    record_to_jsonable,
    to_jsonable,
)
from fieldconf.cli_runtime import FieldRow
from fieldconf.errors import SourceError
from fieldconf.kinds import new_record
from fieldconf.loaders.defaults import set_defaults
from fieldconf.netaddr import IPMask
from tests.records import Collections, ServiceConfig


def test_exit_with_command_error_renders_stage_error_with_hint(
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Renderer should print stage diagnostics and hint before exiting with code 1."""

    error = SourceError(
        stage="target",
        detail="Invalid record target `broken`.",
        hint="Use the `package.module:ClassName` form.",
    )

    with pytest.raises(typer.Exit) as exc_info:
        exit_with_command_error("load", error)

    captured = capsys.readouterr()
    assert exc_info.value.exit_code == 1
    assert "load failed at stage `target`: Invalid record target `broken`." in captured.err
    assert "Hint: Use the `package.module:ClassName` form." in captured.err


def test_exit_with_command_error_renders_non_stage_fallback(
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Renderer should print fallback exception text for non-stage failures."""

    with pytest.raises(typer.Exit) as exc_info:
        exit_with_command_error("fields", RuntimeError("unexpected record error"))

    captured = capsys.readouterr()
    assert exc_info.value.exit_code == 1
    assert "fields failed: unexpected record error" in captured.err


def test_echo_field_rows_prints_bindings(capsys: pytest.CaptureFixture[str]) -> None:
    """Each row should list only the bindings it has."""

    echo_field_rows(
        [
            FieldRow(path="port", type="int", flag="port", env="APP_PORT", default="8080", required=False),
            FieldRow(path="db.token", type="str", flag="", env="", default="", required=True),
        ]
    )

    assert capsys.readouterr().out.splitlines() == [
        "port <int> flag=--port env=APP_PORT default=8080",
        "db.token <str> required",
    ]


def test_echo_field_rows_reports_empty_listing(capsys: pytest.CaptureFixture[str]) -> None:
    """An empty listing should print a placeholder line."""

    echo_field_rows([])

    assert capsys.readouterr().out == "No fields.\n"


def test_echo_json_sorts_keys(capsys: pytest.CaptureFixture[str]) -> None:
    """JSON output should be indented with sorted keys."""

    echo_json({"b": 1, "a": {"d": 2, "c": 3}})

    assert capsys.readouterr().out == '{\n  "a": {\n    "c": 3,\n    "d": 2\n  },\n  "b": 1\n}\n'


def test_record_to_jsonable_renders_special_values() -> None:
    """Loaded values should be rendered as their textual forms."""

    config = new_record(ServiceConfig)
    set_defaults(config)
    config.secret = b"hi"

    payload = record_to_jsonable(config)

    assert payload["level"] == "INFO"
    assert payload["bind"] == "127.0.0.1"
    assert payload["allow"] == "10.0.0.0/8"
    assert payload["mask"] == "/24"
    assert payload["secret"] == "6869"
    assert payload["db"] == {"host": "localhost", "port": 5432, "timeout": "5s"}
    assert payload["limits"] == {"burst": 10, "ratio": 0.5}
    json.dumps(payload)


def test_record_to_jsonable_renders_collections() -> None:
    """Sequences, arrays, and mappings should become JSON lists and objects."""

    record = new_record(Collections)
    set_defaults(record)

    assert record_to_jsonable(record) == {
        "items": [1, 2, 3],
        "triple": [0, 5, 6],
        "pair": ["a", "b"],
        "weights": {"key1": 100, "key2": 200},
        "raw": "6869",
    }


def test_to_jsonable_handles_optional_and_unset_values() -> None:
    """`None` should stay `None`; masks and durations should render as text."""

    assert to_jsonable(None, IPMask) is None
    assert to_jsonable(IPv4Address("255.255.0.0"), IPMask) == "/16"
    assert to_jsonable(timedelta(minutes=1, seconds=30), timedelta | None) == "1m30s"
