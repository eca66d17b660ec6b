"""Command-line interface for fieldconf.

Responsibilities:
- Inspect the fields a record class exposes to configuration sources.
- Preview the environment tree built from the current process.
- Load a record from defaults, environment, and arguments, and print it.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

from typing import Annotated, NoReturn

from loguru import logger
import typer

from .cli_rendering import (
    echo_field_rows,
    echo_json,
    exit_with_command_error,
    record_to_jsonable,
)
from .cli_runtime import build_record, collect_field_rows, process_env_entries
from .errors import ConfigError
from .loader import DEFAULT_LOADER_ORDER, Loader, LoaderConfig, ParserType
from .loaders.envs import prepare_envs
from .parsing import normalize_optional_string

app = typer.Typer(
    name="fieldconf",
    no_args_is_help=True,
    help="Inspect and load field-annotated configuration records.",
)

_TargetArgument = Annotated[
    str,
    typer.Argument(help="Record class as `package.module:ClassName`."),
]
_PrefixOption = Annotated[
    str,
    typer.Option("--prefix", help="Only read environment variables starting with this prefix."),
]


def _env_prefix(prefix: str) -> str:
    """Normalize the `--prefix` option; blank means no prefix."""

    return normalize_optional_string(prefix) or ""


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Print load-phase logs and debug diagnostics."),
    ] = False,
) -> None:
    """Configure logging for every command."""

    if verbose:
        logger.enable("fieldconf")


@app.command("fields")
def fields_command(
    target: _TargetArgument,
    prefix: _PrefixOption = "",
) -> None:
    """List the leaf fields of a record class with their bindings."""

    try:
        rows = collect_field_rows(build_record(target), env_prefix=_env_prefix(prefix))
    except ConfigError as exc:
        exit_with_command_error("fields", exc)
    echo_field_rows(rows)


@app.command("envs")
def envs_command(prefix: _PrefixOption = "") -> None:
    """Print the environment tree built from the current process as JSON."""

    echo_json(prepare_envs(process_env_entries(), _env_prefix(prefix)))


def _exit_from_help(code: int) -> NoReturn:
    raise typer.Exit(code=code)


@app.command(
    "load",
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
)
def load_command(
    ctx: typer.Context,
    target: _TargetArgument,
    prefix: _PrefixOption = "",
    skip_env: Annotated[
        bool,
        typer.Option("--skip-env", help="Do not read environment variables."),
    ] = False,
) -> None:
    """Load a record from defaults, environment, and trailing arguments, then print it."""

    try:
        record = build_record(target)
        order = [item for item in DEFAULT_LOADER_ORDER if not (skip_env and item is ParserType.ENV)]
        loader = Loader(
            LoaderConfig(
                env_prefix=_env_prefix(prefix),
                skip_env=skip_env,
                loader_order=order,
                args=list(ctx.args),
            ),
            exit_hook=_exit_from_help,
        )
        loader.load(record)
    except ConfigError as exc:
        exit_with_command_error("load", exc)
    echo_json(record_to_jsonable(record))


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
