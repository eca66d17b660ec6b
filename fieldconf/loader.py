"""Ordered application of configuration sources to one record.

Responsibilities:
- Resolve loader settings, falling back to the process environment and argv.
- Run the default, environment, flag, and custom parsers in a fixed order.
- Validate required fields once every source has been applied.

Key types:
- `LoaderConfig`: which sources run, in what order, and from which inputs.
- `ParserType`: identifiers of the built-in sources.
- `Parser`: protocol every source implements.
- `Loader`: orchestrates the parsers for one record.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
import enum
import os
import sys
from typing import Any, Callable, Iterable, Protocol, Sequence

import click

from .errors import ConfigError, HelpRequested, SourceError
from .loaders.defaults import set_defaults
from .loaders.envs import load_envs, prepare_envs, usage_of_envs
from .loaders.flags import find_config_path, load_flags
from .loaders.required import validate_required_fields
from .telemetry import LoadLogger


class ParserType(str, enum.Enum):
    """Identifiers of the built-in configuration sources."""

    DEFAULTS = "defaults"
    ENV = "env"
    FLAGS = "flags"


DEFAULT_LOADER_ORDER: tuple[str, ...] = (ParserType.DEFAULTS, ParserType.ENV, ParserType.FLAGS)


class Parser(Protocol):
    """A configuration source that fills a record in place."""

    @property
    def type(self) -> str:
        """Identifier used to order and replace the source."""

    def load(self, dest: Any) -> None:
        """Apply the source to `dest`."""


@dataclass(frozen=True, slots=True)
class FuncParser:
    """Parser backed by a plain callable.

    Attributes:
        type: Identifier of the source.
        call: Callable applying the source to a record.
    """

    type: str
    call: Callable[[Any], None]

    def load(self, dest: Any) -> None:
        """Apply the wrapped callable to `dest`."""

        self.call(dest)


def new_custom_parser(name: str, loader: Callable[[Any], None]) -> Parser:
    """Wrap `loader` as a parser identified by `name`."""

    return FuncParser(type=name, call=loader)


@dataclass(slots=True)
class LoaderConfig:
    """Settings controlling which sources run and what they read.

    Attributes:
        skip_defaults: Do not fill fields from their `default` metadata.
        skip_env: Do not read environment variables.
        skip_flags: Do not parse command-line flags.
        env_prefix: Only environment variables starting with it are read.
        loader_order: Parser identifiers in application order.
        envs: `NAME=VALUE` entries; `os.environ` when `None`.
        args: Command-line arguments; `sys.argv[1:]` when `None`.
    """

    skip_defaults: bool = False
    skip_env: bool = False
    skip_flags: bool = False
    env_prefix: str = ""
    loader_order: Sequence[str] | None = None
    envs: list[str] | None = None
    args: list[str] | None = None

    def resolved(self) -> LoaderConfig:
        """Return a copy with process fallbacks filled in."""

        return replace(
            self,
            loader_order=list(self.loader_order if self.loader_order is not None else DEFAULT_LOADER_ORDER),
            envs=list(self.envs) if self.envs is not None else [f"{key}={value}" for key, value in os.environ.items()],
            args=list(self.args) if self.args is not None else sys.argv[1:],
        )


LoaderOption = Callable[["Loader"], None]
ParserInit = Callable[[LoaderConfig], Parser]


def with_custom_parser(parser: Parser | None) -> LoaderOption:
    """Register `parser` under its type, replacing a built-in source of the same type."""

    def option(loader: Loader) -> None:
        if parser is None:
            return
        loader.parsers[parser.type] = parser

    return option


def with_custom_parser_init(factory: ParserInit) -> LoaderOption:
    """Build a parser from the resolved loader settings and register it."""

    def option(loader: Loader) -> None:
        parser = factory(loader.config)
        loader.parsers[parser.type] = parser

    return option


def with_options(options: Iterable[LoaderOption] | Callable[[], Iterable[LoaderOption]]) -> LoaderOption:
    """Apply a list of options, or the list returned by a callable.

    Raises:
        SourceError: When `options` is neither, or one of the options fails.
    """

    def option(loader: Loader) -> None:
        if callable(options):
            resolved = options()
        elif isinstance(options, (list, tuple)):
            resolved = options
        else:
            raise SourceError(stage="options", detail=f"invalid options type: {type(options).__name__}")

        for item in resolved:
            try:
                item(loader)
            except ConfigError as exc:
                raise SourceError(stage="options", detail=f"could not init options: {exc}") from exc

    return option


class Loader:
    """Apply configured sources to a record in order, then validate required fields.

    Example:
        >>> settings = new_record(Settings)
        >>> Loader(LoaderConfig(env_prefix="APP")).load(settings)
    """

    type = "loader"

    def __init__(
        self,
        config: LoaderConfig | None = None,
        *options: LoaderOption,
        exit_hook: Callable[[int], Any] = sys.exit,
        load_logger: LoadLogger | None = None,
    ) -> None:
        """Resolve settings and register the enabled built-in sources."""

        self.config = (config or LoaderConfig()).resolved()
        self.parsers: dict[str, Parser] = {}
        self._options = options
        self._exit = exit_hook
        self._logger = load_logger or LoadLogger()

        if not self.config.skip_defaults:
            self.parsers[ParserType.DEFAULTS] = new_custom_parser(ParserType.DEFAULTS, set_defaults)
        if not self.config.skip_env:
            self.parsers[ParserType.ENV] = new_custom_parser(ParserType.ENV, self._load_env)
        if not self.config.skip_flags:
            self.parsers[ParserType.FLAGS] = new_custom_parser(ParserType.FLAGS, self._load_flags)

    def load(self, dest: Any) -> None:
        """Apply options, run every parser in order, and validate required fields.

        Raises:
            SourceError: When an option fails, a parser is missing, or a source fails.
            MissingRequiredFieldsError: When required fields are still unset.
        """

        for option in self._options:
            try:
                option(self)
            except ConfigError as exc:
                raise SourceError(stage="options", detail=f"could not init option: {exc}") from exc

        for parser_type in self.config.loader_order:
            parser = self.parsers.get(parser_type)
            if parser is None:
                raise SourceError(stage="loader", detail=f"empty parser {_stage_name(parser_type)}")
            self._run(_stage_name(parser_type), parser, dest)

        self._run("require", new_custom_parser("require", validate_required_fields), dest)

    def config_path(self, dest: Any) -> str | None:
        """Return the configuration-file path given on the command line, if any."""

        return find_config_path(dest, self.config.args)

    def _run(self, stage: str, parser: Parser, dest: Any) -> None:
        self._logger.log_stage_start(stage)
        try:
            parser.load(dest)
        except ConfigError as exc:
            self._logger.log_stage_failure(stage, type(exc).__name__)
            raise
        self._logger.log_stage_complete(stage)

    def _load_env(self, dest: Any) -> None:
        load_envs(prepare_envs(self.config.envs, self.config.env_prefix), dest)

    def _load_flags(self, dest: Any) -> None:
        try:
            load_flags(dest, self.config.args)
        except HelpRequested:
            click.echo()
            click.echo(usage_of_envs(dest, self.config.env_prefix))
            self._exit(0)


def _stage_name(parser_type: str) -> str:
    if isinstance(parser_type, enum.Enum):
        return str(parser_type.value)
    return str(parser_type)


def load(dest: Any, config: LoaderConfig | None = None, *options: LoaderOption) -> None:
    """Load `dest` with a one-off `Loader`."""

    Loader(config, *options).load(dest)
