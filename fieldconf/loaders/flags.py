"""Command-line flag source built on `click`.

Responsibilities:
- Bind every record leaf carrying a flag name to a `click` option.
- Route parsed option text through the type-directed conversion rules.
- Discover the configuration-file path flag without parsing the rest.

Key public functions:
- `prepare_flags`: build a `click.Command` bound to a record.
- `load_flags`: parse arguments into a record.
- `find_config_path`: read the value of the `config:true` flag.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from typing import Any, Sequence

import click
from click.core import ParameterSource

from ..coercion import assign_text
from ..errors import FieldError, FlagError, HelpRequested, SourceError
from ..kinds import Kind, is_zero, kind_of, strip_annotated, type_name
from ..reflection import FieldNode, ReflectOptions, reflect_fields_of
from ..tags import TagOptions


STAGE = "flags"
CONFIG_STAGE = "config-path"
FLAG_SET_NAME = "flags"
BASE_HEX = "hex"
BASE_B64 = "b64"

_NO_SHORT = ("", "-")


@dataclass(frozen=True, slots=True)
class FlagBinding:
    """One `click` option bound to a record leaf.

    Attributes:
        param: Identifier of the `click` parameter.
        node: Leaf receiving the parsed value.
        options: Parsed metadata of the leaf.
    """

    param: str
    node: FieldNode
    options: TagOptions

    def apply(self, value: Any) -> None:
        """Store a parsed option value in the bound leaf, overriding earlier sources."""

        base, _ = strip_annotated(self.node.type)
        if base is bool:
            self.node.set(bool(value))
            return
        if base is bytes:
            self.node.set(_decode_bytes(self.options.encode_base, value))
            return

        text = ",".join(value) if isinstance(value, tuple) else value
        assign_text(self.node, text, override=True)


def _decode_bytes(encode_base: str, text: str) -> bytes:
    try:
        if encode_base == BASE_HEX:
            return bytes.fromhex(text)
        return base64.b64decode(text, validate=True)
    except (ValueError, binascii.Error) as exc:
        raise FlagError(f'invalid {encode_base} bytes "{text}"') from exc


def _option_decls(options: TagOptions, param: str, is_bool: bool) -> list[str]:
    long_name = f"--{options.full_name}"
    if is_bool:
        long_name = f"{long_name}/--no-{options.full_name}"
    decls = [long_name]
    if options.short_name not in _NO_SHORT:
        decls.append(f"-{options.short_name}")
    decls.append(param)
    return decls


def _make_option(binding: FlagBinding) -> click.Option:
    node = binding.node
    options = binding.options
    base, _ = strip_annotated(node.type)
    current = node.get()
    show_default: bool | str = False
    if not is_zero(current, node.type):
        show_default = str(current)

    if base is bool:
        return click.Option(
            _option_decls(options, binding.param, is_bool=True),
            help=options.usage or None,
            show_default=show_default,
        )

    if base is bytes and options.encode_base not in (BASE_HEX, BASE_B64):
        raise FlagError(f"unknown bytes decoding type: {options.encode_base}")

    return click.Option(
        _option_decls(options, binding.param, is_bool=False),
        type=click.STRING,
        default=None,
        multiple=kind_of(node.type) is Kind.SEQUENCE and base is not bytes,
        metavar=type_name(node.type),
        help=options.usage or None,
        show_default=show_default,
    )


def prepare_flags(dest: Any, as_field: tuple[Any, ...] = ()) -> click.Command:
    """Build a `click.Command` with one option per flagged leaf of `dest`.

    Parsing the command writes every option given on the command line into
    the bound leaf; options left out keep the current field values.

    Args:
        dest: Mutable record instance.
        as_field: Record types bound as a single opaque option.

    Raises:
        SourceError: On a malformed root, an invalid short alias, or an
            unsupported `bytes` encoding.
    """

    bindings: list[FlagBinding] = []
    params: list[click.Parameter] = []
    reflect_options = ReflectOptions(can_set=True, as_field=as_field, materialize=True)
    for node, err in reflect_fields_of(dest, reflect_options):
        if err is not None:
            raise SourceError(stage=STAGE, detail=str(err)) from err

        options = node.options
        if not options.full_name:
            continue
        if len(options.short_name) > 1:
            raise SourceError(
                stage=STAGE,
                detail=f'shorthand is more than one ASCII character "{options.short_name}"',
            )

        binding = FlagBinding(param=f"field_{len(bindings)}", node=node, options=options)
        try:
            params.append(_make_option(binding))
        except FlagError as exc:
            raise SourceError(stage=STAGE, detail=str(exc)) from exc
        bindings.append(binding)

    def callback(**values: Any) -> None:
        ctx = click.get_current_context()
        for binding in bindings:
            if ctx.get_parameter_source(binding.param) is not ParameterSource.COMMANDLINE:
                continue
            try:
                binding.apply(values[binding.param])
            except (FieldError, FlagError) as exc:
                raise SourceError(stage=STAGE, detail=str(exc)) from exc

    return click.Command(
        FLAG_SET_NAME,
        params=params,
        callback=callback,
        context_settings={"allow_extra_args": True},
    )


def load_flags(dest: Any, args: Sequence[str], as_field: tuple[Any, ...] = ()) -> None:
    """Parse `args` into the flagged leaves of `dest`.

    Raises:
        SourceError: When binding fails, an argument is malformed, or a value
            does not coerce.
        HelpRequested: When `--help` was given; the help text is already printed.
    """

    command = prepare_flags(dest, as_field=as_field)
    try:
        with command.make_context(FLAG_SET_NAME, list(args)) as ctx:
            command.invoke(ctx)
    except click.exceptions.Exit as exc:
        raise HelpRequested(FLAG_SET_NAME) from exc
    except click.ClickException as exc:
        raise SourceError(stage=STAGE, detail=exc.format_message()) from exc


def find_config_path(dest: Any, args: Sequence[str]) -> str | None:
    """Return the value of the `config:true` flag of `dest` found in `args`.

    Unknown flags are ignored and `dest` is left untouched.

    Raises:
        SourceError: When the config flag is not bound to a `str` field or
            `args` cannot be parsed.
    """

    params: list[click.Parameter] = []
    for node, err in reflect_fields_of(dest, ReflectOptions(can_set=True)):
        if err is not None:
            raise SourceError(stage=CONFIG_STAGE, detail=f"could not fetch config flag: {err}") from err

        options = node.options
        if not options.config:
            continue
        if kind_of(node.type) is not Kind.STRING:
            raise SourceError(stage=CONFIG_STAGE, detail=f'expect string, got "{type_name(node.type)}"')
        if not params:
            params.append(click.Option(_option_decls(options, "config_path", is_bool=False), default=None))

    if not params:
        return None

    command = click.Command(
        "config",
        params=params,
        add_help_option=False,
        context_settings={"ignore_unknown_options": True, "allow_extra_args": True},
    )
    try:
        ctx = command.make_context("config", list(args))
    except click.ClickException as exc:
        raise SourceError(stage=CONFIG_STAGE, detail=f"could not parse flags: {exc.format_message()}") from exc
    return ctx.params.get("config_path")
