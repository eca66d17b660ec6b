"""Environment-variable source.

Responsibilities:
- Turn `NAME=VALUE` entries into a nested tree keyed by `_`-separated segments.
- Decode such a tree into a record by matching field `env` names.
- Render the environment section of help output.

Key public functions:
- `prepare_envs`: build the environment tree from raw entries.
- `load_envs`: decode a tree into a mutable record.
- `usage_of_envs`: list the variables a record understands.
"""

from __future__ import annotations

import dataclasses
import typing
from typing import Any, Callable, Iterable, Mapping

from loguru import logger

from ..coercion import coerce, coerce_or_zero
from ..errors import ConfigError, EnvDecodeError, FieldError, ShapeError
from ..kinds import (
    Kind,
    Uint8,
    kind_of,
    new_record,
    optional_inner,
    record_hints,
    strip_annotated,
    type_name,
    zero_value,
)
from ..reflection import FieldNode, ReflectOptions, ensure_record, reflect_fields_of
from ..tags import DEFAULT_TAG, env_name


ENV_PAIR_DELIM = "="
ENV_DELIMITER = "_"
SQUASH_OPTION = "squash"

DecodeHook = Callable[[Any, Any], Any]


def prepare_envs(envs: Iterable[str], prefix: str = "") -> dict[str, Any]:
    """Build a nested environment tree from `NAME=VALUE` entries.

    Every multi-segment name is stored both flat (`A_B`) and nested
    (`A -> B`), at every level of the tree.

    Args:
        envs: Raw `NAME=VALUE` entries, e.g. from `os.environ`.
        prefix: Only entries starting with it are kept; `prefix_` is stripped.

    Returns:
        Mapping whose values are strings or nested mappings.
    """

    tree: dict[str, Any] = {}
    for entry in envs:
        if prefix and not entry.startswith(prefix):
            continue
        if prefix:
            entry = entry.removeprefix(prefix + ENV_DELIMITER)

        name, sep, value = entry.partition(ENV_PAIR_DELIM)
        if not sep:
            logger.debug("skipping environment entry without '=': {!r}", name)
            continue
        _insert(tree, name.split(ENV_DELIMITER), value)
    return tree


def _insert(tree: dict[str, Any], keys: list[str], value: str) -> None:
    if len(keys) == 1:
        tree[keys[0]] = value
        return

    tree[ENV_DELIMITER.join(keys)] = value
    nested = tree.setdefault(keys[0], {})
    if isinstance(nested, dict):
        _insert(nested, keys[1:], value)


def string_to_sequence_hook(tp: Any, value: Any) -> Any:
    """Split comma-separated text for sequence destinations and decode each piece."""

    if not isinstance(value, str) or kind_of(tp) is not Kind.SEQUENCE:
        return value

    base, _ = strip_annotated(tp)
    element = Uint8 if base is bytes else typing.get_args(base)[0]
    items = [string_to_value_hook(element, piece) for piece in value.split(",") if piece]
    if base is bytes:
        return bytes(items)
    if typing.get_origin(base) is tuple:
        return tuple(items)
    return items


def string_to_value_hook(tp: Any, value: Any) -> Any:
    """Coerce remaining text through the type-directed conversion rules."""

    if not isinstance(value, str):
        return value
    return coerce(tp, value)


def compose_hooks(*hooks: DecodeHook) -> DecodeHook:
    """Chain decode hooks; each one receives the output of the previous one."""

    def hook(tp: Any, value: Any) -> Any:
        for item in hooks:
            value = item(tp, value)
        return value

    return hook


DEFAULT_DECODE_HOOK = compose_hooks(string_to_sequence_hook, string_to_value_hook)


def load_envs(envs: Mapping[str, Any], dest: Any, hook: DecodeHook = DEFAULT_DECODE_HOOK) -> None:
    """Decode an environment tree into `dest`.

    Fields match their `env` name, or their attribute name when untagged,
    exactly first and then case-insensitively. Non-empty values override
    whatever the field already holds.

    Raises:
        EnvDecodeError: If `dest` is not a mutable record or a value does not fit.
    """

    try:
        ensure_record(dest)
    except ShapeError as exc:
        raise EnvDecodeError(f"could not prepare decoder: {exc}") from exc

    try:
        _decode_record(envs, dest, hook)
    except (ConfigError, ValueError, ArithmeticError) as exc:
        raise EnvDecodeError(f"could not decode: {exc}") from exc


def _decode_record(tree: Mapping[str, Any], record: Any, hook: DecodeHook) -> None:
    hints = record_hints(type(record))
    for item in dataclasses.fields(record):
        node = FieldNode(name=item.name, type=hints[item.name], field=item, holder=record)
        if not node.can_set:
            continue

        name, options = env_name(item.metadata)
        if SQUASH_OPTION in options and kind_of(node.type) is Kind.RECORD:
            _decode_record(tree, _nested_record(node), hook)
            continue

        key = _match_key(tree, name or item.name)
        if key is None:
            continue
        _decode_value(node, key, tree[key], hook)


def _decode_value(node: FieldNode, key: str, value: Any, hook: DecodeHook) -> None:
    target = optional_inner(node.type) or node.type
    if kind_of(target) is Kind.RECORD:
        if not isinstance(value, Mapping):
            raise EnvDecodeError(f"'{key}' expected a map, got '{type(value).__name__}'")
        _decode_record(value, _nested_record(node), hook)
        return

    if isinstance(value, Mapping):
        if kind_of(target) is not Kind.MAPPING:
            raise EnvDecodeError(
                f"'{key}' expected type '{type_name(node.type)}', got unconvertible type 'dict'"
            )
        node.set(_decode_mapping(node, target, value, hook))
        return

    if value == "":
        return
    try:
        node.set(hook(node.type, value))
    except (ConfigError, ValueError, ArithmeticError) as exc:
        raise FieldError(node.name, exc) from exc


def _decode_mapping(node: FieldNode, tp: Any, tree: Mapping[str, Any], hook: DecodeHook) -> dict[Any, Any]:
    """Decode a nested sub-tree into a mapping destination, keeping only leaf entries."""

    base, _ = strip_annotated(tp)
    key_type, value_type = typing.get_args(base)
    result: dict[Any, Any] = {}
    for key, value in tree.items():
        if isinstance(value, Mapping):
            continue
        try:
            decoded = zero_value(value_type) if value == "" else hook(value_type, value)
            result[coerce_or_zero(key_type, key)] = decoded
        except (ConfigError, ValueError, ArithmeticError) as exc:
            raise FieldError(node.name, exc) from exc
    return result


def _nested_record(node: FieldNode) -> Any:
    current = node.get()
    if current is None:
        target = optional_inner(node.type) or node.type
        current = new_record(strip_annotated(target)[0])
        node.set(current)
    return current


def _match_key(tree: Mapping[str, Any], name: str) -> str | None:
    if name in tree:
        return name
    lowered = name.lower()
    for key in tree:
        if key.lower() == lowered:
            return key
    return None


def env_variable_name(node: FieldNode, prefix: str = "") -> str:
    """Return the environment variable name of a leaf, or an empty string when it has none.

    The name joins the `env` names along the owner chain with `_`.
    """

    parts = [env_name(item.metadata)[0] for item in node.chain()]
    name = ENV_DELIMITER.join(part for part in reversed(parts) if part)
    if name and prefix:
        return f"{prefix}{ENV_DELIMITER}{name}"
    return name


def usage_of_envs(dest: Any, prefix: str = "") -> str:
    """Render help lines for every environment variable `dest` understands.

    A variable name joins the `env` names along the field's owner chain with
    `_`. Fields without an `env` name anywhere on the chain are omitted.

    Returns:
        The rendered section, or an empty string when `dest` is not a mutable record.
    """

    lines: list[str] = []
    seen: set[str] = set()
    for node, err in reflect_fields_of(dest, ReflectOptions(can_set=True)):
        if err is not None:
            return ""

        name = env_variable_name(node, prefix)
        if not name or name in seen:
            continue
        seen.add(name)

        usage = node.options.usage
        description = f" - {usage}" if usage else ""
        default = node.options.lookup(DEFAULT_TAG)
        if default:
            description += f" (default: {default})"

        lines.append(f"  - '{name}' <{type_name(node.type)}>{description}")

    return "Environment variables:\n" + "\n".join(lines)
