"""Field metadata parsing and declaration helpers.

A record field carries its configuration metadata in `dataclasses.field`
metadata. The binding annotation lives under `flag` and follows the grammar
`name[,base:<enc>][,short:<ch>][,config:true]`; `usage`, `required`,
`default`, and `env` are separate keys.

Key types:
- `TagOptions`: parsed view of one field's metadata.
- `setting`: declares a record field together with its metadata.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Mapping


FLAG_TAG = "flag"
USAGE_TAG = "usage"
REQUIRED_TAG = "required"
DEFAULT_TAG = "default"
ENV_TAG = "env"

_BASE_PREFIX = "base:"
_SHORT_PREFIX = "short:"
_CONFIG_TOKEN = "config:true"

_EMPTY_TAG: Mapping[str, Any] = MappingProxyType({})


@dataclass(frozen=True, slots=True)
class TagOptions:
    """Parsed metadata of one record field.

    Attributes:
        full_name: Long flag name (first token of the `flag` annotation).
        short_name: One-character flag alias from `short:<ch>`.
        encode_base: Encoding hint from `base:<enc>` (`hex`, `b64`).
        config: Whether the flag carries the configuration file path.
        required: Whether the field must hold a non-zero value after loading.
        usage: Human-readable description of the field.
        tag: Raw metadata mapping for fallback lookups.
    """

    full_name: str = ""
    short_name: str = ""
    encode_base: str = ""
    config: bool = False
    required: bool = False
    usage: str = ""
    tag: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)

    def lookup(self, key: str) -> str:
        """Return the raw metadata value for `key`, or an empty string."""

        value = self.tag.get(key)
        if value is None:
            return ""
        return str(value)


def parse_tag_options(metadata: Mapping[str, Any] | None) -> TagOptions:
    """Parse field metadata into `TagOptions`.

    Unrecognized tokens of the binding annotation are ignored.
    """

    tag = metadata if metadata is not None else _EMPTY_TAG
    tokens = str(tag.get(FLAG_TAG) or "").split(",")

    encode_base = ""
    short_name = ""
    config = False
    for token in tokens:
        if token.startswith(_BASE_PREFIX):
            encode_base = token[len(_BASE_PREFIX):].strip()
            continue
        if token.startswith(_SHORT_PREFIX):
            short_name = token[len(_SHORT_PREFIX):].strip()
            continue
        if token.lower() == _CONFIG_TOKEN:
            config = True

    return TagOptions(
        full_name=tokens[0],
        short_name=short_name,
        encode_base=encode_base,
        config=config,
        required=str(tag.get(REQUIRED_TAG) or "") == "true",
        usage=str(tag.get(USAGE_TAG) or ""),
        tag=tag,
    )


def env_name(metadata: Mapping[str, Any] | None) -> tuple[str, set[str]]:
    """Split the `env` annotation into its name and option tokens (e.g. `squash`)."""

    raw = str((metadata or _EMPTY_TAG).get(ENV_TAG) or "")
    name, *options = raw.split(",")
    return name.strip(), {option.strip() for option in options if option.strip()}


def setting(
    *,
    flag: str | None = None,
    env: str | None = None,
    default: str | None = None,
    usage: str | None = None,
    required: bool | str | None = None,
    value: Any = dataclasses.MISSING,
    factory: Callable[[], Any] | Any = dataclasses.MISSING,
) -> Any:
    """Declare a record field with configuration metadata.

    Args:
        flag: Binding annotation, e.g. `"port,short:p"`.
        env: Environment name, optionally with `,squash`.
        default: Default text filled in when the field holds its zero value.
        usage: Field description for help output.
        required: `True`/`"true"` marks the field as required.
        value: Python default for the field.
        factory: Python default factory for the field.

    Returns:
        A `dataclasses.Field` to assign in a dataclass body.
    """

    metadata: dict[str, str] = {}
    if flag is not None:
        metadata[FLAG_TAG] = flag
    if env is not None:
        metadata[ENV_TAG] = env
    if default is not None:
        metadata[DEFAULT_TAG] = default
    if usage is not None:
        metadata[USAGE_TAG] = usage
    if required is not None:
        if isinstance(required, bool):
            metadata[REQUIRED_TAG] = "true" if required else "false"
        else:
            metadata[REQUIRED_TAG] = required

    return field(default=value, default_factory=factory, metadata=metadata)
