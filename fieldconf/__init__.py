"""Top-level package for fieldconf.

fieldconf fills dataclass records from field metadata defaults, environment
variables, and command-line flags, then validates required fields. The main
entry point is `Loader`.
"""

from loguru import logger

from .coercion import assign_text, coerce
from .errors import (
    ConfigError,
    ExpectPointerError,
    ExpectStructError,
    FieldError,
    MissingRequiredFieldsError,
    NumError,
    ShapeError,
    SourceError,
)
from .kinds import (
    Complex64,
    Complex128,
    Float32,
    Float64,
    Int8,
    Int16,
    Int32,
    Int64,
    Uint,
    Uint8,
    Uint16,
    Uint32,
    Uint64,
    new_record,
)
from .loader import (
    Loader,
    LoaderConfig,
    ParserType,
    load,
    new_custom_parser,
    with_custom_parser,
    with_custom_parser_init,
    with_options,
)
from .loaders import (
    find_config_path,
    load_envs,
    load_flags,
    prepare_envs,
    prepare_flags,
    set_defaults,
    usage_of_envs,
    validate_required_fields,
)
from .netaddr import IPAddress, IPMask, IPNetwork
from .reflection import FieldNode, ReflectOptions, reflect_fields_of
from .tags import TagOptions, parse_tag_options, setting

logger.disable("fieldconf")

__all__ = [
    "Complex64",
    "Complex128",
    "ConfigError",
    "ExpectPointerError",
    "ExpectStructError",
    "FieldError",
    "FieldNode",
    "Float32",
    "Float64",
    "IPAddress",
    "IPMask",
    "IPNetwork",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "Loader",
    "LoaderConfig",
    "MissingRequiredFieldsError",
    "NumError",
    "ParserType",
    "ReflectOptions",
    "ShapeError",
    "SourceError",
    "TagOptions",
    "Uint",
    "Uint8",
    "Uint16",
    "Uint32",
    "Uint64",
    "__version__",
    "assign_text",
    "coerce",
    "find_config_path",
    "load",
    "load_envs",
    "load_flags",
    "new_custom_parser",
    "new_record",
    "parse_tag_options",
    "prepare_envs",
    "prepare_flags",
    "reflect_fields_of",
    "set_defaults",
    "setting",
    "usage_of_envs",
    "validate_required_fields",
    "with_custom_parser",
    "with_custom_parser_init",
    "with_options",
]

__version__ = "0.1.0"
