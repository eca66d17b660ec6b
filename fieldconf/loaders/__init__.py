"""Configuration sources: defaults, environment, flags, and required-field validation."""

from .defaults import set_defaults
from .envs import env_variable_name, load_envs, prepare_envs, usage_of_envs
from .flags import find_config_path, load_flags, prepare_flags
from .required import collect_missing_fields, validate_required_fields

__all__ = [
    "collect_missing_fields",
    "env_variable_name",
    "find_config_path",
    "load_envs",
    "load_flags",
    "prepare_envs",
    "prepare_flags",
    "set_defaults",
    "usage_of_envs",
    "validate_required_fields",
]
