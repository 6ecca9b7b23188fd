"""
shapeclone config package public API.

File: src/shapeclone/config/__init__.py

Purpose
- Export config loading/validation entrypoints and the field rule table.
"""

from shapeclone.config.loader import (
    DEFAULT_CONFIG_FILE,
    ENV_PREFIX,
    ConfigLoadError,
    dump_effective_config,
    env_variable_for,
    load_config,
)
from shapeclone.config.schema import (
    DEFAULT_CONFIG,
    FIELD_RULES,
    ConfigValidationError,
    ConfigValidationIssue,
    ConfigValidationResult,
    FieldRule,
    ShapeCloneConfig,
    assert_valid_config,
    default_config,
    validate_config,
)

__all__ = [
    "ConfigLoadError",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "DEFAULT_CONFIG",
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "FIELD_RULES",
    "FieldRule",
    "ShapeCloneConfig",
    "assert_valid_config",
    "default_config",
    "dump_effective_config",
    "env_variable_for",
    "load_config",
    "validate_config",
]
