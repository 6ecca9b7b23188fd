"""
shapeclone — runtime config loader.

File: src/shapeclone/config/loader.py

Purpose
- Build the effective config from four layers, later layers winning:
  built-in defaults, ``shapeclone.toml``, ``SHAPECLONE_*`` environment
  variables, and ``section.field`` overrides passed by the CLI.

Every overridable field in ``FIELD_RULES`` has exactly one environment
variable, ``SHAPECLONE_<SECTION>_<FIELD>``; string values from the
environment or the command line are coerced with the field's rule type.
"""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Final

from shapeclone.config.schema import (
    FIELD_RULES,
    FieldRule,
    assert_valid_config,
    default_config,
    find_rule,
    merge_config,
)

DEFAULT_CONFIG_FILE: Final[str] = "shapeclone.toml"
ENV_PREFIX: Final[str] = "SHAPECLONE_"

_BOOLEAN_WORDS: Final[dict[str, bool]] = {
    **dict.fromkeys(("1", "true", "yes", "on"), True),
    **dict.fromkeys(("0", "false", "no", "off"), False),
}


class ConfigLoadError(ValueError):
    """Raised when a config file or override cannot be read or coerced."""


def load_config(
    config_path: str | Path | None = None,
    *,
    cli_overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Return the validated effective config.

    An explicit ``config_path`` must exist; without one, ``./shapeclone.toml``
    is used when present. Validation runs once, on the merged result.
    """

    layers = (
        default_config(),
        _read_config_file(config_path),
        env_overrides(os.environ if environ is None else environ),
        _cli_layer(cli_overrides or {}),
    )
    effective: dict[str, Any] = {}
    for layer in layers:
        effective = merge_config(effective, layer)
    return assert_valid_config(effective)


def env_variable_for(rule: FieldRule) -> str:
    return f"{ENV_PREFIX}{rule.section}_{rule.name}".upper()


def env_overrides(environ: Mapping[str, str]) -> dict[str, dict[str, object]]:
    """Collect typed overrides from ``SHAPECLONE_*`` variables."""

    layer: dict[str, dict[str, object]] = {}
    for rule in _overridable_rules():
        name = env_variable_for(rule)
        if name in environ:
            value = coerce_override(rule, environ[name], source=name)
            layer.setdefault(rule.section, {})[rule.name] = value
    return layer


def coerce_override(rule: FieldRule, raw: object, *, source: str) -> object:
    """Convert a textual override to the rule's type; non-strings pass through."""

    if not isinstance(raw, str):
        return raw
    text = raw.strip()
    if rule.kind is bool:
        try:
            return _BOOLEAN_WORDS[text.lower()]
        except KeyError:
            words = "/".join(_BOOLEAN_WORDS)
            raise ConfigLoadError(f"{source} -> {rule.path} must be a boolean ({words})") from None
    if rule.kind is int:
        try:
            return int(text)
        except ValueError as exc:
            raise ConfigLoadError(f"{source} -> {rule.path} must be an integer") from exc
    return text


def dump_effective_config(config: Mapping[str, object], *, indent: int | None = None) -> str:
    """Serialize ``config`` with sorted keys; compact unless ``indent`` is given."""

    separators = (",", ":") if indent is None else (",", ": ")
    return json.dumps(config, sort_keys=True, indent=indent, separators=separators)


def _read_config_file(config_path: str | Path | None) -> dict[str, Any]:
    if config_path is None:
        path = Path.cwd() / DEFAULT_CONFIG_FILE
        if not path.is_file():
            return {}
    else:
        path = Path(config_path).expanduser()
        if not path.is_file():
            raise ConfigLoadError(f"config file not found: {path}")

    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"invalid TOML in {path}: {exc}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigLoadError(f"unable to read config file {path}: {exc}") from exc


def _cli_layer(overrides: Mapping[str, object]) -> dict[str, dict[str, object]]:
    layer: dict[str, dict[str, object]] = {}
    for dotted, raw in overrides.items():
        rule = find_rule(dotted.strip())
        if rule is None or not rule.overridable:
            raise ConfigLoadError(f"unknown config override {dotted!r}")
        value = coerce_override(rule, raw, source=f"--set {dotted}")
        layer.setdefault(rule.section, {})[rule.name] = value
    return layer


def _overridable_rules() -> Iterable[FieldRule]:
    return (rule for rule in FIELD_RULES if rule.overridable)


__all__ = [
    "ConfigLoadError",
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "coerce_override",
    "dump_effective_config",
    "env_overrides",
    "env_variable_for",
    "load_config",
]
