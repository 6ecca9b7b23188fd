"""
shapeclone — configuration schema and validation.

File: src/shapeclone/config/schema.py

Purpose
- Define the configuration defaults and the rule for every field.

What is included in this file
- ``FieldRule`` table: one entry per ``section.field`` with its type, bounds or
  allowed values, and whether env/CLI overrides may set it.
- Validation into structured ``ConfigValidationIssue`` items.
- Section-wise merge used by the loader's precedence layers.
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final, Literal, TypedDict

from shapeclone.constants import (
    CONFIG_SCHEMA_VERSION,
    DEFAULT_MAX_DEPTH,
    DEFAULT_MAX_NODES,
    MAX_NODE_BUDGET,
    MAX_UNROLL_DEPTH,
)

ConfigSchemaVersion: Final[int] = CONFIG_SCHEMA_VERSION
LOG_LEVELS: Final[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR")
LOG_FORMATS: Final[tuple[str, ...]] = ("json", "text")


class MetaConfig(TypedDict):
    schema_version: int


class CompilerConfig(TypedDict):
    max_depth: int
    max_nodes: int
    tuples_as_sequences: bool
    retain_source: bool


class ObservabilityConfig(TypedDict):
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"]
    log_format: Literal["json", "text"]
    log_generated_source: bool


class ShapeCloneConfig(TypedDict):
    meta: MetaConfig
    compiler: CompilerConfig
    observability: ObservabilityConfig


DEFAULT_CONFIG: Final[ShapeCloneConfig] = {
    "meta": {"schema_version": ConfigSchemaVersion},
    "compiler": {
        "max_depth": DEFAULT_MAX_DEPTH,
        "max_nodes": DEFAULT_MAX_NODES,
        "tuples_as_sequences": True,
        "retain_source": True,
    },
    "observability": {
        "log_level": "INFO",
        "log_format": "json",
        "log_generated_source": False,
    },
}


@dataclass(frozen=True, slots=True)
class FieldRule:
    """Type and range constraints for one ``section.field`` config entry."""

    section: str
    name: str
    kind: type[bool] | type[int] | type[str]
    minimum: int | None = None
    maximum: int | None = None
    choices: tuple[str, ...] = ()
    normalize: Callable[[str], str] | None = None
    overridable: bool = True

    @property
    def path(self) -> str:
        return f"{self.section}.{self.name}"

    def check(self, value: object) -> tuple[object, str | None]:
        """Return ``(normalized_value, None)`` or ``(None, problem)``."""

        # bool is an int subclass; only an exact match counts.
        if self.kind is bool or isinstance(value, bool):
            if type(value) is not self.kind:
                return None, f"expected {_TYPE_LABELS[self.kind]}, got {type(value).__name__}"
            return value, None
        if not isinstance(value, self.kind):
            return None, f"expected {_TYPE_LABELS[self.kind]}, got {type(value).__name__}"

        if isinstance(value, str):
            value = value.strip()
            if self.normalize is not None:
                value = self.normalize(value)
            if self.choices and value not in self.choices:
                return None, f"invalid value {value!r}; expected one of: {', '.join(self.choices)}"
            return value, None

        if self.minimum is not None and value < self.minimum:
            return None, f"must be >= {self.minimum}"
        if self.maximum is not None and value > self.maximum:
            return None, f"must be <= {self.maximum}"
        return value, None


_TYPE_LABELS: Final[dict[type, str]] = {bool: "boolean", int: "integer", str: "string"}

FIELD_RULES: Final[tuple[FieldRule, ...]] = (
    FieldRule("meta", "schema_version", int, minimum=1, overridable=False),
    FieldRule("compiler", "max_depth", int, minimum=1, maximum=MAX_UNROLL_DEPTH),
    FieldRule("compiler", "max_nodes", int, minimum=1, maximum=MAX_NODE_BUDGET),
    FieldRule("compiler", "tuples_as_sequences", bool),
    FieldRule("compiler", "retain_source", bool),
    FieldRule("observability", "log_level", str, choices=LOG_LEVELS, normalize=str.upper),
    FieldRule("observability", "log_format", str, choices=LOG_FORMATS, normalize=str.lower),
    FieldRule("observability", "log_generated_source", bool),
)

SECTIONS: Final[tuple[str, ...]] = tuple(dict.fromkeys(rule.section for rule in FIELD_RULES))


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    """Single structured validation failure."""

    path: str
    message: str


@dataclass(frozen=True, slots=True)
class ConfigValidationResult:
    """Validation result with normalized config when no issues were found."""

    config: dict[str, Any] | None
    issues: tuple[ConfigValidationIssue, ...]

    @property
    def is_valid(self) -> bool:
        return self.config is not None and not self.issues


class ConfigValidationError(ValueError):
    """Raised when strict config validation fails."""

    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        listing = "\n".join(f"- {issue.path}: {issue.message}" for issue in self.issues)
        super().__init__(f"invalid config:\n{listing or '- <root>: unknown validation failure'}")


def default_config() -> ShapeCloneConfig:
    """Return a deep copy of the built-in defaults."""

    return copy.deepcopy(DEFAULT_CONFIG)


def rules_for(section: str) -> tuple[FieldRule, ...]:
    return tuple(rule for rule in FIELD_RULES if rule.section == section)


def find_rule(path: str) -> FieldRule | None:
    """Look up the rule for a dotted ``section.field`` path."""

    for rule in FIELD_RULES:
        if rule.path == path:
            return rule
    return None


def migration_guidance(found_version: int) -> str:
    """Explain how to resolve a ``meta.schema_version`` mismatch."""

    if found_version < ConfigSchemaVersion:
        return (
            f"schema version {found_version} is older than supported {ConfigSchemaVersion}; "
            "upgrade shapeclone.toml to the current schema"
        )
    if found_version > ConfigSchemaVersion:
        return (
            f"schema version {found_version} is newer than supported {ConfigSchemaVersion}; "
            "upgrade the shapeclone package"
        )
    return "schema version is current"


def merge_config(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``base`` with ``overlay`` applied section by section.

    Sections present in both are merged field-wise; anything else in
    ``overlay`` replaces the ``base`` entry. Neither input is modified.
    """

    merged = copy.deepcopy(dict(base))
    for key, value in overlay.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            current.update(copy.deepcopy(dict(value)))
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def validate_config(config: object) -> ConfigValidationResult:
    """Check every section against ``FIELD_RULES``; issues come back in rule order."""

    issues = list(_iter_issues(config))
    if issues:
        return ConfigValidationResult(config=None, issues=tuple(issues))
    normalized: dict[str, Any] = {section: {} for section in SECTIONS}
    for rule in FIELD_RULES:
        value, _ = rule.check(config[rule.section][rule.name])  # type: ignore[index]
        normalized[rule.section][rule.name] = value
    return ConfigValidationResult(config=normalized, issues=())


def assert_valid_config(config: object) -> dict[str, Any]:
    """Validate config and raise ``ConfigValidationError`` on failure."""

    result = validate_config(config)
    if result.config is None:
        raise ConfigValidationError(result.issues)
    return result.config


def _iter_issues(config: object) -> Iterator[ConfigValidationIssue]:
    if not isinstance(config, Mapping):
        yield ConfigValidationIssue("<root>", f"expected object, got {type(config).__name__}")
        return

    yield from _unknown_keys(config, SECTIONS, prefix="")
    for section in SECTIONS:
        if section not in config:
            yield ConfigValidationIssue(section, "missing required field")
            continue
        payload = config[section]
        if not isinstance(payload, Mapping):
            yield ConfigValidationIssue(section, f"expected object, got {type(payload).__name__}")
            continue

        rules = rules_for(section)
        yield from _unknown_keys(payload, tuple(rule.name for rule in rules), prefix=section)
        for rule in rules:
            if rule.name not in payload:
                yield ConfigValidationIssue(rule.path, "missing required field")
                continue
            value, problem = rule.check(payload[rule.name])
            if problem is not None:
                yield ConfigValidationIssue(rule.path, problem)
            elif rule.path == "meta.schema_version" and value != ConfigSchemaVersion:
                yield ConfigValidationIssue(rule.path, migration_guidance(value))  # type: ignore[arg-type]


def _unknown_keys(
    payload: Mapping[Any, object], known: tuple[str, ...], *, prefix: str
) -> Iterator[ConfigValidationIssue]:
    for key in sorted(payload, key=str):
        if key not in known:
            yield ConfigValidationIssue(f"{prefix}.{key}" if prefix else str(key), "unknown field")


__all__ = [
    "CompilerConfig",
    "ConfigSchemaVersion",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "DEFAULT_CONFIG",
    "FIELD_RULES",
    "FieldRule",
    "LOG_FORMATS",
    "LOG_LEVELS",
    "MetaConfig",
    "ObservabilityConfig",
    "SECTIONS",
    "ShapeCloneConfig",
    "assert_valid_config",
    "default_config",
    "find_rule",
    "merge_config",
    "migration_guidance",
    "rules_for",
    "validate_config",
]
