"""
Schema registry: define-once table of compiled copy procedures.

The registry is an explicit context object rather than process-wide state:
create one, ``define`` schemas into it, clone through it, and ``reset`` it to
start over (tests typically build a fresh registry per case).

Write discipline:
- ``define`` and ``reset`` are serialized under a lock.
- Entries are immutable once published; lookups take no lock.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any, Final

import structlog

from shapeclone.compiler.analyzer import analyze
from shapeclone.compiler.codegen import CopyMode, generate
from shapeclone.compiler.procedure import CompiledProcedure, compile_procedure
from shapeclone.constants import DEFAULT_MAX_DEPTH, DEFAULT_MAX_NODES
from shapeclone.domain.shapes import ShapeDescriptor, cycle_break_count, depth, node_count
from shapeclone.errors import DuplicateKeyError, UnknownKeyError
from shapeclone.runtime.fallback import fallback_copy, is_atomic

_OMITTED: Final = object()
_CONTAINER_TYPES: Final[tuple[type, ...]] = (dict, list, tuple)


@dataclass(frozen=True, slots=True)
class CompilerSettings:
    """Typed view over the ``[compiler]`` and relevant ``[observability]`` config."""

    max_depth: int = DEFAULT_MAX_DEPTH
    max_nodes: int = DEFAULT_MAX_NODES
    tuples_as_sequences: bool = True
    retain_source: bool = True
    log_generated_source: bool = False

    @classmethod
    def from_config(cls, config: Mapping[str, Any] | None) -> CompilerSettings:
        if not config:
            return cls()
        compiler = config.get("compiler", {})
        observability = config.get("observability", {})
        defaults = cls()
        return cls(
            max_depth=int(compiler.get("max_depth", defaults.max_depth)),
            max_nodes=int(compiler.get("max_nodes", defaults.max_nodes)),
            tuples_as_sequences=bool(
                compiler.get("tuples_as_sequences", defaults.tuples_as_sequences)
            ),
            retain_source=bool(compiler.get("retain_source", defaults.retain_source)),
            log_generated_source=bool(
                observability.get("log_generated_source", defaults.log_generated_source)
            ),
        )


@dataclass(frozen=True, slots=True)
class SchemaEntry:
    key: str
    descriptor: ShapeDescriptor
    deep: CompiledProcedure
    shallow: CompiledProcedure


class SchemaRegistry:
    """Associate schema keys with compiled deep and shallow copy procedures."""

    def __init__(
        self,
        config: Mapping[str, Any] | CompilerSettings | None = None,
        *,
        logger: Any | None = None,
    ) -> None:
        if isinstance(config, CompilerSettings):
            self._settings = config
        else:
            self._settings = CompilerSettings.from_config(config)
        self._entries: dict[str, SchemaEntry] = {}
        self._lock = threading.Lock()
        self._logger = logger if logger is not None else structlog.get_logger(__name__)

    @property
    def settings(self) -> CompilerSettings:
        return self._settings

    def define(self, key: str, sample: Any) -> CompiledProcedure:
        """Analyze ``sample``, compile its procedures under ``key``, and return the deep one."""

        key = _validate_key(key)
        with self._lock:
            if key in self._entries:
                self._logger.warning("schema_define_rejected", key=key, reason="duplicate_key")
                raise DuplicateKeyError(key)
            entry = self._compile(key, sample)
            self._entries[key] = entry

        self._logger.info(
            "schema_defined",
            key=key,
            nodes=node_count(entry.descriptor),
            depth=depth(entry.descriptor),
            cycle_breaks=cycle_break_count(entry.descriptor),
        )
        if self._settings.log_generated_source:
            self._logger.debug(
                "schema_procedure_source",
                key=key,
                deep_source=entry.deep.source,
                shallow_source=entry.shallow.source,
            )
        return entry.deep

    def clone(self, key: str, value: Any = _OMITTED) -> Any:
        """Deep-copy ``value`` with the procedure defined for ``key``.

        Values that are not dicts, lists or tuples bypass the lookup: atomic
        values come back unchanged, other objects (class instances, sets, ...)
        are deep-copied by the runtime fallback, keeping their class. Omitting
        ``value`` yields the schema's fully default-filled tree.
        """

        if value is not _OMITTED and not isinstance(value, _CONTAINER_TYPES):
            if is_atomic(value):
                return value
            return fallback_copy(value)
        procedure = self._require(key).deep.function
        if value is _OMITTED:
            return procedure()
        return procedure(value)

    def shallow(self, key: str) -> CompiledProcedure:
        """Return the one-level copy procedure for ``key``."""

        return self._require(key).shallow

    def get(self, key: str) -> CompiledProcedure:
        """Return the deep copy procedure for ``key``."""

        return self._require(key).deep

    def descriptor(self, key: str) -> ShapeDescriptor:
        return self._require(key).descriptor

    def reset(self) -> None:
        """Forget every defined schema so keys can be defined again."""

        with self._lock:
            cleared = len(self._entries)
            self._entries = {}
        self._logger.info("schema_registry_reset", cleared=cleared)

    def keys(self) -> tuple[str, ...]:
        return tuple(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def _require(self, key: str) -> SchemaEntry:
        entry = self._entries.get(key)
        if entry is None:
            raise UnknownKeyError(key)
        return entry

    def _compile(self, key: str, sample: Any) -> SchemaEntry:
        descriptor = analyze(
            sample,
            max_depth=self._settings.max_depth,
            max_nodes=self._settings.max_nodes,
            tuples_as_sequences=self._settings.tuples_as_sequences,
        )
        retain = self._settings.retain_source or self._settings.log_generated_source
        deep = compile_procedure(generate(descriptor, CopyMode.DEEP), key=key, retain_source=retain)
        shallow = compile_procedure(
            generate(descriptor, CopyMode.SHALLOW), key=key, retain_source=retain
        )
        return SchemaEntry(key=key, descriptor=descriptor, deep=deep, shallow=shallow)


def _validate_key(key: object) -> str:
    if not isinstance(key, str):
        raise ValueError(f"schema key must be a string, got {type(key).__name__}")
    if not key.strip():
        raise ValueError("schema key must not be empty")
    return key


__all__ = ["CompiledProcedure", "CompilerSettings", "SchemaEntry", "SchemaRegistry"]
