"""
Synthesize copy expressions from shape descriptors.

Every generated access goes through the ``_field`` runtime helper, so a missing
input, a missing key, or an out-of-range index all read as ``None`` and fall
through to the leaf default. A schema like ``{"a": 1, "d": {"d1": True}}``
becomes, in deep mode::

    {'a': _field(obj, 'a') or 0, 'd': {'d1': _field(_field(obj, 'd'), 'd1') or False}}
"""

from __future__ import annotations

import math
from collections.abc import Hashable
from dataclasses import dataclass
from enum import StrEnum

from shapeclone.compiler.defaults import default_for
from shapeclone.constants import (
    CONSTANTS_NAME,
    FALLBACK_HELPER,
    FIELD_HELPER,
    MEMO_NAME,
    PROCEDURE_PARAM,
)
from shapeclone.domain.shapes import (
    CycleBreak,
    KeyedShape,
    ScalarShape,
    SequenceShape,
    ShapeDescriptor,
)


class CopyMode(StrEnum):
    DEEP = "deep"
    SHALLOW = "shallow"


@dataclass(frozen=True, slots=True)
class GeneratedExpression:
    """Generated copy expression plus what it needs bound at compile time."""

    expression: str
    constants: tuple[Hashable, ...]
    uses_fallback: bool
    mode: CopyMode


class PathCodeGenerator:
    """Single-use generator; collects non-literal keys into a constants table."""

    def __init__(self) -> None:
        self._constants: list[Hashable] = []
        self._uses_fallback = False

    def generate(self, descriptor: ShapeDescriptor, mode: CopyMode) -> GeneratedExpression:
        mode = CopyMode(mode)
        if mode is CopyMode.SHALLOW:
            expression = self._shallow(descriptor, PROCEDURE_PARAM)
        else:
            expression = self._deep(descriptor, PROCEDURE_PARAM)
        return GeneratedExpression(
            expression=expression,
            constants=tuple(self._constants),
            uses_fallback=self._uses_fallback,
            mode=mode,
        )

    def _deep(self, node: ShapeDescriptor, path: str) -> str:
        if isinstance(node, ScalarShape):
            default = default_for(node.kind, node.type_name)
            if default is None:
                return path
            return f"{path} or {default.source}"
        if isinstance(node, SequenceShape):
            parts = [
                self._deep(child, self._access(path, index))
                for index, child in enumerate(node.items)
            ]
            return _sequence_literal(parts, node.container)
        if isinstance(node, KeyedShape):
            entries = [
                f"{self._key_source(key)}: {self._deep(child, self._access(path, key))}"
                for key, child in node.fields
            ]
            return "{" + ", ".join(entries) + "}"
        return self._fallback(path)

    def _shallow(self, node: ShapeDescriptor, path: str) -> str:
        if isinstance(node, SequenceShape):
            parts = [self._access(path, index) for index in range(len(node.items))]
            return _sequence_literal(parts, node.container)
        if isinstance(node, KeyedShape):
            entries = [
                f"{self._key_source(key)}: {self._access(path, key)}" for key, _ in node.fields
            ]
            return "{" + ", ".join(entries) + "}"
        if isinstance(node, CycleBreak):
            return self._fallback(path)
        return path

    def _fallback(self, path: str) -> str:
        self._uses_fallback = True
        return f"{FALLBACK_HELPER}({path}, {MEMO_NAME})"

    def _access(self, path: str, key: Hashable) -> str:
        return f"{FIELD_HELPER}({path}, {self._key_source(key)})"

    def _key_source(self, key: Hashable) -> str:
        if _is_literal_key(key):
            return repr(key)
        for index, existing in enumerate(self._constants):
            if type(existing) is type(key) and existing == key:
                return f"{CONSTANTS_NAME}[{index}]"
        self._constants.append(key)
        return f"{CONSTANTS_NAME}[{len(self._constants) - 1}]"


def generate(descriptor: ShapeDescriptor, mode: CopyMode | str = CopyMode.DEEP) -> GeneratedExpression:
    """Generate the copy expression for ``descriptor`` in ``mode``."""

    return PathCodeGenerator().generate(descriptor, CopyMode(mode))


def _is_literal_key(key: object) -> bool:
    if key is None or type(key) in (str, int, bool):
        return True
    if type(key) is float:
        return math.isfinite(key)
    return False


def _sequence_literal(parts: list[str], container: str) -> str:
    if container == "tuple":
        if len(parts) == 1:
            return f"({parts[0]},)"
        return "(" + ", ".join(parts) + ")"
    return "[" + ", ".join(parts) + "]"


__all__ = ["CopyMode", "GeneratedExpression", "PathCodeGenerator", "generate"]
