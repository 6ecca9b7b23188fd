"""
Immutable shape descriptor tree.

One node per structural position of an analyzed sample value:

- ``ScalarShape``   leaf; records the scalar kind, never the value
- ``SequenceShape`` ordered children of a list or tuple
- ``KeyedShape``    named children of a dict, in the sample's insertion order
- ``CycleBreak``    position where static unrolling stops

Nodes are frozen once built, so a compiled procedure never observes a change
to the descriptor it was generated from.
"""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass
from enum import StrEnum
from typing import Literal

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]


class ScalarKind(StrEnum):
    """Scalar classification used for default resolution."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"
    OTHER = "other"


class BreakReason(StrEnum):
    CYCLE = "cycle"
    DEPTH = "depth"
    SIZE = "size"


@dataclass(frozen=True, slots=True)
class ScalarShape:
    kind: ScalarKind
    type_name: str

    def describe(self) -> JSONValue:
        return {"shape": "scalar", "kind": self.kind.value, "type": self.type_name}


@dataclass(frozen=True, slots=True)
class SequenceShape:
    items: tuple[ShapeDescriptor, ...]
    container: Literal["list", "tuple"] = "list"

    def describe(self) -> JSONValue:
        return {
            "shape": "sequence",
            "container": self.container,
            "items": [item.describe() for item in self.items],
        }


@dataclass(frozen=True, slots=True)
class KeyedShape:
    fields: tuple[tuple[Hashable, ShapeDescriptor], ...]

    def keys(self) -> tuple[Hashable, ...]:
        return tuple(key for key, _ in self.fields)

    def describe(self) -> JSONValue:
        return {
            "shape": "keyed",
            "fields": {str(key): child.describe() for key, child in self.fields},
        }


@dataclass(frozen=True, slots=True)
class CycleBreak:
    reason: BreakReason = BreakReason.CYCLE

    def describe(self) -> JSONValue:
        return {"shape": "cycle_break", "reason": self.reason.value}


ShapeDescriptor = ScalarShape | SequenceShape | KeyedShape | CycleBreak


def children_of(node: ShapeDescriptor) -> tuple[ShapeDescriptor, ...]:
    if isinstance(node, SequenceShape):
        return node.items
    if isinstance(node, KeyedShape):
        return tuple(child for _, child in node.fields)
    return ()


def node_count(node: ShapeDescriptor) -> int:
    """Total number of descriptor nodes, including ``node`` itself."""

    total = 0
    pending = [node]
    while pending:
        current = pending.pop()
        total += 1
        pending.extend(children_of(current))
    return total


def depth(node: ShapeDescriptor) -> int:
    """Height of the tree; a lone leaf has depth 0."""

    deepest = 0
    pending: list[tuple[ShapeDescriptor, int]] = [(node, 0)]
    while pending:
        current, level = pending.pop()
        deepest = max(deepest, level)
        pending.extend((child, level + 1) for child in children_of(current))
    return deepest


def cycle_break_count(node: ShapeDescriptor) -> int:
    count = 0
    pending = [node]
    while pending:
        current = pending.pop()
        if isinstance(current, CycleBreak):
            count += 1
        pending.extend(children_of(current))
    return count


__all__ = [
    "BreakReason",
    "CycleBreak",
    "JSONScalar",
    "JSONValue",
    "KeyedShape",
    "ScalarKind",
    "ScalarShape",
    "SequenceShape",
    "ShapeDescriptor",
    "children_of",
    "cycle_break_count",
    "depth",
    "node_count",
]
