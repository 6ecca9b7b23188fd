"""Infer a finite shape descriptor from one sample value."""

from __future__ import annotations

from typing import Any

from shapeclone.constants import DEFAULT_MAX_DEPTH, DEFAULT_MAX_NODES
from shapeclone.domain.shapes import (
    BreakReason,
    CycleBreak,
    KeyedShape,
    ScalarKind,
    ScalarShape,
    SequenceShape,
    ShapeDescriptor,
)


def scalar_kind(value: object) -> ScalarKind:
    """Classify a non-container value for default resolution."""

    if value is None:
        return ScalarKind.NULL
    if isinstance(value, bool):
        return ScalarKind.BOOLEAN
    if isinstance(value, (int, float)):
        return ScalarKind.NUMBER
    if isinstance(value, str):
        return ScalarKind.STRING
    return ScalarKind.OTHER


def analyze(
    sample: Any,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    max_nodes: int = DEFAULT_MAX_NODES,
    tuples_as_sequences: bool = True,
) -> ShapeDescriptor:
    """Walk ``sample`` once and return its shape descriptor.

    Identities on the current root-to-node path are tracked so that a sample
    graph revisiting one of its ancestors ends in ``CycleBreak`` instead of
    recursing forever. Three limits end static unrolling, each with its own
    ``BreakReason``:

    - ``CYCLE``: the container is one of its own ancestors.
    - ``DEPTH``: the container is nested deeper than ``max_depth``.
    - ``SIZE``: ``max_nodes`` descriptor nodes were already emitted. Objects
      shared by several branches are unrolled at every position, so without
      this cap a small DAG can expand exponentially.

    Cut-off positions are copied by the runtime fallback.
    """

    if max_depth < 1:
        raise ValueError("max_depth must be >= 1")
    if max_nodes < 1:
        raise ValueError("max_nodes must be >= 1")
    walker = _ShapeWalker(
        max_depth=max_depth,
        max_nodes=max_nodes,
        sequence_types=(list, tuple) if tuples_as_sequences else (list,),
    )
    return walker.visit(sample)


class _ShapeWalker:
    __slots__ = ("_ancestors", "_emitted", "_max_depth", "_max_nodes", "_sequence_types")

    def __init__(
        self, *, max_depth: int, max_nodes: int, sequence_types: tuple[type, ...]
    ) -> None:
        self._ancestors: list[int] = []
        self._emitted = 0
        self._max_depth = max_depth
        self._max_nodes = max_nodes
        self._sequence_types = sequence_types

    def visit(self, sample: Any) -> ShapeDescriptor:
        self._emitted += 1
        sample_type = type(sample)
        is_sequence = sample_type in self._sequence_types
        if not is_sequence and sample_type is not dict:
            return ScalarShape(kind=scalar_kind(sample), type_name=sample_type.__name__)

        reason = self._break_reason(id(sample))
        if reason is not None:
            return CycleBreak(reason)

        self._ancestors.append(id(sample))
        try:
            if is_sequence:
                items = tuple(self.visit(item) for item in sample)
                return SequenceShape(
                    items=items, container="tuple" if sample_type is tuple else "list"
                )
            return KeyedShape(fields=tuple((key, self.visit(value)) for key, value in sample.items()))
        finally:
            self._ancestors.pop()

    def _break_reason(self, identity: int) -> BreakReason | None:
        if identity in self._ancestors:
            return BreakReason.CYCLE
        if len(self._ancestors) >= self._max_depth:
            return BreakReason.DEPTH
        # The container itself was already counted by ``visit``.
        if self._emitted > self._max_nodes:
            return BreakReason.SIZE
        return None


__all__ = ["analyze", "scalar_kind"]
