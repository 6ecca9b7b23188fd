"""Shape descriptor types shared by the analyzer, generator, and registry."""

from shapeclone.domain.shapes import (
    BreakReason,
    CycleBreak,
    KeyedShape,
    ScalarKind,
    ScalarShape,
    SequenceShape,
    ShapeDescriptor,
)

__all__ = [
    "BreakReason",
    "CycleBreak",
    "KeyedShape",
    "ScalarKind",
    "ScalarShape",
    "SequenceShape",
    "ShapeDescriptor",
]
