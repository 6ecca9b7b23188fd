"""
shapeclone — shape-specialized deep and shallow copy procedures.

File: src/shapeclone/__init__.py

Purpose
- Package root. Exposes the registry, the compiler entrypoints, and error types.

Usage
- ``SchemaRegistry().define("order", sample)`` analyzes one sample value and
  compiles a copy procedure specialized for its shape.
- ``registry.clone("order", value)`` copies values of that shape, filling
  absent or falsy leaves with per-kind defaults.

Import boundary
- No side effects at import time (no config loading, no logging setup).
"""

from shapeclone.compiler import (
    CopyMode,
    GeneratedExpression,
    LiteralDefault,
    analyze,
    compile_procedure,
    default_for,
    generate,
)
from shapeclone.domain.shapes import (
    BreakReason,
    CycleBreak,
    KeyedShape,
    ScalarKind,
    ScalarShape,
    SequenceShape,
    ShapeDescriptor,
)
from shapeclone.errors import (
    DuplicateKeyError,
    SchemaCompileError,
    ShapeCloneError,
    UnknownKeyError,
)
from shapeclone.registry import CompiledProcedure, CompilerSettings, SchemaRegistry

__version__ = "0.3.0"

__all__ = [
    "BreakReason",
    "CompiledProcedure",
    "CompilerSettings",
    "CopyMode",
    "CycleBreak",
    "DuplicateKeyError",
    "GeneratedExpression",
    "KeyedShape",
    "LiteralDefault",
    "ScalarKind",
    "ScalarShape",
    "SchemaCompileError",
    "SchemaRegistry",
    "SequenceShape",
    "ShapeCloneError",
    "ShapeDescriptor",
    "UnknownKeyError",
    "__version__",
    "analyze",
    "compile_procedure",
    "default_for",
    "generate",
]
