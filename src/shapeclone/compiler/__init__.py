"""Two-phase compiler: shape analysis, then copy-procedure generation."""

from shapeclone.compiler.analyzer import analyze, scalar_kind
from shapeclone.compiler.codegen import CopyMode, GeneratedExpression, PathCodeGenerator, generate
from shapeclone.compiler.defaults import DEFAULTS_BY_KIND, LiteralDefault, default_for
from shapeclone.compiler.procedure import CompiledProcedure, compile_procedure, render_source

__all__ = [
    "DEFAULTS_BY_KIND",
    "CompiledProcedure",
    "CopyMode",
    "GeneratedExpression",
    "LiteralDefault",
    "PathCodeGenerator",
    "analyze",
    "compile_procedure",
    "default_for",
    "generate",
    "render_source",
    "scalar_kind",
]
