"""Turn generated copy expressions into callable procedures."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from shapeclone.compiler.codegen import CopyMode, GeneratedExpression
from shapeclone.constants import (
    CONSTANTS_NAME,
    FALLBACK_HELPER,
    FIELD_HELPER,
    MEMO_NAME,
    PROCEDURE_FILENAME_PREFIX,
    PROCEDURE_PARAM,
    RESULT_NAME,
)
from shapeclone.errors import SchemaCompileError
from shapeclone.runtime.fallback import fallback_copy, field_at


@dataclass(frozen=True, slots=True)
class CompiledProcedure:
    """Immutable copy procedure for one schema and copy mode."""

    key: str
    mode: CopyMode
    function: Callable[..., Any] = field(repr=False)
    source: str = field(default="", repr=False)

    def __call__(self, value: Any = None) -> Any:
        return self.function(value)


def render_source(generated: GeneratedExpression) -> str:
    """Return the full ``def`` statement wrapping ``generated``."""

    lines = [f"def clone_{generated.mode.value}({PROCEDURE_PARAM}=None):"]
    if generated.uses_fallback:
        lines.append(f"    {MEMO_NAME} = {{}}")
    lines.append(f"    {RESULT_NAME} = {generated.expression}")
    lines.append(f"    return {RESULT_NAME}")
    return "\n".join(lines) + "\n"


def compile_procedure(
    generated: GeneratedExpression,
    *,
    key: str,
    retain_source: bool = True,
) -> CompiledProcedure:
    """Compile ``generated`` into a ``CompiledProcedure`` bound to ``key``."""

    source = render_source(generated)
    filename = f"<{PROCEDURE_FILENAME_PREFIX}:{key}:{generated.mode.value}>"
    try:
        code = compile(source, filename, "exec")
    except (SyntaxError, RecursionError, MemoryError) as exc:
        raise SchemaCompileError(key, generated.mode.value, str(exc)) from exc

    namespace: dict[str, Any] = {
        "__builtins__": {},
        FIELD_HELPER: field_at,
        FALLBACK_HELPER: fallback_copy,
        CONSTANTS_NAME: generated.constants,
    }
    exec(code, namespace)  # noqa: S102 - source is generated from a shape descriptor
    function = namespace[f"clone_{generated.mode.value}"]
    function.__qualname__ = f"clone_{generated.mode.value}[{key}]"

    return CompiledProcedure(
        key=key,
        mode=generated.mode,
        function=function,
        source=source if retain_source else "",
    )


__all__ = ["CompiledProcedure", "compile_procedure", "render_source"]
