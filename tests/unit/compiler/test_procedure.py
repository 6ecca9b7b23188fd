"""Unit tests for wrapping generated expressions into callable procedures."""

from __future__ import annotations

import pytest

from shapeclone.compiler.analyzer import analyze
from shapeclone.compiler.codegen import CopyMode, GeneratedExpression, generate
from shapeclone.compiler.procedure import compile_procedure, render_source
from shapeclone.errors import SchemaCompileError


def test_render_source_declares_result_and_returns_it() -> None:
    source = render_source(generate(analyze({"a": 1})))

    assert source == (
        "def clone_deep(obj=None):\n"
        "    result = {'a': _field(obj, 'a') or 0}\n"
        "    return result\n"
    )


def test_render_source_allocates_memo_only_when_fallback_is_used() -> None:
    sample: dict[str, object] = {}
    sample["me"] = sample

    source = render_source(generate(analyze(sample)))

    assert "    _memo = {}\n" in source


def test_compiled_procedure_runs_without_input() -> None:
    procedure = compile_procedure(generate(analyze({"a": 1, "b": [True]})), key="order")

    assert procedure() == {"a": 0, "b": [False]}
    assert procedure(None) == {"a": 0, "b": [False]}
    assert procedure.key == "order"
    assert procedure.mode is CopyMode.DEEP
    assert procedure.function.__qualname__ == "clone_deep[order]"


def test_compiled_procedure_can_drop_source() -> None:
    procedure = compile_procedure(generate(analyze([1])), key="k", retain_source=False)

    assert procedure.source == ""
    assert procedure([4]) == [4]


def test_generated_code_has_no_builtins() -> None:
    procedure = compile_procedure(generate(analyze({"a": 1})), key="k")

    assert procedure.function.__globals__["__builtins__"] == {}


def test_uncompilable_expression_raises_schema_compile_error() -> None:
    broken = GeneratedExpression(
        expression="{'a': ",
        constants=(),
        uses_fallback=False,
        mode=CopyMode.DEEP,
    )

    with pytest.raises(SchemaCompileError, match="deep procedure for schema 'bad'"):
        compile_procedure(broken, key="bad")
