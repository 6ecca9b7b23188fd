"""Unit tests for the per-kind default policy."""

from __future__ import annotations

from shapeclone.compiler.defaults import LiteralDefault, default_for
from shapeclone.domain.shapes import ScalarKind


def test_default_table() -> None:
    assert default_for(ScalarKind.STRING) == LiteralDefault("")
    assert default_for(ScalarKind.NUMBER) == LiteralDefault(0)
    assert default_for(ScalarKind.BOOLEAN) == LiteralDefault(False)
    assert default_for(ScalarKind.NULL) == LiteralDefault(None)
    assert default_for(ScalarKind.OTHER) is None


def test_default_source_is_python_literal() -> None:
    assert default_for(ScalarKind.STRING).source == "''"  # type: ignore[union-attr]
    assert default_for(ScalarKind.BOOLEAN).source == "False"  # type: ignore[union-attr]
    assert default_for(ScalarKind.NULL).source == "None"  # type: ignore[union-attr]


def test_float_samples_default_to_float_zero() -> None:
    assert default_for(ScalarKind.NUMBER, "float") == LiteralDefault(0.0)
    assert default_for(ScalarKind.NUMBER, "float").source == "0.0"  # type: ignore[union-attr]
    assert default_for(ScalarKind.NUMBER, "int").source == "0"  # type: ignore[union-attr]
    assert default_for(ScalarKind.STRING, "float") == LiteralDefault("")
