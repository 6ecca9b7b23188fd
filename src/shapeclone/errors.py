"""Error taxonomy for schema definition, lookup, and compilation."""

from __future__ import annotations


class ShapeCloneError(Exception):
    """Base class for registry and compiler failures."""


class DuplicateKeyError(ShapeCloneError, ValueError):
    """Raised when ``define`` is called for a key that already has a schema."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"schema {key!r} is already defined")


class UnknownKeyError(ShapeCloneError, KeyError):
    """Raised when cloning against a key that was never defined."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(key)

    def __str__(self) -> str:
        return f"schema {self.key!r} is not defined"


class SchemaCompileError(ShapeCloneError, RuntimeError):
    """Raised when generated procedure source cannot be compiled."""

    def __init__(self, key: str, mode: str, reason: str) -> None:
        self.key = key
        self.mode = mode
        super().__init__(f"cannot compile {mode} procedure for schema {key!r}: {reason}")


__all__ = [
    "DuplicateKeyError",
    "SchemaCompileError",
    "ShapeCloneError",
    "UnknownKeyError",
]
