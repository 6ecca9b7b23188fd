"""Stable constants shared across the analyzer, generator, and config layers."""

from __future__ import annotations

from typing import Final

# Schema versions for persisted contracts.
CONFIG_SCHEMA_VERSION: Final[int] = 1

# Unroll depth limits. Each unrolled level nests one container literal and one
# guarded access call, and CPython's parser rejects more than 200 nested brackets.
DEFAULT_MAX_DEPTH: Final[int] = 32
MAX_UNROLL_DEPTH: Final[int] = 90

# Descriptor node budget. Samples sharing sub-objects across branches unroll
# them once per position, so the descriptor is capped independently of depth.
DEFAULT_MAX_NODES: Final[int] = 4096
MAX_NODE_BUDGET: Final[int] = 100_000

# Names bound inside generated procedures.
PROCEDURE_PARAM: Final[str] = "obj"
FIELD_HELPER: Final[str] = "_field"
FALLBACK_HELPER: Final[str] = "_fallback"
CONSTANTS_NAME: Final[str] = "_k"
MEMO_NAME: Final[str] = "_memo"
RESULT_NAME: Final[str] = "result"

PROCEDURE_FILENAME_PREFIX: Final[str] = "shapeclone"

__all__ = [
    "CONFIG_SCHEMA_VERSION",
    "CONSTANTS_NAME",
    "DEFAULT_MAX_DEPTH",
    "DEFAULT_MAX_NODES",
    "FALLBACK_HELPER",
    "FIELD_HELPER",
    "MAX_NODE_BUDGET",
    "MAX_UNROLL_DEPTH",
    "MEMO_NAME",
    "PROCEDURE_FILENAME_PREFIX",
    "PROCEDURE_PARAM",
    "RESULT_NAME",
]
