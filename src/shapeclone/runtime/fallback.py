"""
Runtime helpers for compiled copy procedures.

``field_at`` is the guarded single-level access used on every generated path.
``fallback_copy`` is the memoized deep copy used wherever static unrolling
stopped (cycle or depth cut-off). It walks ``dict``/``list`` graphs with an
explicit work stack, so input depth is not bounded by the interpreter's
recursion limit, and hands every other non-atomic object to ``copy.deepcopy``
with the same memo. Both share the ``id(source) -> copy`` memo format, which
keeps aliasing and cycles intact across the two paths.
"""

from __future__ import annotations

import copy
from collections.abc import Hashable, Mapping
from types import BuiltinFunctionType, FunctionType
from typing import Any, Final

_MISSING: Final = object()

_ATOMIC_TYPES: Final[frozenset[type]] = frozenset(
    {
        type(None),
        bool,
        int,
        float,
        complex,
        str,
        bytes,
        range,
        type,
        FunctionType,
        BuiltinFunctionType,
    }
)


def is_atomic(value: object) -> bool:
    """Whether ``value`` is immutable and returned as-is by every copy path."""

    return type(value) in _ATOMIC_TYPES


def field_at(container: Any, key: Hashable) -> Any:
    """Return ``container[key]`` or ``None`` when the container or key is absent."""

    container_type = type(container)
    if container_type is dict:
        return container.get(key)
    if container_type is list or container_type is tuple:
        if type(key) is int and 0 <= key < len(container):
            return container[key]
        return None
    if isinstance(container, Mapping):
        return container.get(key)
    return None


def fallback_copy(value: Any, memo: dict[int, Any] | None = None) -> Any:
    """Deep copy ``value``, reusing copies already recorded in ``memo``."""

    if memo is None:
        memo = {}
    existing = memo.get(id(value), _MISSING)
    if existing is not _MISSING:
        return existing

    value_type = type(value)
    if value_type in _ATOMIC_TYPES:
        return value
    if value_type is not dict and value_type is not list:
        return copy.deepcopy(value, memo)

    root = _allocate(value, memo)
    pending: list[tuple[Any, Any]] = [(value, root)]
    while pending:
        source, target = pending.pop()
        if type(source) is dict:
            for key, item in source.items():
                target[key] = _copy_child(item, memo, pending)
        else:
            for item in source:
                target.append(_copy_child(item, memo, pending))
    return root


def _allocate(value: dict[Any, Any] | list[Any], memo: dict[int, Any]) -> Any:
    target: dict[Any, Any] | list[Any] = {} if type(value) is dict else []
    memo[id(value)] = target
    _keep_alive(value, memo)
    return target


def _copy_child(item: Any, memo: dict[int, Any], pending: list[tuple[Any, Any]]) -> Any:
    item_type = type(item)
    if item_type in _ATOMIC_TYPES:
        return item
    existing = memo.get(id(item), _MISSING)
    if existing is not _MISSING:
        return existing
    if item_type is dict or item_type is list:
        target = _allocate(item, memo)
        pending.append((item, target))
        return target
    return copy.deepcopy(item, memo)


def _keep_alive(value: object, memo: dict[int, Any]) -> None:
    # copy.deepcopy keeps sources alive under memo[id(memo)].
    try:
        memo[id(memo)].append(value)
    except KeyError:
        memo[id(memo)] = [value]


__all__ = ["fallback_copy", "field_at", "is_atomic"]
