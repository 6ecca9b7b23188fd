"""Runtime helpers bound into every compiled procedure."""

from shapeclone.runtime.fallback import fallback_copy, field_at, is_atomic

__all__ = ["fallback_copy", "field_at", "is_atomic"]
