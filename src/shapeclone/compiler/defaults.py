"""Fixed default-value policy per scalar kind."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Final

from shapeclone.domain.shapes import ScalarKind


@dataclass(frozen=True, slots=True)
class LiteralDefault:
    """Default substituted for an absent or falsy leaf."""

    value: str | int | float | bool | None

    @property
    def source(self) -> str:
        return repr(self.value)


DEFAULTS_BY_KIND: Final[MappingProxyType[ScalarKind, LiteralDefault]] = MappingProxyType(
    {
        ScalarKind.STRING: LiteralDefault(""),
        ScalarKind.NUMBER: LiteralDefault(0),
        ScalarKind.BOOLEAN: LiteralDefault(False),
        ScalarKind.NULL: LiteralDefault(None),
    }
)


FLOAT_ZERO: Final[LiteralDefault] = LiteralDefault(0.0)


def default_for(kind: ScalarKind, type_name: str | None = None) -> LiteralDefault | None:
    """Return the default for ``kind``, or ``None`` when the kind has no default.

    Number leaves sampled from a ``float`` default to ``0.0`` so a falsy
    ``0.0`` input keeps its type.
    """

    if kind is ScalarKind.NUMBER and type_name == "float":
        return FLOAT_ZERO
    return DEFAULTS_BY_KIND.get(kind)


__all__ = ["DEFAULTS_BY_KIND", "FLOAT_ZERO", "LiteralDefault", "default_for"]
