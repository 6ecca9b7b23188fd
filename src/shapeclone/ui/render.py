"""Human-readable output for the ``inspect``, ``clone`` and ``config`` commands.

Headings are bold when stdout is a terminal, unless ``--no-color`` is passed or
``NO_COLOR`` is set. Everything else is plain text.
"""

from __future__ import annotations

import json
import os
import sys
from collections.abc import Mapping
from typing import IO


class CLIRenderer:
    """Write report sections to a text stream."""

    def __init__(self, stream: IO[str] | None = None, *, color: bool = False) -> None:
        self._stream = sys.stdout if stream is None else stream
        self._color = color

    def section(self, title: str) -> None:
        heading = f"\033[1m{title}\033[0m" if self._color else title
        self._write(f"\n{heading}")

    def fields(self, values: Mapping[str, object], *, indent: int = 2) -> None:
        """One ``name: value`` line per entry, names padded to a common width."""

        width = max((len(name) for name in values), default=0)
        for name, value in values.items():
            self._write(f"{' ' * indent}{name.ljust(width)}  {value}")

    def as_json(self, value: object) -> None:
        self._write(json.dumps(value, indent=2, ensure_ascii=False))

    def block(self, text: str, *, placeholder: str = "") -> None:
        self._write(text.rstrip("\n") or placeholder)

    def _write(self, line: str) -> None:
        self._stream.write(line + "\n")


def create_renderer(*, no_color: bool = False, stream: IO[str] | None = None) -> CLIRenderer:
    """Build a renderer, enabling color only for an interactive stdout."""

    target = sys.stdout if stream is None else stream
    color = not no_color and not os.environ.get("NO_COLOR") and target.isatty()
    return CLIRenderer(target, color=color)


__all__ = ["CLIRenderer", "create_renderer"]
