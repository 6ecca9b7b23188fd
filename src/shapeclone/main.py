"""Process entrypoint for ``shapeclone``: runs the CLI and maps failures to exit codes."""

from __future__ import annotations

import sys
import traceback
from collections.abc import Iterator
from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence


class ExitCode(IntEnum):
    """Process exit codes."""

    SUCCESS = 0
    USAGE_ERROR = 1
    CONFIG_ERROR = 2
    INTERNAL_ERROR = 4


_KNOWN_CODES = frozenset(int(code) for code in ExitCode)


def cli_entrypoint(argv: Sequence[str] | None = None) -> int:
    """Entrypoint used by ``python -m shapeclone`` and the console script."""

    try:
        from shapeclone.ui.cli import run_cli

        code = run_cli(argv)
    except SystemExit as exc:
        # argparse exits 2 on bad usage and 0 after --help.
        code = exc.code
    except Exception as exc:  # noqa: BLE001 - last stop before the process exits.
        exit_code = classify_failure(exc)
        if exit_code is ExitCode.INTERNAL_ERROR:
            traceback.print_exception(exc, file=sys.stderr)
        else:
            print(f"shapeclone: {exc}", file=sys.stderr)
        return int(exit_code)
    if isinstance(code, int) and code in _KNOWN_CODES:
        return code
    return _unexpected_code(code)


def classify_failure(exc: BaseException) -> ExitCode:
    """Pick an exit code from the first recognized error in the cause chain."""

    from shapeclone.config import ConfigLoadError, ConfigValidationError
    from shapeclone.errors import ShapeCloneError

    for error in _causes(exc):
        if isinstance(error, (ConfigLoadError, ConfigValidationError)):
            return ExitCode.CONFIG_ERROR
        if isinstance(error, (ShapeCloneError, OSError, ValueError)):
            return ExitCode.USAGE_ERROR
    return ExitCode.INTERNAL_ERROR


def _causes(exc: BaseException) -> Iterator[BaseException]:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or (
            None if current.__suppress_context__ else current.__context__
        )


def _unexpected_code(code: object) -> int:
    if code is None:
        return int(ExitCode.SUCCESS)
    if isinstance(code, str) and code.strip():
        print(code.strip(), file=sys.stderr)
    return int(ExitCode.INTERNAL_ERROR)


__all__ = ["ExitCode", "classify_failure", "cli_entrypoint"]
