"""Module entrypoint for ``python -m shapeclone``."""

from __future__ import annotations

from shapeclone.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
