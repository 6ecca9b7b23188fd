"""Command-line interface for shapeclone.

Commands share one flag set (``--config``, ``--set``, ``--verbose``,
``--no-color``, ``--json``). ``--set`` and ``--verbose`` become the loader's
CLI override layer, so they win over the environment and ``shapeclone.toml``.
"""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from shapeclone.compiler.codegen import CopyMode
from shapeclone.config import dump_effective_config, load_config
from shapeclone.domain.shapes import cycle_break_count, depth, node_count
from shapeclone.observability import setup_logging, shutdown_logging
from shapeclone.registry import SchemaRegistry
from shapeclone.ui.render import create_renderer

_SCHEMA_KEY = "cli"

_VERBOSE_OVERRIDES = {
    "observability.log_level": "DEBUG",
    "observability.log_generated_source": True,
}


class SampleFileError(ValueError):
    """A sample or input file could not be read as JSON."""


def build_parser() -> argparse.ArgumentParser:
    shared = argparse.ArgumentParser(add_help=False)
    shared.add_argument(
        "--config",
        dest="config_path",
        metavar="PATH",
        help="TOML config file (default: ./shapeclone.toml when present).",
    )
    shared.add_argument(
        "--set",
        dest="overrides",
        action="append",
        default=[],
        type=_assignment,
        metavar="SECTION.FIELD=VALUE",
        help="Override one config field; repeatable.",
    )
    shared.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log at DEBUG level, including generated procedure source.",
    )
    shared.add_argument("--no-color", action="store_true", help="Plain headings (also NO_COLOR).")
    shared.add_argument("--json", action="store_true", help="Emit one JSON object on stdout.")

    parser = argparse.ArgumentParser(
        prog="shapeclone",
        description="Compile shape-specialized copy procedures from sample JSON values.",
    )
    commands = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")

    inspect = commands.add_parser(
        "inspect", parents=[shared], help="Show a sample's descriptor and generated source."
    )
    inspect.add_argument("sample_path", metavar="SAMPLE", help="JSON file with the sample value.")
    _add_mode_option(inspect)
    inspect.set_defaults(handler=_inspect)

    clone = commands.add_parser(
        "clone", parents=[shared], help="Copy an input value using a sample's shape."
    )
    clone.add_argument("sample_path", metavar="SAMPLE", help="JSON file with the sample value.")
    clone.add_argument(
        "-i",
        "--input",
        dest="input_path",
        metavar="INPUT",
        help="JSON file with the value to copy; omitted means no input.",
    )
    _add_mode_option(clone)
    clone.set_defaults(handler=_clone)

    config = commands.add_parser("config", parents=[shared], help="Show the effective config.")
    config.set_defaults(handler=_config)
    return parser


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse ``argv``, load config, and run the selected command."""

    args = build_parser().parse_args(argv)
    overrides: dict[str, object] = dict(_VERBOSE_OVERRIDES) if args.verbose else {}
    overrides.update(args.overrides)
    config = load_config(args.config_path, cli_overrides=overrides)

    setup_logging(config["observability"])
    try:
        return int(args.handler(args, config))
    finally:
        shutdown_logging()


def _inspect(args: argparse.Namespace, config: dict[str, Any]) -> int:
    registry = _registry_for(args.sample_path, config)
    descriptor = registry.descriptor(_SCHEMA_KEY)
    mode = CopyMode(args.mode)
    procedure = registry.get(_SCHEMA_KEY) if mode is CopyMode.DEEP else registry.shallow(_SCHEMA_KEY)
    summary = {
        "nodes": node_count(descriptor),
        "depth": depth(descriptor),
        "cycle_breaks": cycle_break_count(descriptor),
    }

    if args.json:
        _print_json(
            {
                "command": "inspect",
                "mode": mode.value,
                "summary": summary,
                "descriptor": descriptor.describe(),
                "source": procedure.source,
            }
        )
        return 0

    out = create_renderer(no_color=args.no_color)
    out.section("Summary")
    out.fields(summary)
    out.section("Descriptor")
    out.as_json(descriptor.describe())
    out.section(f"Generated {mode.value} procedure")
    out.block(procedure.source, placeholder="(source not retained)")
    return 0


def _clone(args: argparse.Namespace, config: dict[str, Any]) -> int:
    registry = _registry_for(args.sample_path, config)
    has_input = args.input_path is not None
    value = _read_json(args.input_path) if has_input else None

    if args.mode == CopyMode.SHALLOW:
        result = registry.shallow(_SCHEMA_KEY)(value)
    elif has_input:
        result = registry.clone(_SCHEMA_KEY, value)
    else:
        result = registry.clone(_SCHEMA_KEY)

    if args.json:
        _print_json({"command": "clone", "mode": args.mode, "result": result})
    else:
        create_renderer(no_color=args.no_color).as_json(result)
    return 0


def _config(args: argparse.Namespace, config: dict[str, Any]) -> int:
    if args.json:
        _print_json({"command": "config", "config": config})
        return 0
    out = create_renderer(no_color=args.no_color)
    out.fields({"config file": args.config_path or "(defaults)"}, indent=0)
    out.block(dump_effective_config(config, indent=2))
    return 0


def _registry_for(sample_path: str, config: dict[str, Any]) -> SchemaRegistry:
    registry = SchemaRegistry(config)
    registry.define(_SCHEMA_KEY, _read_json(sample_path))
    return registry


def _add_mode_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in CopyMode],
        default=CopyMode.DEEP.value,
        help="deep (default) or shallow copy procedure.",
    )


def _assignment(text: str) -> tuple[str, str]:
    key, sep, value = text.partition("=")
    if not sep or not key.strip():
        raise argparse.ArgumentTypeError(f"expected SECTION.FIELD=VALUE, got {text!r}")
    return key.strip(), value


def _read_json(raw_path: str) -> Any:
    path = Path(raw_path).expanduser()
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise SampleFileError(f"unable to read {path}: {exc.strerror or exc}") from exc
    except json.JSONDecodeError as exc:
        raise SampleFileError(f"invalid JSON in {path}: {exc}") from exc


def _print_json(payload: dict[str, object]) -> None:
    sys.stdout.write(json.dumps(payload, sort_keys=True, separators=(",", ":")) + "\n")


__all__ = ["SampleFileError", "build_parser", "run_cli"]
