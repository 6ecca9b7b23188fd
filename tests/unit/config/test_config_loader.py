"""
shapeclone — unit tests for config loader

File: tests/unit/config/test_config_loader.py

Purpose
- Validate deterministic config loading from defaults, TOML, env overrides, and CLI overrides.

What this test file should cover
- Precedence: CLI > env > file > defaults.
- Env var mapping and type coercion.
- Load failures surface as ``ConfigLoadError`` or ``ConfigValidationError``.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from shapeclone.config.loader import (
    ConfigLoadError,
    dump_effective_config,
    env_variable_for,
    load_config,
)
from shapeclone.config.schema import FIELD_RULES, ConfigValidationError


def _write_config(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def test_loader_precedence_default_file_env_cli(tmp_path: Path) -> None:
    config_path = tmp_path / "shapeclone.toml"
    default_path = tmp_path / "default.toml"
    _write_config(default_path, "")
    _write_config(
        config_path,
        """
[compiler]
max_depth = 4
""".strip(),
    )

    default_loaded = load_config(default_path, environ={})
    file_loaded = load_config(config_path, environ={})
    env_loaded = load_config(config_path, environ={"SHAPECLONE_COMPILER_MAX_DEPTH": "6"})
    cli_loaded = load_config(
        config_path,
        environ={"SHAPECLONE_COMPILER_MAX_DEPTH": "6"},
        cli_overrides={"compiler.max_depth": 7},
    )

    assert default_loaded["compiler"]["max_depth"] == 32
    assert file_loaded["compiler"]["max_depth"] == 4
    assert env_loaded["compiler"]["max_depth"] == 6
    assert cli_loaded["compiler"]["max_depth"] == 7


def test_env_coercion_for_bool_and_str(tmp_path: Path) -> None:
    config_path = tmp_path / "shapeclone.toml"
    _write_config(config_path, "")

    loaded = load_config(
        config_path,
        environ={
            "SHAPECLONE_COMPILER_RETAIN_SOURCE": "off",
            "SHAPECLONE_OBSERVABILITY_LOG_LEVEL": "warning",
            "SHAPECLONE_OBSERVABILITY_LOG_GENERATED_SOURCE": "yes",
            "UNRELATED_VARIABLE": "ignored",
        },
    )

    assert loaded["compiler"]["retain_source"] is False
    assert loaded["observability"]["log_level"] == "WARNING"
    assert loaded["observability"]["log_generated_source"] is True


@pytest.mark.parametrize(
    ("env_name", "raw", "message"),
    [
        ("SHAPECLONE_COMPILER_MAX_DEPTH", "deep", "must be an integer"),
        ("SHAPECLONE_COMPILER_TUPLES_AS_SEQUENCES", "maybe", "must be a boolean"),
    ],
)
def test_env_coercion_failures(tmp_path: Path, env_name: str, raw: str, message: str) -> None:
    config_path = tmp_path / "shapeclone.toml"
    _write_config(config_path, "")

    with pytest.raises(ConfigLoadError, match=message):
        load_config(config_path, environ={env_name: raw})


def test_explicit_missing_file_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigLoadError, match="config file not found"):
        load_config(tmp_path / "absent.toml", environ={})


def test_implicit_missing_file_uses_defaults(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)

    loaded = load_config(environ={})

    assert loaded["compiler"]["max_depth"] == 32
    assert loaded["observability"]["log_format"] == "json"


def test_invalid_toml_is_reported(tmp_path: Path) -> None:
    config_path = tmp_path / "shapeclone.toml"
    _write_config(config_path, "[compiler\nmax_depth = ")

    with pytest.raises(ConfigLoadError, match="invalid TOML"):
        load_config(config_path, environ={})


def test_file_values_are_validated(tmp_path: Path) -> None:
    config_path = tmp_path / "shapeclone.toml"
    _write_config(config_path, "[compiler]\nmax_depth = 500\n")

    with pytest.raises(ConfigValidationError) as excinfo:
        load_config(config_path, environ={})

    assert excinfo.value.issues[0].path == "compiler.max_depth"


def test_cli_override_values_are_validated(tmp_path: Path) -> None:
    config_path = tmp_path / "shapeclone.toml"
    _write_config(config_path, "")

    with pytest.raises(ConfigValidationError):
        load_config(config_path, environ={}, cli_overrides={"observability.log_format": "xml"})


def test_dump_is_deterministic(tmp_path: Path) -> None:
    config_path = tmp_path / "shapeclone.toml"
    _write_config(config_path, "[observability]\nlog_format = \"text\"\n")

    first = dump_effective_config(load_config(config_path, environ={}))
    second = dump_effective_config(load_config(config_path, environ={}))

    assert first == second
    assert json.loads(first)["observability"]["log_format"] == "text"
    assert first.index('"compiler"') < first.index('"meta"') < first.index('"observability"')


def test_every_overridable_field_has_one_env_variable() -> None:
    names = [env_variable_for(rule) for rule in FIELD_RULES if rule.overridable]

    assert "SHAPECLONE_COMPILER_MAX_NODES" in names
    assert "SHAPECLONE_OBSERVABILITY_LOG_FORMAT" in names
    assert len(names) == len(set(names))
    assert all(not name.startswith("SHAPECLONE_META_") for name in names)


def test_env_cannot_override_schema_version(tmp_path: Path) -> None:
    config_path = tmp_path / "shapeclone.toml"
    _write_config(config_path, "")

    loaded = load_config(config_path, environ={"SHAPECLONE_META_SCHEMA_VERSION": "2"})

    assert loaded["meta"]["schema_version"] == 1


def test_cli_string_overrides_are_coerced(tmp_path: Path) -> None:
    config_path = tmp_path / "shapeclone.toml"
    _write_config(config_path, "")

    loaded = load_config(
        config_path,
        environ={},
        cli_overrides={"compiler.max_nodes": "128", "compiler.tuples_as_sequences": "no"},
    )

    assert loaded["compiler"]["max_nodes"] == 128
    assert loaded["compiler"]["tuples_as_sequences"] is False


@pytest.mark.parametrize("key", ["compiler.unroll", "meta.schema_version", "compiler"])
def test_unknown_cli_override_keys(tmp_path: Path, key: str) -> None:
    config_path = tmp_path / "shapeclone.toml"
    _write_config(config_path, "")

    with pytest.raises(ConfigLoadError, match="unknown config override"):
        load_config(config_path, environ={}, cli_overrides={key: "1"})


def test_unknown_file_section_is_reported(tmp_path: Path) -> None:
    config_path = tmp_path / "shapeclone.toml"
    _write_config(config_path, "[cache]\nsize = 3\n")

    with pytest.raises(ConfigValidationError) as excinfo:
        load_config(config_path, environ={})

    assert [issue.path for issue in excinfo.value.issues] == ["cache"]


def test_indented_dump_round_trips(tmp_path: Path) -> None:
    config_path = tmp_path / "shapeclone.toml"
    _write_config(config_path, "")
    loaded = load_config(config_path, environ={})

    text = dump_effective_config(loaded, indent=2)

    assert json.loads(text) == loaded
    assert "\n  " in text
