"""
shapeclone — CLI subprocess smoke contracts

File: tests/integration/test_cli_smoke.py

Purpose
- Enforce CLI behavior for `python -m shapeclone` inspect/clone/config.
- Verify exit codes, JSON payloads, and stderr diagnostics.
"""

from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

from shapeclone.main import ExitCode, cli_entrypoint

PROJECT_ROOT = Path(__file__).resolve().parents[2]
SRC_PATH = PROJECT_ROOT / "src"


def _run_cli(workdir: Path, *args: str) -> subprocess.CompletedProcess[str]:
    env = {key: value for key, value in os.environ.items() if not key.startswith("SHAPECLONE_")}
    existing_pythonpath = env.get("PYTHONPATH")
    src_pythonpath = str(SRC_PATH)
    env["PYTHONPATH"] = (
        src_pythonpath if not existing_pythonpath else f"{src_pythonpath}:{existing_pythonpath}"
    )
    env["NO_COLOR"] = "1"
    return subprocess.run(
        [sys.executable, "-m", "shapeclone", *args],
        cwd=workdir,
        text=True,
        capture_output=True,
        check=False,
        env=env,
    )


def _write(path: Path, contents: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(contents, encoding="utf-8")


@pytest.fixture
def sample_path(tmp_path: Path) -> Path:
    path = tmp_path / "sample.json"
    _write(path, json.dumps({"a": 1, "b": "text", "d": {"d1": True}, "tags": [None, 2]}))
    return path


def test_clone_with_input_fills_defaults(tmp_path: Path, sample_path: Path) -> None:
    input_path = tmp_path / "input.json"
    _write(input_path, json.dumps({"a": 5, "extra": 1, "d": {}}))

    completed = _run_cli(tmp_path, "clone", str(sample_path), "-i", str(input_path), "--json")

    assert completed.returncode == ExitCode.SUCCESS, completed.stderr
    payload = json.loads(completed.stdout)
    assert payload == {
        "command": "clone",
        "mode": "deep",
        "result": {"a": 5, "b": "", "d": {"d1": False}, "tags": [None, 0]},
    }


def test_clone_without_input_emits_default_tree(tmp_path: Path, sample_path: Path) -> None:
    completed = _run_cli(tmp_path, "clone", str(sample_path))

    assert completed.returncode == ExitCode.SUCCESS, completed.stderr
    assert json.loads(completed.stdout) == {"a": 0, "b": "", "d": {"d1": False}, "tags": [None, 0]}


def test_inspect_reports_summary_and_source(tmp_path: Path, sample_path: Path) -> None:
    completed = _run_cli(tmp_path, "inspect", str(sample_path), "--json", "--mode", "shallow")

    assert completed.returncode == ExitCode.SUCCESS, completed.stderr
    payload = json.loads(completed.stdout)
    assert payload["mode"] == "shallow"
    assert payload["summary"] == {"cycle_breaks": 0, "depth": 2, "nodes": 8}
    assert payload["descriptor"]["shape"] == "keyed"
    assert payload["source"].startswith("def clone_shallow(obj=None):")


def test_inspect_text_output(tmp_path: Path, sample_path: Path) -> None:
    completed = _run_cli(tmp_path, "inspect", str(sample_path))

    assert completed.returncode == ExitCode.SUCCESS, completed.stderr
    assert "Summary" in completed.stdout
    assert "cycle_breaks" in completed.stdout
    assert "def clone_deep(obj=None):" in completed.stdout


def test_registry_logs_go_to_stderr_as_json(tmp_path: Path, sample_path: Path) -> None:
    completed = _run_cli(tmp_path, "clone", str(sample_path), "--json")

    assert completed.returncode == ExitCode.SUCCESS, completed.stderr
    events = [json.loads(line) for line in completed.stderr.splitlines() if line.strip()]
    assert [event["event"] for event in events] == ["schema_defined"]
    assert events[0]["key"] == "cli"


def test_config_command_honors_file_and_env(tmp_path: Path) -> None:
    _write(tmp_path / "shapeclone.toml", "[compiler]\nmax_depth = 5\n")

    completed = _run_cli(tmp_path, "config", "--json")

    assert completed.returncode == ExitCode.SUCCESS, completed.stderr
    payload = json.loads(completed.stdout)
    assert payload["config"]["compiler"]["max_depth"] == 5


def test_invalid_config_exits_with_config_error(tmp_path: Path) -> None:
    _write(tmp_path / "shapeclone.toml", "[compiler]\nmax_depth = 0\n")

    completed = _run_cli(tmp_path, "config")

    assert completed.returncode == ExitCode.CONFIG_ERROR
    assert "compiler.max_depth" in completed.stderr


def test_missing_sample_exits_with_usage_error(tmp_path: Path) -> None:
    completed = _run_cli(tmp_path, "clone", str(tmp_path / "absent.json"))

    assert completed.returncode == ExitCode.USAGE_ERROR
    assert "unable to read" in completed.stderr


def test_invalid_json_sample_exits_with_usage_error(tmp_path: Path) -> None:
    broken = tmp_path / "broken.json"
    _write(broken, "{not json")

    completed = _run_cli(tmp_path, "inspect", str(broken))

    assert completed.returncode == ExitCode.USAGE_ERROR
    assert "invalid JSON" in completed.stderr


def test_entrypoint_in_process(
    tmp_path: Path,
    sample_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.chdir(tmp_path)
    for name in list(os.environ):
        if name.startswith("SHAPECLONE_"):
            monkeypatch.delenv(name)

    exit_code = cli_entrypoint(
        ["clone", str(sample_path), "-i", str(sample_path), "--mode", "shallow", "--json"]
    )

    assert exit_code == ExitCode.SUCCESS
    payload = json.loads(capsys.readouterr().out)
    assert payload["result"] == {"a": 1, "b": "text", "d": {"d1": True}, "tags": [None, 2]}


def test_unknown_command_is_usage_error(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_entrypoint(["explode"]) == 2
    assert "invalid choice" in capsys.readouterr().err


def test_set_overrides_beat_config_file(tmp_path: Path) -> None:
    _write(tmp_path / "shapeclone.toml", "[compiler]\nmax_depth = 5\n")

    completed = _run_cli(
        tmp_path,
        "config",
        "--json",
        "--set",
        "compiler.max_depth=7",
        "--set",
        "compiler.retain_source=off",
    )

    assert completed.returncode == ExitCode.SUCCESS, completed.stderr
    compiler = json.loads(completed.stdout)["config"]["compiler"]
    assert compiler["max_depth"] == 7
    assert compiler["retain_source"] is False


def test_unknown_override_is_config_error(tmp_path: Path) -> None:
    completed = _run_cli(tmp_path, "config", "--set", "meta.schema_version=2")

    assert completed.returncode == ExitCode.CONFIG_ERROR
    assert "unknown config override" in completed.stderr


def test_malformed_override_is_rejected_by_parser(tmp_path: Path) -> None:
    completed = _run_cli(tmp_path, "config", "--set", "compiler.max_depth")

    assert completed.returncode == 2
    assert "SECTION.FIELD=VALUE" in completed.stderr


def test_verbose_logs_generated_source(tmp_path: Path, sample_path: Path) -> None:
    completed = _run_cli(tmp_path, "clone", str(sample_path), "--verbose", "--json")

    assert completed.returncode == ExitCode.SUCCESS, completed.stderr
    events = [json.loads(line) for line in completed.stderr.splitlines() if line.strip()]
    source_events = [event for event in events if event["event"] == "schema_procedure_source"]
    assert len(source_events) == 1
    assert source_events[0]["level"] == "debug"
    assert "def clone_shallow(obj=None):" in source_events[0]["shallow_source"]
