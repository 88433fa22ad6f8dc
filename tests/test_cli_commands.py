from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from rsqrtbench_cli import main as cli_main


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def quiet_cli_adapters(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli_main, "_load_adapters", lambda: None)


def _combined(result) -> str:
    output = result.output
    try:
        stderr_text = result.stderr
    except ValueError:
        stderr_text = ""
    if stderr_text and stderr_text not in output:
        output += stderr_text
    return output


def test_list_providers(stub_registry, quiet_cli_adapters, cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli_main.app, ["list-providers"])
    assert result.exit_code == 0
    assert result.output.splitlines() == ["- Native", "- Inline", "- External"]


def test_demo_prints_every_provider(stub_registry, cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli_main.app, ["demo", "4"])
    assert result.exit_code == 0
    assert "[Native] sqrt(4.0) = 2.0" in result.output
    assert "[Inline] sqrt(4.0) =" in result.output
    assert "[External] sqrt(4.0) =" in result.output
    assert "error" in result.output


def test_run_prints_report_and_exports(stub_registry, cli_runner: CliRunner, tmp_path: Path) -> None:
    out = tmp_path / "run.json"
    result = cli_runner.invoke(
        cli_main.app,
        ["run", "--samples", "200", "--seed", "3", "--no-pause", "--export", str(out)],
    )
    assert result.exit_code == 0, result.output
    assert "[Native] [Average] time taken" in result.output
    assert "[Inline] [Average] error from native" in result.output
    assert "[External] [Max] error from native" in result.output
    payload = json.loads(out.read_text(encoding="utf-8"))
    assert payload["meta"]["samples"] == 200
    assert payload["meta"]["seed"] == 3


def test_run_pause_does_not_block_without_terminal(stub_registry, cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli_main.app, ["run", "-n", "20"])
    assert result.exit_code == 0


def test_run_without_external_is_fatal(registry_without_external, cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli_main.app, ["run", "-n", "10", "--no-pause"])
    assert result.exit_code == 1
    assert "External Q_rsqrt is not available" in _combined(result)
    assert "time taken" not in result.output


def test_cross_check_command(stub_registry, cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli_main.app, ["cross-check", "-n", "300", "--seed", "1"])
    assert result.exit_code == 0
    assert "agree on all 300 inputs" in result.output


def test_run_pause_waits_for_key_on_terminal(stub_registry, cli_runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
    keys = []
    monkeypatch.setattr(cli_main, "_stdin_is_terminal", lambda: True)
    monkeypatch.setattr(cli_main.typer, "getchar", lambda *a, **k: keys.append(True) or "x")
    result = cli_runner.invoke(cli_main.app, ["run", "-n", "5"])
    assert result.exit_code == 0, result.output
    assert "Press any key to continue" in result.output
    assert keys == [True]


def test_run_no_pause_skips_key_wait(stub_registry, cli_runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
    keys = []
    monkeypatch.setattr(cli_main, "_stdin_is_terminal", lambda: True)
    monkeypatch.setattr(cli_main.typer, "getchar", lambda *a, **k: keys.append(True) or "x")
    result = cli_runner.invoke(cli_main.app, ["run", "-n", "5", "--no-pause"])
    assert result.exit_code == 0
    assert keys == []


def test_samples_env_var_sets_default(stub_registry, cli_runner: CliRunner, tmp_path: Path) -> None:
    out = tmp_path / "run.json"
    result = cli_runner.invoke(
        cli_main.app,
        ["run", "--no-pause", "--export", str(out)],
        env={"RSQRTBENCH_SAMPLES": "25"},
    )
    assert result.exit_code == 0, result.output
    assert json.loads(out.read_text(encoding="utf-8"))["meta"]["samples"] == 25


def test_malformed_samples_env_var_is_a_usage_error(stub_registry, quiet_cli_adapters, cli_runner: CliRunner) -> None:
    env = {"RSQRTBENCH_SAMPLES": "lots"}
    listed = cli_runner.invoke(cli_main.app, ["list-providers"], env=env)
    assert listed.exit_code == 0
    result = cli_runner.invoke(cli_main.app, ["run", "--no-pause"], env=env)
    assert result.exit_code == 2
    assert "lots" in _combined(result)
    assert not isinstance(result.exception, ValueError)
