"""CLI entry point tests using click's CliRunner."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from firebase_env.cli import main


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def test_config_path_from_env(runner: CliRunner, tmp_path: Path) -> None:
    target = tmp_path / "custom.json"

    result = runner.invoke(main, ["config", "path"], env={"FIREBASE_ENV_CONFIG_PATH": str(target)})

    assert result.exit_code == 0
    assert result.output.strip() == str(target)


def test_config_show_missing_file(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(main, ["config", "show", "--config", str(tmp_path / "missing.json")])

    assert result.exit_code == 1
    assert "No config file at" in result.output


def test_config_show_prints_file(runner: CliRunner, tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text('{"values": {"functionGeneration": "Gen 2"}}', encoding="utf-8")

    result = runner.invoke(main, ["config", "show", "--config", str(path)])

    assert result.exit_code == 0
    assert '"functionGeneration": "Gen 2"' in result.output


def test_session_passes_exit_code_and_project(
    runner: CliRunner, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    seen: dict = {}

    async def fake_run_app(settings, *, config_path=None):
        seen["project"] = settings.project
        seen["config_path"] = config_path
        return 3

    monkeypatch.setattr("firebase_env.runtime.app.run_app", fake_run_app)
    monkeypatch.setattr("firebase_env.runtime.log.setup_logging", lambda level: seen.setdefault("level", level))

    config = tmp_path / "config.json"
    result = runner.invoke(
        main, ["session", "--project", "demo", "--config", str(config), "--log-level", "DEBUG"]
    )

    assert result.exit_code == 3
    assert seen == {"level": "DEBUG", "project": "demo", "config_path": str(config)}


def test_no_subcommand_starts_session(runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_run_app(settings, *, config_path=None):
        return 0

    monkeypatch.setattr("firebase_env.runtime.app.run_app", fake_run_app)
    monkeypatch.setattr("firebase_env.runtime.log.setup_logging", lambda level: None)

    result = runner.invoke(main, [])

    assert result.exit_code == 0
