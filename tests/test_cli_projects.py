"""Tests for the projects command group."""

import json
from pathlib import Path

from vibe.__main__ import cli


def _write_registry(app_paths, config, projects: list[str]) -> None:
    path = app_paths.registry_file(config)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({"projects": projects}), encoding="utf-8")


def test_projects_list_empty(cli_runner) -> None:
    result = cli_runner.invoke(cli, ["projects", "list"])

    assert result.exit_code == 0
    assert "No projects registered" in result.output


def test_projects_list_shows_status(tmp_path: Path, app_paths, config, cli_runner) -> None:
    alive = tmp_path / "alive"
    alive.mkdir()
    _write_registry(app_paths, config, [str(alive), str(tmp_path / "gone")])

    result = cli_runner.invoke(cli, ["projects", "list"])

    assert result.exit_code == 0
    assert "ok" in result.output
    assert "missing" in result.output


def test_clean_removes_missing_projects(tmp_path: Path, app_paths, config, cli_runner) -> None:
    alive = tmp_path / "alive"
    alive.mkdir()
    _write_registry(app_paths, config, [str(alive), str(tmp_path / "gone")])

    result = cli_runner.invoke(cli, ["clean"])

    assert result.exit_code == 0
    assert "Removed 1 missing project" in result.output
    assert json.loads(app_paths.registry_file(config).read_text()) == {"projects": [str(alive)]}


def test_projects_clean_alias(cli_runner) -> None:
    result = cli_runner.invoke(cli, ["projects", "clean"])

    assert result.exit_code == 0
    assert "Removed 0 missing projects" in result.output


def test_invalid_registry_exits_with_setup_code(app_paths, config, cli_runner) -> None:
    path = app_paths.registry_file(config)
    path.parent.mkdir(parents=True)
    path.write_text('{"projects": 3}', encoding="utf-8")

    result = cli_runner.invoke(cli, ["projects", "list"])

    assert result.exit_code == 4
