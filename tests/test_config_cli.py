"""CLI tests for configuration commands and per-run overrides."""

import json
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from dirwise.cli import cli
from dirwise.config import ConfigManager


def _config_path(home: Path) -> Path:
    return home / ".dirwise" / "config.yaml"


def _row(output: str, key: str) -> str:
    return next(line for line in output.splitlines() if f" {key} " in line)


@pytest.fixture
def wide_env(cli_env: dict[str, str]) -> dict[str, str]:
    return {**cli_env, "COLUMNS": "200"}


def test_config_view_lists_values_and_sources(wide_env: dict[str, str]) -> None:
    result = CliRunner().invoke(cli, ["config", "view"], env=wide_env)

    assert result.exit_code == 0, result.output
    assert "false" in _row(result.output, "search.index_enabled")
    assert "environment" in _row(result.output, "search.index_enabled")
    assert "default" in _row(result.output, "search.max_depth")


def test_config_view_without_environment(wide_env: dict[str, str]) -> None:
    result = CliRunner().invoke(cli, ["config", "view", "--no-env"], env=wide_env)

    assert result.exit_code == 0
    row = _row(result.output, "search.index_enabled")
    assert "true" in row
    assert "default" in row


def test_config_view_shows_command_line_overrides(wide_env: dict[str, str]) -> None:
    result = CliRunner().invoke(
        cli, ["--set", "search.max_depth=2", "--no-index", "config", "view"], env=wide_env
    )

    assert result.exit_code == 0, result.output
    depth = _row(result.output, "search.max_depth")
    assert "2" in depth
    assert "cli" in depth
    assert "cli" in _row(result.output, "search.index_enabled")


def test_config_set_reports_change(cli_env: dict[str, str], home: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(cli, ["config", "set", "search.max_depth", "3"], env=cli_env)

    assert result.exit_code == 0, result.output
    assert "search.max_depth: 5 -> 3" in result.output
    manager = ConfigManager(config_path=_config_path(home), env={})
    assert manager.load().search.max_depth == 3

    repeat = runner.invoke(cli, ["config", "set", "search.max_depth", "3"], env=cli_env)

    assert repeat.exit_code == 0
    assert "already 3; nothing to change" in repeat.output


@pytest.mark.parametrize(
    ("key", "value", "message"),
    [
        ("search.max_depth", "-1", "search.max_depth: Input should be greater than or equal to 0"),
        ("search.max_dept", "3", "Unknown setting 'search.max_dept'"),
        ("search.max_depth.inner", "3", "Unknown setting"),
        ("search.index_timeout_seconds", "soon", "search.index_timeout_seconds"),
    ],
)
def test_config_set_rejects_invalid_values(
    cli_env: dict[str, str], home: Path, key: str, value: str, message: str
) -> None:
    result = CliRunner().invoke(cli, ["config", "set", "--", key, value], env=cli_env)

    assert result.exit_code != 0
    assert message in result.output
    assert not _config_path(home).exists()


def test_config_reset_drops_stored_value(cli_env: dict[str, str], home: Path) -> None:
    runner = CliRunner()
    runner.invoke(cli, ["config", "set", "search.max_depth", "3"], env=cli_env)

    result = runner.invoke(cli, ["config", "reset", "search.max_depth"], env=cli_env)

    assert result.exit_code == 0, result.output
    assert "reset to its default" in result.output
    assert ConfigManager(config_path=_config_path(home), env={}).load().search.max_depth == 5

    again = runner.invoke(cli, ["config", "reset", "search.max_depth"], env=cli_env)

    assert again.exit_code == 0
    assert "is not set in the settings file" in again.output


def test_config_path_prints_location(cli_env: dict[str, str], home: Path) -> None:
    result = CliRunner().invoke(cli, ["config", "path"], env=cli_env)

    assert result.exit_code == 0
    assert result.output.strip() == str(_config_path(home))


def test_config_edit_applies_changes(
    cli_env: dict[str, str], home: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    def _mock_edit(text: str, **_: Any) -> str:
        return text + "search:\n  max_depth: 2\n"

    monkeypatch.setattr("dirwise.cli.click.edit", _mock_edit)

    result = CliRunner().invoke(cli, ["config", "edit"], env=cli_env)

    assert result.exit_code == 0, result.output
    assert "Saved" in result.output
    assert ConfigManager(config_path=_config_path(home), env={}).load().search.max_depth == 2


@pytest.mark.parametrize("edited", ["search: [unclosed", "search:\n  max_depth: -4\n"])
def test_config_edit_keeps_file_on_invalid_input(
    cli_env: dict[str, str], home: Path, monkeypatch: pytest.MonkeyPatch, edited: str
) -> None:
    manager = ConfigManager(config_path=_config_path(home), env={})
    manager.ensure_exists()
    original = manager.read_text()

    monkeypatch.setattr("dirwise.cli.click.edit", lambda text, **_: edited)

    result = CliRunner().invoke(cli, ["config", "edit"], env=cli_env)

    assert result.exit_code != 0
    assert manager.read_text() == original


def test_invalid_config_file_surfaces_error(cli_env: dict[str, str], home: Path) -> None:
    path = _config_path(home)
    path.parent.mkdir(parents=True)
    path.write_text("search:\n  max_depth: lots\n", encoding="utf-8")

    result = CliRunner().invoke(cli, ["ls", str(home)], env=cli_env)

    assert result.exit_code != 0
    assert "Invalid configuration: search.max_depth" in result.output


def test_set_override_limits_search_depth(cli_env: dict[str, str], home: Path) -> None:
    target = home / "Documents" / "deep" / "Invoices"
    target.mkdir(parents=True)
    runner = CliRunner()
    args = ["find", "invoices", "--root", str(home), "--json"]

    found = runner.invoke(cli, args, env=cli_env)
    limited = runner.invoke(cli, ["--set", "search.max_depth=0", *args], env=cli_env)

    assert found.exit_code == 0, found.output
    assert str(target.resolve()) in [match["path"] for match in json.loads(found.output)["matches"]]
    assert limited.exit_code == 0, limited.output
    assert json.loads(limited.output)["matches"] == []


@pytest.mark.parametrize(
    ("assignment", "message"),
    [
        ("search.max_depth", "is not KEY=VALUE"),
        ("search.depth=2", "Unknown setting 'search.depth'"),
    ],
)
def test_set_override_rejects_bad_assignments(
    cli_env: dict[str, str], assignment: str, message: str
) -> None:
    result = CliRunner().invoke(cli, ["--set", assignment, "config", "path"], env=cli_env)

    assert result.exit_code == 2
    assert message in result.output


def test_set_override_out_of_range_is_reported(cli_env: dict[str, str], home: Path) -> None:
    result = CliRunner().invoke(cli, ["--set", "search.max_depth=-1", "ls", str(home)], env=cli_env)

    assert result.exit_code != 0
    assert "search.max_depth: Input should be greater than or equal to 0" in result.output
