"""Unit tests for configuration management."""

from pathlib import Path

import pytest

from dirwise.config import ConfigError, ConfigManager, DirwiseConfig, build_config
from dirwise.config.resolver import (
    dotted_to_nested,
    env_layer,
    require_known_key,
    setting_items,
    source_of,
)


def _manager(tmp_path: Path, **env: str) -> ConfigManager:
    return ConfigManager(config_path=tmp_path / "config.yaml", env=env)


def test_default_path_lives_under_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))

    assert ConfigManager().config_path == tmp_path / ".dirwise" / "config.yaml"


def test_ensure_exists_writes_header_only(tmp_path: Path) -> None:
    manager = _manager(tmp_path)

    path = manager.ensure_exists()

    text = path.read_text(encoding="utf-8")
    assert text.startswith("# dirwise settings.")
    assert "Last updated:" in text
    assert manager.read_file() == {}
    assert manager.load() == DirwiseConfig()


def test_layers_apply_file_then_environment_then_overrides(tmp_path: Path) -> None:
    manager = _manager(
        tmp_path,
        DIRWISE__SEARCH__DEFAULT_MAX_RESULTS="7",
        DIRWISE__LOGGING__LEVEL="DEBUG",
    )
    manager.set_value("search.max_depth", 3)
    manager.set_value("search.default_max_results", 4)

    config = manager.load(overrides={"search.default_max_results": 2})

    assert config.search.max_depth == 3
    assert config.logging.level == "DEBUG"
    assert config.search.default_max_results == 2
    assert manager.load().search.default_max_results == 7
    assert manager.load(use_env=False).search.default_max_results == 4


def test_explain_reports_where_each_value_comes_from(tmp_path: Path) -> None:
    manager = _manager(tmp_path, DIRWISE__SEARCH__INDEX_ENABLED="false")
    manager.set_value("search.max_depth", 2)

    sources = {
        key: (value, source)
        for key, value, source in manager.explain(overrides={"organization.include_hidden": True})
    }

    assert sources["search.max_depth"] == (2, "file")
    assert sources["search.index_enabled"] == (False, "environment")
    assert sources["organization.include_hidden"] == (True, "cli")
    assert sources["search.depth_penalty"] == (5, "default")


def test_explain_without_environment(tmp_path: Path) -> None:
    manager = _manager(tmp_path, DIRWISE__SEARCH__INDEX_ENABLED="false")

    sources = {key: (value, source) for key, value, source in manager.explain(use_env=False)}

    assert sources["search.index_enabled"] == (True, "default")


def test_set_value_reports_old_and_new(tmp_path: Path) -> None:
    manager = _manager(tmp_path)

    assert manager.set_value("search.max_depth", 3) == (5, 3)
    assert manager.set_value("Search.Max_Depth", 3) == (3, 3)
    assert manager.read_file() == {"search": {"max_depth": 3}}


def test_set_value_leaves_file_alone_when_unchanged(tmp_path: Path) -> None:
    manager = _manager(tmp_path)

    assert manager.set_value("search.max_depth", 5) == (5, 5)
    assert not manager.config_path.exists()


def test_set_value_rejects_out_of_range_value(tmp_path: Path) -> None:
    manager = _manager(tmp_path)

    with pytest.raises(ConfigError, match=r"search\.max_depth: Input should be greater than or equal to 0"):
        manager.set_value("search.max_depth", -1)

    assert not manager.config_path.exists()


def test_set_value_rejects_unknown_key(tmp_path: Path) -> None:
    manager = _manager(tmp_path)

    with pytest.raises(ConfigError, match="Unknown setting 'search.max_dept'") as excinfo:
        manager.set_value("search.max_dept", 3)

    assert "search.max_depth" in str(excinfo.value)


def test_reset_value_restores_default(tmp_path: Path) -> None:
    manager = _manager(tmp_path)
    manager.set_value("search.max_depth", 3)
    manager.set_value("organization.include_hidden", True)

    assert manager.reset_value("search.max_depth") is True
    assert manager.reset_value("search.max_depth") is False
    assert manager.read_file() == {"organization": {"include_hidden": True}}
    assert manager.load().search.max_depth == 5


def test_replace_text_validates_before_writing(tmp_path: Path) -> None:
    manager = _manager(tmp_path)
    manager.set_value("search.max_depth", 3)

    with pytest.raises(ConfigError, match="search.index_timeout_seconds"):
        manager.replace_text("search:\n  index_timeout_seconds: 0\n")
    assert manager.load().search.max_depth == 3

    manager.replace_text("search.max_depth: 1\ncli:\n  json_default: true\n")
    assert manager.read_file() == {"search": {"max_depth": 1}, "cli": {"json_default": True}}


def test_malformed_file_raises_config_error(tmp_path: Path) -> None:
    manager = _manager(tmp_path)
    manager.config_path.write_text("- not-a-mapping", encoding="utf-8")

    with pytest.raises(ConfigError, match="must hold a mapping"):
        manager.load()


def test_environment_values_are_parsed_as_yaml_scalars() -> None:
    layer = env_layer(
        {
            "DIRWISE__SEARCH__INDEX_ENABLED": "false",
            "DIRWISE__SEARCH__INDEX_TIMEOUT_SECONDS": "1.5",
            "PATH": "/usr/bin",
        }
    )

    assert layer == {"search": {"index_enabled": False, "index_timeout_seconds": 1.5}}


def test_dotted_keys_conflicting_with_scalars_are_rejected() -> None:
    with pytest.raises(ConfigError, match="conflicts"):
        dotted_to_nested({"search": 3, "search.max_depth": 2})


def test_unknown_section_key_is_rejected() -> None:
    with pytest.raises(ConfigError, match=r"search\.max_dept"):
        build_config({"search": {"max_dept": 3}})


def test_require_known_key_normalizes_case_and_spacing() -> None:
    assert require_known_key(" Search . Max_Depth ") == "search.max_depth"


def test_setting_items_cover_every_section() -> None:
    keys = [key for key, _ in setting_items(DirwiseConfig())]

    assert keys[0] == "search.max_depth"
    assert {key.split(".")[0] for key in keys} == {"search", "organization", "logging", "cli"}


def test_source_of_prefers_the_last_layer() -> None:
    layers = [("file", {"search": {"max_depth": 1}}), ("cli", {"search": {"max_depth": 2}})]

    assert source_of("search.max_depth", layers) == "cli"
    assert source_of("search.depth_penalty", layers) == "default"
