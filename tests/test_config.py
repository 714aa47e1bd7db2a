"""Tests for configuration loading."""

from pathlib import Path

import pytest
import yaml

from updatepilot.config import ConfigManager
from updatepilot.models.config import AppConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "UPDATEPILOT_SERVER_PORT",
        "UPDATEPILOT_DATA_DIR",
        "UPDATEPILOT_GITLAB_URL",
        "UPDATEPILOT_INSTANCE_ID",
        "UPDATEPILOT_SCHEDULER_ENABLED",
        "UPDATEPILOT_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_file(tmp_path: Path) -> None:
    config = ConfigManager(tmp_path / "config.yaml").load()

    assert config.server.port == 8470
    assert config.hosts.gitlab_url == "https://gitlab.com"
    assert config.scheduler.recheck_interval_seconds == 3600
    assert config.paths.settings_file == config.paths.data_dir / "settings.json"
    assert set(config.paths.model_dump()) == {"data_dir", "settings_file", "plugins_dir", "themes_dir", "cache_dir"}


def test_load_from_yaml(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    data = {
        "server": {"port": 9100},
        "paths": {"data_dir": str(tmp_path / "data")},
        "hosts": {"gitlab_url": "https://git.example.com/"},
        "scheduler": {"instance_id": "web-2", "primary_instance_id": "web-1"},
    }
    with open(config_path, "w", encoding="utf-8") as f:
        yaml.dump(data, f)

    config = ConfigManager(config_path).load()

    assert config.server.port == 9100
    assert config.paths.plugins_dir == tmp_path / "data" / "plugins"
    assert config.hosts.gitlab_url == "https://git.example.com"
    assert config.scheduler.instance_id == "web-2"


def test_env_overrides(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("UPDATEPILOT_SERVER_PORT", "9200")
    monkeypatch.setenv("UPDATEPILOT_DATA_DIR", str(tmp_path / "elsewhere"))
    monkeypatch.setenv("UPDATEPILOT_SCHEDULER_ENABLED", "no")
    monkeypatch.setenv("UPDATEPILOT_LOG_LEVEL", "debug")

    config = ConfigManager(tmp_path / "config.yaml").load()

    assert config.server.port == 9200
    # Dependent paths follow the new data dir
    assert config.paths.settings_file == tmp_path / "elsewhere" / "settings.json"
    assert config.scheduler.enabled is False
    assert config.advanced.log_level == "DEBUG"


def test_save_and_reload(tmp_path: Path) -> None:
    manager = ConfigManager(tmp_path / "nested" / "config.yaml")
    config = AppConfig()
    config.server.port = 9300

    manager.save(config)

    assert manager.reload().server.port == 9300
