"""Configuration management for UpdatePilot."""

import os
import sys
from pathlib import Path
from typing import Any

import yaml

from updatepilot.models.config import AppConfig, PathsConfig


class ConfigManager:
    """Manages application configuration with YAML file and environment variable support."""

    def __init__(self, config_path: Path | None = None) -> None:
        """Initialize configuration manager.

        Args:
            config_path: Path to config file. If None, uses UPDATEPILOT_CONFIG_PATH
                        environment variable or defaults to platform-specific config directory
        """
        if config_path is None:
            env_path = os.getenv("UPDATEPILOT_CONFIG_PATH")
            if env_path:
                config_path = Path(env_path).expanduser()
            else:
                if sys.platform == "win32":
                    # Windows: %APPDATA%\UpdatePilot
                    config_dir = Path(os.getenv("APPDATA", str(Path.home()))) / "UpdatePilot"
                elif sys.platform == "darwin":
                    # macOS: ~/Library/Application Support/UpdatePilot
                    config_dir = Path.home() / "Library" / "Application Support" / "UpdatePilot"
                else:
                    # Linux/Unix: ~/.config/updatepilot
                    config_dir = Path.home() / ".config" / "updatepilot"

                config_path = config_dir / "config.yaml"

        self.config_path = config_path
        self._config: AppConfig | None = None

    def load(self) -> AppConfig:
        """Load configuration from file and apply environment variable overrides.

        Returns:
            Loaded configuration
        """
        config_data: dict[str, Any] = {}

        # 1. Load from YAML file if it exists
        if self.config_path.exists():
            with open(self.config_path, encoding="utf-8") as f:
                config_data = yaml.safe_load(f) or {}

        # 2. Create config object (applies defaults)
        config = AppConfig(**config_data)

        # 3. Apply environment variable overrides
        return self._apply_env_overrides(config)

    def save(self, config: AppConfig) -> None:
        """Save configuration to YAML file.

        Args:
            config: Configuration to save
        """
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        # mode="json" turns Path objects into strings
        config_dict = config.model_dump(mode="json", exclude_none=True)

        with open(self.config_path, "w", encoding="utf-8") as f:
            yaml.dump(config_dict, f, default_flow_style=False, allow_unicode=True, sort_keys=False)

    def _apply_env_overrides(self, config: AppConfig) -> AppConfig:
        """Apply environment variable overrides.

        Environment variables use the format: UPDATEPILOT_<SECTION>_<KEY>
        Examples:
            - UPDATEPILOT_SERVER_PORT=9000
            - UPDATEPILOT_DATA_DIR=~/custom/path

        Args:
            config: Base configuration

        Returns:
            Configuration with environment overrides applied
        """
        # Server overrides
        if port := os.getenv("UPDATEPILOT_SERVER_PORT"):
            config.server.port = int(port)
        if host := os.getenv("UPDATEPILOT_SERVER_HOST"):
            config.server.host = host

        # Path overrides
        if data_dir := os.getenv("UPDATEPILOT_DATA_DIR"):
            # Recalculate dependent paths below the new data dir
            config.paths = PathsConfig(data_dir=Path(data_dir).expanduser())

        # Host overrides
        if gitlab_url := os.getenv("UPDATEPILOT_GITLAB_URL"):
            config.hosts.gitlab_url = gitlab_url.rstrip("/")

        # Scheduler overrides
        if instance_id := os.getenv("UPDATEPILOT_INSTANCE_ID"):
            config.scheduler.instance_id = instance_id
        if enabled := os.getenv("UPDATEPILOT_SCHEDULER_ENABLED"):
            config.scheduler.enabled = enabled.lower() in ("true", "1", "yes")

        # Logging overrides
        if log_level := os.getenv("UPDATEPILOT_LOG_LEVEL"):
            if log_level.upper() in ("INFO", "DEBUG", "TRACE"):
                config.advanced.log_level = log_level.upper()  # type: ignore

        return config

    def get_config(self) -> AppConfig:
        """Get configuration (loaded once).

        Returns:
            Current configuration
        """
        if self._config is None:
            self._config = self.load()
        return self._config

    def reload(self) -> AppConfig:
        """Reload configuration from file.

        Returns:
            Reloaded configuration
        """
        self._config = self.load()
        return self._config


# Global configuration manager instance
_config_manager: ConfigManager | None = None


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager, creating it on first use."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def get_config() -> AppConfig:
    """Get global application configuration.

    Returns:
        Application configuration
    """
    return get_config_manager().get_config()


def reload_config() -> AppConfig:
    """Reload configuration from file.

    Returns:
        Reloaded configuration
    """
    return get_config_manager().reload()


def save_config(config: AppConfig) -> None:
    """Save configuration to file.

    Args:
        config: Configuration to save
    """
    get_config_manager().save(config)
