"""Configuration data models for UpdatePilot."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class ServerConfig(BaseModel):
    """Admin API server configuration."""

    port: int = 8470
    host: str = "127.0.0.1"


class UIConfig(BaseModel):
    """UI configuration."""

    preferred_language: Literal["en", "de"] = "en"


class PathsConfig(BaseModel):
    """Paths configuration."""

    data_dir: Path = Field(default_factory=lambda: Path.home() / ".updatepilot")
    settings_file: Path | None = None
    plugins_dir: Path | None = None
    themes_dir: Path | None = None
    cache_dir: Path | None = None

    @field_validator("data_dir", mode="before")
    @classmethod
    def expand_data_dir(cls, v: str | Path) -> Path:
        """Expand user path for data_dir."""
        if isinstance(v, str):
            return Path(v).expanduser()
        return v

    @field_validator("settings_file", "plugins_dir", "themes_dir", "cache_dir", mode="before")
    @classmethod
    def expand_optional_path(cls, v: str | Path | None) -> Path | None:
        """Expand user path for optional paths."""
        if v is None:
            return None
        if isinstance(v, str):
            return Path(v).expanduser()
        return v

    def model_post_init(self, __context: object) -> None:
        """Set default locations below data_dir if not specified."""
        if self.settings_file is None:
            self.settings_file = self.data_dir / "settings.json"
        if self.plugins_dir is None:
            self.plugins_dir = self.data_dir / "plugins"
        if self.themes_dir is None:
            self.themes_dir = self.data_dir / "themes"
        if self.cache_dir is None:
            self.cache_dir = self.data_dir / "cache"


class HostsConfig(BaseModel):
    """Base URLs of the source-control hosts."""

    github_api_url: str = "https://api.github.com"
    github_url: str = "https://github.com"
    gitlab_url: str = "https://gitlab.com"

    @field_validator("github_api_url", "github_url", "gitlab_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class HttpConfig(BaseModel):
    """Outgoing HTTP configuration."""

    timeout: float = 10.0
    user_agent: str = "UpdatePilot/0.1 (+https://github.com/updatepilot)"


class SchedulerConfig(BaseModel):
    """Update-check sweep configuration."""

    enabled: bool = True
    interval_seconds: int = 12 * 3600  # twice daily
    recheck_interval_seconds: int = 3600
    # Only the designated instance runs the sweep when several share one settings file
    instance_id: str = "main"
    primary_instance_id: str = "main"


class AdvancedConfig(BaseModel):
    """Advanced configuration."""

    log_level: Literal["INFO", "DEBUG", "TRACE"] = "INFO"


class AppConfig(BaseModel):
    """Application configuration."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    ui: UIConfig = Field(default_factory=UIConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    hosts: HostsConfig = Field(default_factory=HostsConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    advanced: AdvancedConfig = Field(default_factory=AdvancedConfig)
