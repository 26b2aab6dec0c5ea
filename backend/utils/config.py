"""
DesignSync Configuration Module.

Centralizes all configuration settings using Pydantic Settings.
Requires Python 3.11+.
"""

import json
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file into os.environ at module import time
# This ensures nested BaseSettings classes can read the values
_env_file = Path(__file__).parent.parent / ".env"
if _env_file.exists():
    load_dotenv(_env_file)
else:
    # Try current working directory
    load_dotenv()


WORKSPACE_CONFIG_FILE = "config.json"


class RemoteSettings(BaseSettings):
    """Remote store connection settings."""

    model_config = SettingsConfigDict(env_prefix="REMOTE_")

    url: str | None = Field(default=None, description="Remote store deployment URL")
    workspace_id: str | None = Field(default=None, description="Record ID to sync into")
    token: str | None = Field(default=None, description="Bearer token for the remote store")
    request_timeout: float = Field(default=30.0, ge=1.0)
    connect_timeout: float = Field(default=5.0, ge=0.5)

    @field_validator("url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str | None) -> str | None:
        """Normalize the URL so paths can be appended."""
        if isinstance(v, str):
            v = v.strip().rstrip("/")
            return v or None
        return v


class SyncSettings(BaseSettings):
    """Synchronizer configuration settings."""

    model_config = SettingsConfigDict(env_prefix="SYNC_")

    design_file: Path = Field(default=Path("design.json"), description="File to watch")
    config_dir: Path = Field(default=Path(".designsync"), description="Local config directory")
    debounce_delay_ms: int = Field(default=300, ge=50, le=5000)
    startup_retries: int = Field(default=3, ge=1, le=10)
    retry_base_delay_ms: int = Field(default=1000, ge=0)
    retry_max_delay_ms: int = Field(default=10000, ge=0)


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO")
    format: str = Field(default="console")  # "json" or "console"
    file_path: Path | None = Field(default=None)


class Settings(BaseSettings):
    """Main application settings aggregating all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="DesignSync")
    app_version: str = Field(default="0.1.0")

    # Sub-settings
    remote: RemoteSettings = Field(default_factory=RemoteSettings)
    sync: SyncSettings = Field(default_factory=SyncSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns singleton instance of Settings.
    """
    return Settings()


class WorkspaceConfig(BaseModel):
    """
    Per-project link between the local design file and a remote record.

    Stored as ``<config_dir>/config.json`` using the remote store's
    camelCase field names.
    """

    model_config = ConfigDict(populate_by_name=True)

    url: str = Field(alias="convexUrl", min_length=1)
    workspace_id: str = Field(alias="workspaceId", min_length=1)

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


def load_workspace_config(config_dir: Path) -> WorkspaceConfig | None:
    """
    Load the workspace config file.

    Returns None when the file is missing, is not valid JSON, or lacks
    a required field.
    """
    config_path = config_dir / WORKSPACE_CONFIG_FILE
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
        return WorkspaceConfig.model_validate(raw)
    except (OSError, ValueError, ValidationError):
        return None


def save_workspace_config(config: WorkspaceConfig, config_dir: Path) -> Path:
    """Write the workspace config file, creating the directory if needed."""
    config_dir.mkdir(parents=True, exist_ok=True)
    config_path = config_dir / WORKSPACE_CONFIG_FILE
    config_path.write_text(
        json.dumps(config.model_dump(by_alias=True), indent=2),
        encoding="utf-8",
    )
    return config_path


def resolve_workspace_config(settings: Settings) -> WorkspaceConfig | None:
    """
    Work out which remote record to sync with.

    REMOTE_URL and REMOTE_WORKSPACE_ID take precedence over the config
    file in the local config directory.
    """
    if settings.remote.url and settings.remote.workspace_id:
        return WorkspaceConfig(url=settings.remote.url, workspace_id=settings.remote.workspace_id)
    return load_workspace_config(settings.sync.config_dir)
