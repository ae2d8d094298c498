"""
Configuration Management.

Loads overrides from config/.env (or the environment) and settings from
config/settings/*.yaml. No hardcoded values in code — all configuration
comes from these sources.

Environment (.env, prefix STICKY_):
    STICKY_DATA_DIR - overrides storage.yaml data_dir

Settings (YAML):
    application.yaml - App identity
    storage.yaml     - Location and key of the note collection
    reminders.yaml   - Reminder polling interval, recurrence mode, notification text
    logging.yaml     - Logging configuration
    features.yaml    - Feature flags
    security.yaml    - Note lock credential storage
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from modules.sticky.core.config_schema import (
    ApplicationSchema,
    FeaturesSchema,
    LoggingSchema,
    RemindersSchema,
    SecuritySchema,
    StorageSchema,
)


def find_project_root() -> Path:
    """Find project root by looking for .project_root marker file."""
    current = Path.cwd()
    while current != current.parent:
        if (current / ".project_root").exists():
            return current
        current = current.parent
    raise RuntimeError("Project root not found. Ensure .project_root file exists.")


def validate_project_root() -> Path:
    """
    Validate that the project root can be found.

    Raises SystemExit with a clear message if .project_root is not found.
    Use this in entry scripts before any configuration loading.
    """
    try:
        return find_project_root()
    except RuntimeError as e:
        raise SystemExit(f"Error: {e}") from e


def load_yaml_config(filename: str) -> dict[str, Any]:
    """Load a YAML configuration file from config/settings/."""
    project_root = find_project_root()
    config_path = project_root / "config" / "settings" / filename

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


class Settings(BaseSettings):
    """Machine-local overrides loaded from config/.env or the environment."""

    data_dir: str | None = None

    model_config = SettingsConfigDict(
        env_prefix="STICKY_",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


def _load_validated(schema_cls: type, filename: str) -> Any:
    """Load YAML and validate against schema. Returns typed model instance."""
    raw = load_yaml_config(filename)
    try:
        return schema_cls(**raw)
    except ValidationError as e:
        raise ValueError(
            f"Invalid configuration in {filename}:\n{e}"
        ) from e


class AppConfig:
    """
    Application configuration loaded from YAML files.

    Each YAML file is validated against its Pydantic schema at load time.
    Missing keys, wrong types, or unknown fields raise a clear error
    immediately instead of causing cryptic KeyErrors later.

    Properties return typed Pydantic model instances with attribute access.
    """

    def __init__(self) -> None:
        self._application = _load_validated(ApplicationSchema, "application.yaml")
        self._storage = _load_validated(StorageSchema, "storage.yaml")
        self._reminders = _load_validated(RemindersSchema, "reminders.yaml")
        self._logging = _load_validated(LoggingSchema, "logging.yaml")
        self._features = _load_validated(FeaturesSchema, "features.yaml")
        self._security = _load_validated(SecuritySchema, "security.yaml")

    @property
    def application(self) -> ApplicationSchema:
        """Application settings."""
        return self._application

    @property
    def storage(self) -> StorageSchema:
        """Note collection storage settings."""
        return self._storage

    @property
    def reminders(self) -> RemindersSchema:
        """Reminder scheduler settings."""
        return self._reminders

    @property
    def logging(self) -> LoggingSchema:
        """Logging settings."""
        return self._logging

    @property
    def features(self) -> FeaturesSchema:
        """Feature flags."""
        return self._features

    @property
    def security(self) -> SecuritySchema:
        """Security settings."""
        return self._security


@lru_cache
def get_settings() -> Settings:
    """Get cached overrides instance. Resolves .env path from project root."""
    env_path = find_project_root() / "config" / ".env"
    return Settings(_env_file=str(env_path))


@lru_cache
def get_app_config() -> AppConfig:
    """Get cached application configuration."""
    return AppConfig()


def get_store_path() -> Path:
    """
    Resolve the JSON document that holds the note collection.

    STICKY_DATA_DIR wins over storage.yaml. Relative directories are
    resolved against the project root, and a leading ~ is expanded.

    Returns:
        Absolute path of the store file.
    """
    storage = get_app_config().storage
    data_dir = Path(get_settings().data_dir or storage.data_dir).expanduser()
    if not data_dir.is_absolute():
        data_dir = find_project_root() / data_dir
    return data_dir / storage.filename
