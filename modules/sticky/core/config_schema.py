"""
Configuration Schemas.

Pydantic models defining the expected structure of each YAML config file.
Used by AppConfig to validate configuration at load time. If a YAML file
has missing keys, wrong types, or unknown fields, a clear ValidationError
is raised at startup instead of a cryptic KeyError deep in application code.

Each top-level class corresponds to one file in config/settings/:
    ApplicationSchema  → application.yaml
    StorageSchema      → storage.yaml
    RemindersSchema    → reminders.yaml
    LoggingSchema      → logging.yaml
    FeaturesSchema     → features.yaml
    SecuritySchema     → security.yaml
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class _StrictBase(BaseModel):
    """Base with extra='forbid' so unknown YAML keys are caught immediately."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# application.yaml
# =============================================================================


class ApplicationSchema(_StrictBase):
    name: str
    version: str
    description: str
    environment: str
    debug: bool


# =============================================================================
# storage.yaml
# =============================================================================


class StorageSchema(_StrictBase):
    data_dir: str
    filename: str
    storage_key: str


# =============================================================================
# reminders.yaml
# =============================================================================


class RemindersSchema(_StrictBase):
    interval_seconds: float = Field(gt=0)
    recurrence_mode: Literal["metadata", "advance"]
    notification_title: str
    notification_icon: str | None = None
    time_format: str


# =============================================================================
# logging.yaml
# =============================================================================


class ConsoleHandlerSchema(_StrictBase):
    enabled: bool


class FileHandlerSchema(_StrictBase):
    enabled: bool
    path: str
    max_bytes: int
    backup_count: int


class HandlersSchema(_StrictBase):
    console: ConsoleHandlerSchema
    file: FileHandlerSchema


class LoggingSchema(_StrictBase):
    level: str
    format: str
    handlers: HandlersSchema


# =============================================================================
# features.yaml
# =============================================================================


class FeaturesSchema(_StrictBase):
    broadcast_enabled: bool
    reminders_enabled: bool


# =============================================================================
# security.yaml
# =============================================================================


class LockSchema(_StrictBase):
    hash_passwords: bool
    bcrypt_rounds: int = Field(ge=4, le=31)


class SecuritySchema(_StrictBase):
    lock: LockSchema
