"""Configuration management for SF Import using Pydantic.

This module provides type-safe configuration models for the import job:
import settings, file paths, the import lock, the transform engine command,
state storage, logging and scheduling.
"""

import os
import re
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Lock name and migration group shared by every import run
LOCK_NAME = "sf_import"
MIGRATE_GROUP = "sf_import"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_ENV_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")


class ImportSettings(BaseModel):
    """Import switches read once at startup.

    Frozen: the orchestrator and stager receive this object at construction
    and never look settings up again during a run.
    """

    model_config = ConfigDict(frozen=True)

    enabled: bool = Field(default=False, description="Run imports on scheduled ticks")
    backup_json: bool = Field(
        default=False, description="Move imported batch directories to the backup root"
    )
    backup_limit: int = Field(
        default=15, ge=0, description="Number of batch backups to keep (oldest pruned first)"
    )


class PathConfig(BaseModel):
    """Where batches arrive, where the engine reads them, where backups go."""

    source_dir: str = Field(
        default="private/salesforce_import/json",
        description="Directory holding one subdirectory per fetched batch",
    )
    staging_dir: str = Field(
        default="private/salesforce_import",
        description="Flat directory the transform engine reads JSON files from",
    )
    backup_dir: str = Field(
        default="private/salesforce_import/backup",
        description="Directory for archived batch directories",
    )

    @property
    def source_path(self) -> Path:
        return Path(self.source_dir)

    @property
    def staging_path(self) -> Path:
        return Path(self.staging_dir)

    @property
    def backup_path(self) -> Path:
        return Path(self.backup_dir)


class LockConfig(BaseModel):
    name: str = Field(default=LOCK_NAME, description="Name of the import lock")
    timeout: int = Field(
        default=1200, ge=1, le=3600, description="Maximum lock hold time in seconds"
    )


class EngineConfig(BaseModel):
    """External transform engine command."""

    command: list[str] = Field(
        default_factory=list,
        description="Command run to import a migration group; '{group}' is substituted",
    )
    group: str = Field(default=MIGRATE_GROUP, description="Migration group to import")
    timeout: int | None = Field(
        default=None, ge=1, description="Seconds before the engine command is killed"
    )
    working_dir: str | None = Field(default=None, description="Working directory for the command")


class StateConfig(BaseModel):
    """State database holding the lock, migration registry and import history.

    Pool settings apply to server databases only; SQLite files are opened
    without a pool.
    """

    db_path: str = Field(
        default="./sf_import_state.db",
        description="SQLite file path, or a full SQLAlchemy URL",
    )
    pool_size: int = Field(default=5, ge=1, le=50)
    pool_timeout: int = Field(default=30, ge=1, le=300, description="Seconds to wait for a connection")
    pool_recycle: int = Field(
        default=3600, ge=60, le=28800, description="Seconds before a connection is replaced"
    )

    @property
    def database_url(self) -> str:
        """Full SQLAlchemy URL; plain paths are treated as SQLite files."""
        if "://" in self.db_path:
            return self.db_path
        return f"sqlite:///{self.db_path}"


class LoggingConfig(BaseModel):
    level: LogLevel = Field(default="WARNING", description="Console log level")
    file_level: LogLevel = Field(default="DEBUG", description="File log level")
    format: Literal["json", "console"] = Field(default="json", description="File log format")
    file: str | None = Field(default="logs/sf_import.log", description="Log file path")

    @field_validator("level", "file_level", mode="before")
    @classmethod
    def upper_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    @field_validator("format", mode="before")
    @classmethod
    def lower_format(cls, v: Any) -> Any:
        return v.lower() if isinstance(v, str) else v


class SchedulerConfig(BaseModel):
    """Periodic trigger for ``sf-import schedule``."""

    interval_minutes: int = Field(
        default=30, ge=1, le=1440, description="Minutes between scheduled import ticks"
    )
    misfire_grace_time: int = Field(
        default=60, ge=1, description="Seconds a late tick may still run"
    )


class ImporterConfig(BaseSettings):
    """Main import configuration.

    Loaded from YAML; any field can also be set from the environment with the
    ``SF_IMPORT_`` prefix and ``__`` between nested names, for example
    ``SF_IMPORT_STATE__DB_PATH``.

    Values from the YAML file take precedence over the environment. A setting
    meant to come from the environment is either left out of the file or
    written there as ``${VAR}``.
    """

    model_config = SettingsConfigDict(
        env_prefix="SF_IMPORT_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # "import" is a keyword, hence the alias. Aliases skip env_prefix, so the
    # prefixed environment name is listed explicitly.
    settings: ImportSettings = Field(
        default_factory=ImportSettings,
        alias="import",
        validation_alias=AliasChoices("import", "sf_import_import"),
    )
    paths: PathConfig = Field(default_factory=PathConfig)
    lock: LockConfig = Field(default_factory=LockConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)
    state: StateConfig = Field(default_factory=StateConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)

    @model_validator(mode="after")
    def validate_engine_command(self) -> "ImporterConfig":
        """An enabled import needs an engine command to run."""
        if self.settings.enabled and not self.engine.command:
            raise ValueError("engine.command must be set when import.enabled is true")
        return self


def load_config_from_yaml(config_path: str | Path) -> ImporterConfig:
    """Load configuration from YAML file.

    String values may reference environment variables as ``${VAR}`` or
    ``${VAR:-default}``.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        ImporterConfig: Loaded configuration

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If the file is empty, references an unset variable, or
            fails validation
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    config_data = yaml.safe_load(config_path.read_text())
    if not config_data:
        raise ValueError(f"Empty configuration file: {config_path}")

    return ImporterConfig(**_expand_env_vars(config_data))


def _expand_env_vars(data: Any) -> Any:
    """Recursively substitute ``${VAR}`` references in strings."""
    if isinstance(data, dict):
        return {k: _expand_env_vars(v) for k, v in data.items()}
    if isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    if isinstance(data, str):
        return _ENV_PATTERN.sub(_env_value, data)
    return data


def _env_value(match: re.Match) -> str:
    name, default = match.group(1), match.group(2)
    value = os.environ.get(name, default)
    if value is None:
        raise ValueError(
            f"Environment variable '{name}' not found. "
            f"Set it in your environment or .env file, or give a default with ${{{name}:-...}}."
        )
    return value


def save_config_to_yaml(config: ImporterConfig, output_path: str | Path) -> None:
    """Write a configuration back out as YAML, using the file's key names."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w") as f:
        yaml.safe_dump(config.model_dump(by_alias=True), f, default_flow_style=False, sort_keys=False)
