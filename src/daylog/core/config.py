"""daylog configuration: Pydantic model, load, and save."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from daylog.core.constants import (
    CONFIG_FILENAME,
    DEFAULT_READ_LIMIT,
    DEFAULT_ROOT_DIR,
    DEFAULT_SERIES_DAYS,
    ERRORS_CHANNEL,
    MAX_READ_LIMIT,
    MIN_READ_LIMIT,
    SECURITY_CHANNEL,
    VIEW_READ_LIMIT,
)
from daylog.core.exceptions import ConfigError, ConfigNotFoundError

# ---------------------------------------------------------------------------
# Sub-models
# ---------------------------------------------------------------------------


class ChannelConfig(BaseModel):
    directory: str  # relative to root_dir unless absolute
    prefix: str  # <prefix>_YYYYMMDD.log

    @field_validator("directory", "prefix")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v.strip()

    @field_validator("prefix")
    @classmethod
    def plain_prefix(cls, v: str) -> str:
        if "/" in v or "\\" in v or "*" in v:
            raise ValueError("prefix must be a plain file name fragment")
        return v


class ReadConfig(BaseModel):
    default_limit: int = DEFAULT_READ_LIMIT
    view_limit: int = VIEW_READ_LIMIT

    @field_validator("default_limit", "view_limit")
    @classmethod
    def validate_limit(cls, v: int) -> int:
        if not (MIN_READ_LIMIT <= v <= MAX_READ_LIMIT):
            raise ValueError(f"limit must be between {MIN_READ_LIMIT} and {MAX_READ_LIMIT}")
        return v


class StatsConfig(BaseModel):
    series_days: int = DEFAULT_SERIES_DAYS

    @field_validator("series_days")
    @classmethod
    def validate_days(cls, v: int) -> int:
        if not (1 <= v <= 366):
            raise ValueError("series_days must be between 1 and 366")
        return v


class LoggingConfig(BaseModel):
    level: str = "WARNING"
    format: str = "text"  # "text" | "json"

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if v.lower() not in ("text", "json"):
            raise ValueError("Log format must be 'text' or 'json'")
        return v.lower()


# ---------------------------------------------------------------------------
# Root config
# ---------------------------------------------------------------------------


class DaylogConfig(BaseModel):
    """Root daylog configuration model."""

    root_dir: str = DEFAULT_ROOT_DIR
    project_root: str = ""  # stripped from backtrace locations; empty → cwd
    security: ChannelConfig = Field(
        default_factory=lambda: ChannelConfig(directory=SECURITY_CHANNEL, prefix=SECURITY_CHANNEL)
    )
    errors: ChannelConfig = Field(
        default_factory=lambda: ChannelConfig(directory=ERRORS_CHANNEL, prefix=ERRORS_CHANNEL)
    )
    read: ReadConfig = Field(default_factory=ReadConfig)
    stats: StatsConfig = Field(default_factory=StatsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def root_path(self) -> Path:
        return Path(self.root_dir).expanduser()

    @property
    def project_root_path(self) -> Path:
        if self.project_root:
            return Path(self.project_root).expanduser()
        return Path.cwd()

    def channel_dir(self, channel: ChannelConfig) -> Path:
        d = Path(channel.directory).expanduser()
        return d if d.is_absolute() else self.root_path / d


# ---------------------------------------------------------------------------
# Load / save
# ---------------------------------------------------------------------------


def _config_file_path() -> Path:
    if env_path := os.environ.get("DAYLOG_CONFIG"):
        return Path(env_path)
    return Path.cwd() / CONFIG_FILENAME


def load_config(path: Path | None = None) -> DaylogConfig:
    """
    Load DaylogConfig from TOML file, overlaid with environment variables.

    Priority (highest to lowest):
      1. Environment variables (DAYLOG_*)
      2. Config file (./daylog.toml or $DAYLOG_CONFIG)
    """
    import tomllib

    cfg_path = path or _config_file_path()

    if not cfg_path.exists():
        raise ConfigNotFoundError(f"Config file not found: {cfg_path}")

    try:
        with open(cfg_path, "rb") as f:
            data = tomllib.load(f)
    except Exception as exc:
        raise ConfigError(f"Cannot read config file {cfg_path}: {exc}") from exc

    _apply_env_overrides(data)

    try:
        return DaylogConfig.model_validate(data)
    except Exception as exc:
        raise ConfigError(f"Invalid config at {cfg_path}: {exc}") from exc


def load_config_or_default(path: Path | None = None) -> DaylogConfig:
    """Like :func:`load_config`, but fall back to defaults when no file exists."""
    try:
        return load_config(path)
    except ConfigNotFoundError:
        data: dict[str, Any] = {}
        _apply_env_overrides(data)
        try:
            return DaylogConfig.model_validate(data)
        except Exception as exc:
            raise ConfigError(f"Invalid DAYLOG_* environment overrides: {exc}") from exc


def _apply_env_overrides(data: dict[str, Any]) -> None:
    """Overlay DAYLOG_* environment variables onto the parsed TOML data."""
    if root := os.environ.get("DAYLOG_ROOT_DIR"):
        data["root_dir"] = root
    if level := os.environ.get("DAYLOG_LOG_LEVEL"):
        data.setdefault("logging", {})["level"] = level
    if fmt := os.environ.get("DAYLOG_LOG_FORMAT"):
        data.setdefault("logging", {})["format"] = fmt


def save_config(config_data: dict[str, Any], path: Path | None = None) -> Path:
    """Write config dict to TOML file atomically."""
    import tomli_w

    cfg_path = path or _config_file_path()
    cfg_path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path = cfg_path.with_suffix(".tmp")
    try:
        with open(tmp_path, "wb") as f:
            tomli_w.dump(config_data, f)
        tmp_path.replace(cfg_path)
    except Exception as exc:
        tmp_path.unlink(missing_ok=True)
        raise ConfigError(f"Cannot write config to {cfg_path}: {exc}") from exc

    return cfg_path
