"""
Configuration for sinklog.

Three layers:
  - LogSettings:     global defaults, read from YAML + environment variables
  - LoggerOverrides: what a caller passes when building its own logger
  - LoggerConfig:    the immutable result of merge_config(settings, overrides)

YAML may use either snake_case keys or camelCase names
(enableLog, pathError, maxSize, loggerConfig, ...). Keys for
other services (e.g. grenacheClient) are ignored here.

Usage:
    settings = load_settings("config/default.yaml", environment="development")
    config = merge_config(settings, LoggerOverrides(label=":worker"))
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from sinklog.colors import is_known
from sinklog.errors import ConfigurationMissingError
from sinklog.levels import DEFAULT_TAXONOMY, Taxonomy
from sinklog.routing import Environment

CONFIG_ENV_VAR = "SINKLOG_CONFIG"
ENVIRONMENT_ENV_VARS = ("SINKLOG_ENV", "APP_ENV")
DEFAULT_CONFIG_PATH = Path("config") / "default.yaml"


def _alias(*names: str) -> AliasChoices:
    return AliasChoices(*names)


# ═══════════════════════════════════════════════════════════════════
#  Global settings
# ═══════════════════════════════════════════════════════════════════

class LogSettings(BaseModel):
    """Process-wide logging defaults."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    environment: str = ""
    enable_log: bool = Field(False, validation_alias=_alias("enable_log", "enableLog"))
    log_dir: str = Field("logs", validation_alias=_alias("log_dir", "logDir"))
    app_name: str = Field("app", validation_alias=_alias("app_name", "appName"))
    label: Optional[str] = None

    # explicit paths; None → <log_dir>/<kind>-<app_name>.log
    path_log: Optional[str] = Field(None, validation_alias=_alias("path_log", "pathLog"))
    path_error: Optional[str] = Field(None, validation_alias=_alias("path_error", "pathError"))
    path_exc_logger: Optional[str] = Field(
        None, validation_alias=_alias("path_exc_logger", "pathExcLogger")
    )

    enable_console: Optional[bool] = Field(
        None, validation_alias=_alias("enable_console", "enableConsole")
    )
    enable_color: Optional[bool] = Field(
        None, validation_alias=_alias("enable_color", "enableColor")
    )
    enable_color_path_log: bool = Field(
        False, validation_alias=_alias("enable_color_path_log", "enableColorPathLog")
    )
    enable_color_path_error: bool = Field(
        False, validation_alias=_alias("enable_color_path_error", "enableColorPathError")
    )
    enable_color_path_exc_logger: bool = Field(
        False,
        validation_alias=_alias("enable_color_path_exc_logger", "enableColorPathExcLogger"),
    )
    size_limit: Optional[int] = Field(
        None, ge=0, validation_alias=_alias("size_limit", "sizeLimit", "maxSize")
    )
    level: Optional[str] = None
    logger_config: Taxonomy = Field(
        DEFAULT_TAXONOMY, validation_alias=_alias("logger_config", "loggerConfig")
    )

    @model_validator(mode="after")
    def check_level(self) -> "LogSettings":
        if self.level is not None:
            self.logger_config.resolve(self.level)
        return self

    @property
    def env(self) -> Environment:
        return Environment.parse(self.environment)

    @property
    def resolved_label(self) -> str:
        if self.label is not None:
            return self.label
        return ":app-dev" if self.env is Environment.DEVELOPMENT else ":app"

    def default_path(self, kind: str) -> str:
        return str(Path(self.log_dir) / f"{kind}-{self.app_name}.log")

    @classmethod
    def from_yaml(cls, path: str | Path) -> "LogSettings":
        """Load and validate from a YAML file."""
        return cls.model_validate(_read_yaml(Path(path)))

    @classmethod
    def from_dict(cls, data: dict) -> "LogSettings":
        return cls.model_validate(data)


# ═══════════════════════════════════════════════════════════════════
#  Per-instance overrides
# ═══════════════════════════════════════════════════════════════════

class LoggerOverrides(BaseModel):
    """
    Caller-supplied options for one logger. None means "inherit".

    `label` is appended to the global label; `logger_config` replaces the
    whole taxonomy.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    label: Optional[str] = None
    color: Optional[str] = None
    path_log: Optional[str] = Field(None, alias="pathLog")
    path_error: Optional[str] = Field(None, alias="pathError")
    path_exc_logger: Optional[str] = Field(None, alias="pathExcLogger")
    enable_console: Optional[bool] = Field(None, alias="enableConsole")
    enable_color: Optional[bool] = Field(None, alias="enableColor")
    enable_color_path_log: Optional[bool] = Field(None, alias="enableColorPathLog")
    enable_color_path_error: Optional[bool] = Field(None, alias="enableColorPathError")
    enable_color_path_exc_logger: Optional[bool] = Field(
        None, alias="enableColorPathExcLogger"
    )
    size_limit: Optional[int] = Field(None, ge=0, alias="sizeLimit")
    level: Optional[str] = None
    logger_config: Optional[Taxonomy] = Field(None, alias="loggerConfig")

    @field_validator("path_log", "path_error", "path_exc_logger", mode="before")
    @classmethod
    def coerce_path(cls, v: Any) -> Any:
        if isinstance(v, os.PathLike):
            return os.fspath(v)
        return v

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not is_known(v):
            raise ValueError(f"Unknown color '{v}'")
        return v


# ═══════════════════════════════════════════════════════════════════
#  Resolved config
# ═══════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LoggerConfig:
    """Settings of one logger after merging. Built once, never changed."""
    environment: Environment
    logging_enabled: bool
    label: str
    default_color: Optional[str]
    enable_console: Optional[bool]
    enable_color: Optional[bool]
    enable_color_path_log: bool
    enable_color_path_error: bool
    enable_color_path_exc_logger: bool
    size_limit: Optional[int]
    path_log: Optional[str]
    path_error: Optional[str]
    path_exc_logger: Optional[str]
    level: Optional[str]
    taxonomy: Taxonomy


def merge_config(
    settings: LogSettings,
    overrides: LoggerOverrides | None = None,
) -> LoggerConfig:
    """
    Merge overrides onto global settings. An explicit override wins; an
    absent one inherits.

    Raises ValueError if an explicit override `level` is not in the taxonomy.
    An inherited level missing from a replaced taxonomy is kept as is; the
    Logger then treats it as the most severe threshold.
    """
    o = overrides or LoggerOverrides()

    def pick(override: Any, default: Any) -> Any:
        return override if override is not None else default

    taxonomy = pick(o.logger_config, settings.logger_config)
    if o.level is not None:
        taxonomy.resolve(o.level)
    level = pick(o.level, settings.level)

    return LoggerConfig(
        environment=settings.env,
        logging_enabled=settings.enable_log,
        label=settings.resolved_label + (o.label or ""),
        default_color=o.color,
        enable_console=pick(o.enable_console, settings.enable_console),
        enable_color=pick(o.enable_color, settings.enable_color),
        enable_color_path_log=pick(o.enable_color_path_log, settings.enable_color_path_log),
        enable_color_path_error=pick(
            o.enable_color_path_error, settings.enable_color_path_error
        ),
        enable_color_path_exc_logger=pick(
            o.enable_color_path_exc_logger, settings.enable_color_path_exc_logger
        ),
        size_limit=pick(o.size_limit, settings.size_limit),
        path_log=pick(o.path_log, pick(settings.path_log, settings.default_path("logs"))),
        path_error=pick(
            o.path_error, pick(settings.path_error, settings.default_path("errors"))
        ),
        path_exc_logger=pick(
            o.path_exc_logger,
            pick(settings.path_exc_logger, settings.default_path("exceptions")),
        ),
        level=level,
        taxonomy=taxonomy,
    )


# ═══════════════════════════════════════════════════════════════════
#  Loading
# ═══════════════════════════════════════════════════════════════════

def _read_yaml(path: Path) -> dict:
    if not path.exists():
        raise ConfigurationMissingError(f"Config file not found: {path}")
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping at the top level")
    return data


def read_config(path: str | Path | None = None) -> dict:
    """
    Raw config mapping.

    Looks at `path`, then $SINKLOG_CONFIG, then config/default.yaml. An
    explicit path that does not exist raises ConfigurationMissingError; a
    missing default file yields an empty mapping.
    """
    explicit = path or os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        return _read_yaml(Path(explicit))
    if DEFAULT_CONFIG_PATH.exists():
        return _read_yaml(DEFAULT_CONFIG_PATH)
    return {}


def current_environment(default: str = "") -> str:
    for var in ENVIRONMENT_ENV_VARS:
        value = os.environ.get(var)
        if value:
            return value
    return default


def load_settings(
    path: str | Path | None = None,
    environment: str | None = None,
    raw: dict | None = None,
) -> LogSettings:
    """Build LogSettings from a config file (or `raw`) plus the environment."""
    data = dict(raw if raw is not None else read_config(path))
    data["environment"] = environment or current_environment(data.get("environment") or "")
    return LogSettings.model_validate(data)
