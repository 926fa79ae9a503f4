"""
Sink resolver.

Decides which sinks exist for a resolved logger configuration:

    sink            active when
    console         enabled AND development   (or enabled AND enable_console
                                               when that is set explicitly)
    file            enabled AND development
    error-file      enabled AND (development OR production)
    exception-file  enabled AND (development OR production)

A sink whose path is empty is never created. Absence of a sink is a normal
outcome; nothing in here raises.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Mapping, Optional

if TYPE_CHECKING:
    from sinklog.config import LoggerConfig


class Environment(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    OTHER = "other"

    @classmethod
    def parse(cls, value: "str | Environment | None") -> "Environment":
        if isinstance(value, Environment):
            return value
        normalized = (value or "").strip().lower()
        for member in (cls.DEVELOPMENT, cls.PRODUCTION):
            if member.value == normalized:
                return member
        return cls.OTHER


class SinkKind(str, Enum):
    CONSOLE = "console"
    FILE = "file"
    ERROR_FILE = "error-file"
    EXCEPTION_FILE = "exception-file"

    @property
    def needs_path(self) -> bool:
        return self is not SinkKind.CONSOLE


@dataclass(frozen=True)
class SinkConfig:
    """Concrete configuration of one active sink."""
    kind: SinkKind
    path: Optional[str] = None
    min_level: Optional[str] = None     # level name; None accepts all
    color_enabled: bool = False
    size_limit: Optional[int] = None    # bytes; file kinds only
    label: Optional[str] = None
    fallback_color: Optional[str] = None


def is_active(
    kind: SinkKind,
    environment: Environment,
    logging_enabled: bool,
    enable_console: Optional[bool] = None,
) -> bool:
    """Activation rule for one sink kind, before the path check."""
    if not logging_enabled:
        return False
    if kind is SinkKind.CONSOLE:
        if enable_console is not None:
            return enable_console
        return environment is Environment.DEVELOPMENT
    if kind is SinkKind.FILE:
        return environment is Environment.DEVELOPMENT
    return environment in (Environment.DEVELOPMENT, Environment.PRODUCTION)


def resolve_sinks(config: "LoggerConfig") -> dict[SinkKind, SinkConfig]:
    """Compute the active sink set, keyed by kind, for one configuration."""
    env = config.environment
    enabled = config.logging_enabled
    sinks: dict[SinkKind, SinkConfig] = {}

    console_on = is_active(SinkKind.CONSOLE, env, enabled, config.enable_console)
    if console_on:
        color = config.enable_color if config.enable_color is not None else console_on
        sinks[SinkKind.CONSOLE] = SinkConfig(
            kind=SinkKind.CONSOLE,
            color_enabled=color,
            label=config.label,
            fallback_color=config.default_color,
        )

    candidates = (
        (SinkKind.FILE, config.path_log, None, config.enable_color_path_log),
        (SinkKind.ERROR_FILE, config.path_error, "error", config.enable_color_path_error),
        (SinkKind.EXCEPTION_FILE, config.path_exc_logger, None, config.enable_color_path_exc_logger),
    )
    for kind, path, min_level, color in candidates:
        if not path or not is_active(kind, env, enabled):
            continue
        sinks[kind] = SinkConfig(
            kind=kind,
            path=path,
            min_level=min_level,
            color_enabled=bool(color),
            size_limit=config.size_limit,
            label=config.label,
            fallback_color=config.default_color,
        )

    return sinks


def combine_sink_sets(
    global_sinks: Mapping[SinkKind, SinkConfig],
    instance_sinks: Mapping[SinkKind, SinkConfig],
    disabled: Iterable[SinkKind] = (),
) -> dict[SinkKind, SinkConfig]:
    """
    Union of the global and instance record sinks, instance winning per kind.

    Kinds in `disabled` were switched off explicitly by the instance and are
    removed. Exception sinks are not record sinks and never come from the
    global set; see exception_sinks().
    """
    combined = {
        kind: cfg for kind, cfg in global_sinks.items()
        if kind is not SinkKind.EXCEPTION_FILE
    }
    combined.update(
        (kind, cfg) for kind, cfg in instance_sinks.items()
        if kind is not SinkKind.EXCEPTION_FILE
    )
    for kind in disabled:
        combined.pop(kind, None)
    return combined


def exception_sinks(instance_sinks: Mapping[SinkKind, SinkConfig]) -> list[SinkConfig]:
    cfg = instance_sinks.get(SinkKind.EXCEPTION_FILE)
    return [cfg] if cfg is not None else []
