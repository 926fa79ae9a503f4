"""
Logger factory.

build_logger() merges caller overrides onto the global settings and builds a
fresh Logger. The sink set is resolved twice, once for the plain global
settings and once for the merged instance config, and the two are combined
per kind with the instance winning.

    log = build_logger({"label": ":grenache:client"}, settings)
    log = build_logger(LoggerOverrides(path_error="./custom.log"))
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Mapping, Optional

from sinklog.config import LoggerOverrides, LogSettings, load_settings, merge_config
from sinklog.core import Logger
from sinklog.formatters import FormatFn, format_record
from sinklog.routing import SinkKind, combine_sink_sets, exception_sinks, resolve_sinks
from sinklog.sinks import ErrorChannel, build_sink


def build_logger(
    overrides: LoggerOverrides | Mapping[str, Any] | None = None,
    settings: Optional[LogSettings] = None,
    formatter: FormatFn = format_record,
    on_error: Optional[ErrorChannel] = None,
) -> Logger:
    """
    Build a Logger from global settings plus per-instance overrides.

    A configuration that yields no sinks gives a silent Logger. Malformed
    overrides raise pydantic.ValidationError; an unknown `level` raises
    ValueError.
    """
    if settings is None:
        settings = load_settings()
    if overrides is None:
        overrides = LoggerOverrides()
    elif not isinstance(overrides, LoggerOverrides):
        overrides = LoggerOverrides.model_validate(dict(overrides))

    global_sinks = resolve_sinks(merge_config(settings))
    instance_config = merge_config(settings, overrides)
    instance_sinks = resolve_sinks(instance_config)

    disabled = [SinkKind.CONSOLE] if overrides.enable_console is False else []
    record_configs = combine_sink_sets(global_sinks, instance_sinks, disabled)

    return Logger(
        config=instance_config,
        sinks={kind: build_sink(cfg, on_error) for kind, cfg in record_configs.items()},
        exception_sinks=[build_sink(cfg, on_error) for cfg in exception_sinks(instance_sinks)],
        formatter=formatter,
    )


@lru_cache(maxsize=None)
def default_logger() -> Logger:
    """The process-wide logger: global settings, no overrides. Built once."""
    return build_logger(settings=load_settings())
