"""
sinklog: leveled, multi-sink logging.

Records are filtered, enriched with label and timestamp, formatted into a
colored text line with a JSON metadata block, and routed to the console,
a general log file, an error-only file and an exception file, depending on
environment and configuration.
"""

from sinklog.config import LoggerConfig, LoggerOverrides, LogSettings, load_settings, merge_config
from sinklog.core import Logger
from sinklog.errors import ConfigurationMissingError, SinklogError, SinkWriteError
from sinklog.factory import build_logger, default_logger
from sinklog.formatters import FormatOptions, LineFormatter, format_record
from sinklog.levels import DEFAULT_TAXONOMY, Taxonomy
from sinklog.records import LogRecord, Scalar, Structured
from sinklog.routing import Environment, SinkConfig, SinkKind, resolve_sinks
from sinklog.sinks import ConsoleSink, FileSink, Sink

__version__ = "0.1.0"

__all__ = [
    "build_logger",
    "default_logger",
    "Logger",
    "LogSettings",
    "LoggerOverrides",
    "LoggerConfig",
    "load_settings",
    "merge_config",
    "Taxonomy",
    "DEFAULT_TAXONOMY",
    "LogRecord",
    "Scalar",
    "Structured",
    "FormatOptions",
    "LineFormatter",
    "format_record",
    "Environment",
    "SinkKind",
    "SinkConfig",
    "resolve_sinks",
    "Sink",
    "ConsoleSink",
    "FileSink",
    "SinklogError",
    "ConfigurationMissingError",
    "SinkWriteError",
]
