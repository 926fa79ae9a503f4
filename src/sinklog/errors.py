"""Exception types raised or reported by sinklog."""

from __future__ import annotations


class SinklogError(Exception):
    """Base class for sinklog errors."""


class ConfigurationMissingError(SinklogError):
    """
    A required configuration section is absent.

    Raised while a service is being constructed; fatal to that service's
    startup and never retried.
    """


class SinkWriteError(SinklogError):
    """
    A sink failed to write a record.

    Never raised to callers of Logger.log(); delivered to the failing sink's
    error channel instead.
    """

    def __init__(self, sink_name: str, reason: str):
        super().__init__(f"{sink_name}: {reason}")
        self.sink_name = sink_name
        self.reason = reason
