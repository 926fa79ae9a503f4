"""
RPC request client.

A thin wrapper over an injected RPC peer (any object exposing
`request(service, payload, options, callback)` where callback is called as
`callback(err, data)`). Each request returns a concurrent.futures.Future;
an optional callback is attached to that future as an observer, so both
notification channels fire for every completed call.

    settings = require_rpc_settings(read_config(), logger)
    client = RpcClient(peer, settings, logger)
    fut = client.request({"action": "getUser", "id": 1})
    fut.result(timeout=5)
"""

from __future__ import annotations

from concurrent.futures import Future
from typing import Any, Callable, Mapping, Optional, Protocol

from pydantic import BaseModel, ValidationError

from sinklog.core import Logger
from sinklog.errors import ConfigurationMissingError

RPC_CONFIG_SECTION = "grenacheClient"
ERR_CONFIG_MISSING = "ERR_CONFIG_ARGS_NO_GRENACHE_CLIENT"
DEFAULT_TIMEOUT_MS = 90000

Callback = Callable[[Optional[BaseException], Any], None]


class RpcPeer(Protocol):
    def request(
        self,
        service: str,
        payload: Any,
        options: Mapping[str, Any],
        callback: Callable[[Optional[BaseException], Any], None],
    ) -> None: ...


class RpcSettings(BaseModel):
    grape: str              # announce endpoint, e.g. http://127.0.0.1:30001
    query: str              # service name requests are sent to
    timeout: int = DEFAULT_TIMEOUT_MS


def require_rpc_settings(raw: Mapping[str, Any], logger: Optional[Logger] = None) -> RpcSettings:
    """
    Extract the RPC section of a raw config mapping.

    Raises ConfigurationMissingError (after logging it) when the section,
    its `grape` or its `query` is missing.
    """
    section = raw.get(RPC_CONFIG_SECTION)
    if isinstance(section, Mapping) and section.get("grape") and section.get("query"):
        try:
            return RpcSettings.model_validate(dict(section))
        except ValidationError as exc:
            err = ConfigurationMissingError(ERR_CONFIG_MISSING)
            if logger is not None:
                logger.error("Found %s at %s", "error", err, meta={"details": exc.errors()})
            raise err from exc

    err = ConfigurationMissingError(ERR_CONFIG_MISSING)
    if logger is not None:
        logger.error("Found %s at %s", "error", err)
    raise err


class RpcClient:
    """Future-returning request wrapper around an RPC peer."""

    def __init__(self, peer: RpcPeer, settings: RpcSettings, logger: Optional[Logger] = None):
        self.peer = peer
        self.settings = settings
        self.logger = logger

    def request(
        self,
        payload: Any,
        options: Optional[Mapping[str, Any]] = None,
        callback: Optional[Callback] = None,
    ) -> Future:
        """
        Send `payload` to the configured service.

        The returned future resolves with the response or fails with the
        peer's error. `callback`, when given, is called as callback(err, data)
        once the future completes.
        """
        future: Future = Future()
        future.set_running_or_notify_cancel()
        if callback is not None:
            future.add_done_callback(_observer(callback))

        opts = dict(options) if options is not None else {"timeout": self.settings.timeout}

        def on_response(err: Optional[BaseException], data: Any = None) -> None:
            if future.done():
                return
            if err is not None:
                if self.logger is not None:
                    self.logger.debug(f"Found error at {err!r}")
                future.set_exception(err if isinstance(err, BaseException) else RuntimeError(str(err)))
                return
            future.set_result(data)

        try:
            self.peer.request(self.settings.query, payload, opts, on_response)
        except Exception as exc:
            on_response(exc)
        return future


def _observer(callback: Callback) -> Callable[[Future], None]:
    def notify(fut: Future) -> None:
        err = fut.exception()
        if err is not None:
            callback(err, None)
        else:
            callback(None, fut.result())
    return notify
