"""
Bridge from Python's ``logging`` module into a Coralogix transport.

``CoralogixHandler`` converts each ``LogRecord`` into a pino-shaped raw
record and hands it to the transport's event loop with
``call_soon_threadsafe``, so ``emit()`` is safe from any thread and never
blocks on the network. Flushes triggered by the hand-off run as tasks on
that loop.
"""

from __future__ import annotations

import asyncio
import logging
import socket
from typing import TYPE_CHECKING, Any

from . import diagnostics

if TYPE_CHECKING:
    from ..transport import CoralogixTransport

# Records from these loggers are never forwarded (delivery logs would loop)
_IGNORED_LOGGER_PREFIXES: tuple[str, ...] = ("logship", "httpx", "httpcore")

_BRIDGE_FIELDS: tuple[str, ...] = ("category", "className", "methodName", "threadId")


def stdlib_level_to_pino(levelno: int) -> int:
    """Map a ``logging`` level number onto pino's 10..60 scale."""
    if levelno >= logging.CRITICAL:
        return 60
    if levelno >= logging.ERROR:
        return 50
    if levelno >= logging.WARNING:
        return 40
    if levelno >= logging.INFO:
        return 30
    if levelno >= logging.DEBUG:
        return 20
    return 10


def _is_ignored(name: str) -> bool:
    return any(
        name == prefix or name.startswith(prefix + ".")
        for prefix in _IGNORED_LOGGER_PREFIXES
    )


class CoralogixHandler(logging.Handler):
    """``logging.Handler`` that forwards records to a ``CoralogixTransport``."""

    def __init__(
        self,
        transport: CoralogixTransport,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
        level: int = logging.NOTSET,
    ) -> None:
        super().__init__(level=level)
        self._transport = transport
        self._loop = loop or asyncio.get_running_loop()
        self._hostname = socket.gethostname()
        self._pending: set[asyncio.Task[Any]] = set()

    def to_raw(self, record: logging.LogRecord) -> dict[str, Any]:
        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self._format_exception(record.exc_info)}"
        elif record.exc_text:
            message = f"{message}\n{record.exc_text}"
        raw: dict[str, Any] = {
            "level": stdlib_level_to_pino(record.levelno),
            "time": int(record.created * 1000),
            "msg": message,
            "hostname": self._hostname,
            "pid": record.process,
            "category": record.name,
            "methodName": record.funcName,
            "threadId": record.threadName,
        }
        for field in _BRIDGE_FIELDS:
            value = record.__dict__.get(field)
            if value:
                raw[field] = value
        return raw

    def _format_exception(self, exc_info: Any) -> str:
        formatter = self.formatter or logging.Formatter()
        return formatter.formatException(exc_info)

    def emit(self, record: logging.LogRecord) -> None:
        if _is_ignored(record.name):
            return
        try:
            raw = self.to_raw(record)
            self._loop.call_soon_threadsafe(self._submit, raw)
        except RuntimeError:
            # Loop closed: the transport is gone, drop the record
            return
        except Exception:
            self.handleError(record)

    def _submit(self, raw: dict[str, Any]) -> None:
        if self._transport.closed:
            return
        try:
            if self._transport.submit(raw):
                task = self._loop.create_task(self._flush())
                self._pending.add(task)
                task.add_done_callback(self._pending.discard)
        except Exception as exc:
            diagnostics.warn(
                "stdlib-bridge",
                "failed to forward record",
                error_type=type(exc).__name__,
                error=str(exc),
                _rate_limit_key="stdlib-bridge",
            )

    async def _flush(self) -> None:
        # close() drains on its own; a flush racing it has nothing to do
        if not self._transport.closed:
            await self._transport.flush()

    async def wait_pending(self) -> None:
        """Wait for flushes scheduled by this handler to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


def enable_stdlib_bridge(
    transport: CoralogixTransport,
    *,
    level: int = logging.INFO,
    logger_name: str | None = None,
    remove_existing_handlers: bool = False,
    loop: asyncio.AbstractEventLoop | None = None,
) -> CoralogixHandler:
    """Attach a ``CoralogixHandler`` to a stdlib logger (root by default).

    Must be called from the transport's running event loop unless ``loop``
    is given.
    """
    handler = CoralogixHandler(transport, loop=loop, level=level)
    target = logging.getLogger(logger_name)
    if remove_existing_handlers:
        for existing in list(target.handlers):
            target.removeHandler(existing)
    target.addHandler(handler)
    if target.level == logging.NOTSET or target.level > level:
        target.setLevel(level)
    return handler


def disable_stdlib_bridge(
    handler: CoralogixHandler, *, logger_name: str | None = None
) -> None:
    logging.getLogger(logger_name).removeHandler(handler)
