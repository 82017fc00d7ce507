"""
Coralogix transport: the owner that feeds the batch accumulator.

The transport consumes raw records (pino-style mappings or NDJSON lines),
maps each through ``transform_log``, buffers the result in a
``BatchAccumulator`` and decides when to flush. Delivery failures are
reported once through diagnostics, metrics and the optional ``on_error``
hook; the records of a failed batch are dropped.
"""

from __future__ import annotations

import asyncio
import inspect
import time
from collections.abc import AsyncIterable, Mapping
from typing import Any, Awaitable, Callable, Union

from .core import diagnostics
from .core.batch import BatchAccumulator, BatchPolicy, FlushOutcome
from .core.errors import DeliveryError, HttpError, SerializationError
from .core.serialization import parse_line
from .core.settings import TransportSettings, load_settings
from .core.transform import CoralogixLog, transform_log
from .metrics.metrics import MetricsCollector
from .sinks import BatchSender, CoralogixHttpSender

RawRecord = Union[Mapping[str, Any], str, bytes, bytearray]
ErrorHook = Callable[[DeliveryError], Union[None, Awaitable[None]]]

# Response bodies can be large; diagnostics carry only a prefix
_DIAGNOSTIC_TEXT_LIMIT = 1024


def policy_from_settings(settings: TransportSettings) -> BatchPolicy:
    return BatchPolicy(
        batch_size=settings.batch_size,
        flush_interval_seconds=settings.flush_interval_seconds,
        max_batch_size_bytes=settings.max_batch_size_bytes,
        size_trigger_requires_count=settings.size_trigger_requires_count,
    )


def _error_kind(exc: DeliveryError) -> str:
    if isinstance(exc, HttpError):
        return "http"
    if exc.cause is not None:
        return "network"
    return "unknown"


class CoralogixTransport:
    """Batching log transport for Coralogix.

    Usage:
        transport = build_transport(domain="eu1", api_key=..., ...)
        async with transport:
            await transport.write({"level": 30, "time": ..., "msg": "hi"})
    """

    def __init__(
        self,
        settings: TransportSettings,
        *,
        sender: BatchSender | None = None,
        on_error: ErrorHook | None = None,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self._settings = settings
        self._sender: BatchSender = sender or CoralogixHttpSender.from_settings(
            settings
        )
        self._owns_sender = sender is None
        self._on_error = on_error
        self._metrics = (
            metrics
            if metrics is not None
            else MetricsCollector(enabled=settings.enable_metrics)
        )
        self._accumulator = BatchAccumulator(
            policy_from_settings(settings), self._deliver
        )
        self._closed = False
        self._close_task: asyncio.Task[None] | None = None

    @property
    def settings(self) -> TransportSettings:
        return self._settings

    @property
    def accumulator(self) -> BatchAccumulator:
        return self._accumulator

    @property
    def metrics(self) -> MetricsCollector:
        return self._metrics

    @property
    def closed(self) -> bool:
        return self._closed

    def submit(self, raw: RawRecord) -> bool:
        """Parse, transform and buffer one raw record without awaiting.

        Returns True when a flush should be triggered now. Malformed input
        is skipped with a diagnostic and never reaches the accumulator.
        """
        if isinstance(raw, Mapping):
            record: Mapping[str, Any] = raw
        elif isinstance(raw, (str, bytes, bytearray)):
            if not raw.strip():
                return False
            try:
                record = parse_line(raw)
            except SerializationError as exc:
                return self._skip("failed to parse log line", exc)
        else:
            return self._skip(
                "unsupported log record type",
                TypeError(f"expected mapping, str or bytes, got {type(raw).__name__}"),
            )

        try:
            log = transform_log(record, self._settings)
        except Exception as exc:
            return self._skip("failed to transform log record", exc)
        size_crossed = self._accumulator.add(log)
        return self._flush_due(size_crossed)

    def _skip(self, message: str, exc: BaseException) -> bool:
        diagnostics.warn(
            "transport",
            message,
            error_type=type(exc).__name__,
            error=str(exc),
            _rate_limit_key="transport-skip",
        )
        self._metrics.record_skipped()
        return False

    def _flush_due(self, size_crossed: bool) -> bool:
        if self._accumulator.size() >= self._settings.batch_size:
            return True
        # Coupled mode: size alone waits for the timer or shutdown
        if self._settings.size_trigger_requires_count:
            return False
        return size_crossed

    async def write(self, raw: RawRecord) -> None:
        if self.submit(raw):
            await self._accumulator.flush()

    async def flush(self) -> FlushOutcome:
        return await self._accumulator.flush()

    async def run(self, source: AsyncIterable[RawRecord]) -> None:
        """Consume ``source`` until exhausted, then drain and close."""
        try:
            async for raw in source:
                await self.write(raw)
        finally:
            await self.close()

    async def close(self) -> None:
        """Drain buffered records and release the sender.

        Idempotent. A cancelled caller does not interrupt the shutdown; any
        later call waits for it to finish.
        """
        if self._close_task is None:
            self._closed = True
            self._close_task = asyncio.get_running_loop().create_task(
                self._shutdown(), name="logship-transport-close"
            )
        await asyncio.shield(self._close_task)

    async def _shutdown(self) -> None:
        try:
            await self._accumulator.stop()
        finally:
            if self._owns_sender:
                await self._sender.aclose()

    async def __aenter__(self) -> CoralogixTransport:
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.close()

    async def _deliver(self, batch: list[CoralogixLog]) -> None:
        start = time.perf_counter()
        try:
            await self._sender.send(batch)
        except Exception as exc:
            error = (
                exc
                if isinstance(exc, DeliveryError)
                else DeliveryError(f"Failed to send logs: {exc}", cause=exc)
            )
            await self._metrics.record_batch_failed(
                len(batch),
                kind=_error_kind(error),
                latency_seconds=time.perf_counter() - start,
            )
            diagnostics.warn(
                "coralogix-transport",
                "failed to send logs to Coralogix",
                error=error.message[:_DIAGNOSTIC_TEXT_LIMIT],
                status_code=getattr(error, "status_code", None),
                batch_size=len(batch),
            )
            await self._report(error)
            return
        await self._metrics.record_batch_delivered(
            len(batch), latency_seconds=time.perf_counter() - start
        )

    async def _report(self, error: DeliveryError) -> None:
        if self._on_error is None:
            return
        try:
            result = self._on_error(error)
            if inspect.isawaitable(result):
                await result
        except Exception as hook_exc:
            diagnostics.warn(
                "coralogix-transport",
                "on_error hook raised",
                error_type=type(hook_exc).__name__,
                error=str(hook_exc),
            )


def build_transport(
    settings: TransportSettings | None = None,
    *,
    sender: BatchSender | None = None,
    on_error: ErrorHook | None = None,
    metrics: MetricsCollector | None = None,
    **overrides: Any,
) -> CoralogixTransport:
    """Validate configuration and build a transport.

    Raises:
        ConfigurationError: when required identifiers are missing or invalid.
    """
    resolved = load_settings(settings, **overrides)
    diagnostics.set_enabled(resolved.internal_logging_enabled)
    return CoralogixTransport(
        resolved, sender=sender, on_error=on_error, metrics=metrics
    )
