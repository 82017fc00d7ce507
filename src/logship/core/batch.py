"""
Batch accumulation and flush orchestration.

``BatchAccumulator`` buffers wire-ready records, tracks their estimated
serialized size, and hands complete batches to an injected async ``deliver``
callable. It guarantees:

- at most one delivery in flight (a flush requested meanwhile is a no-op),
- the live buffer is swapped for an empty one *before* delivery is awaited,
  so records added during an in-flight delivery land in the next batch,
- delivery failures are contained at the flush boundary and never raise.

All methods must be called from the event loop that owns the accumulator.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from enum import Enum
from typing import Any, Awaitable, Callable, Final

from pydantic import BaseModel, ConfigDict, Field

from . import diagnostics
from .errors import AccumulatorClosedError
from .serialization import estimate_record_size
from .settings import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_FLUSH_INTERVAL_SECONDS,
    DEFAULT_MAX_BATCH_SIZE_BYTES,
)

# Estimates are approximate and a batch over the backend limit is rejected
# as a whole, so the size trigger fires at 80% of the ceiling.
FLUSH_THRESHOLD_RATIO: Final[float] = 0.8

Record = Mapping[str, Any]
DeliverFn = Callable[[list[Any]], Awaitable[object]]


class FlushOutcome(str, Enum):
    SKIPPED_EMPTY = "skipped_empty"
    SKIPPED_IN_PROGRESS = "skipped_in_progress"
    DELIVERED = "delivered"
    FAILED = "failed"


class BatchPolicy(BaseModel):
    """Thresholds for one accumulator. Immutable once built."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    batch_size: int = Field(default=DEFAULT_BATCH_SIZE, ge=1)
    flush_interval_seconds: float = Field(
        default=DEFAULT_FLUSH_INTERVAL_SECONDS, gt=0.0
    )
    max_batch_size_bytes: int = Field(default=DEFAULT_MAX_BATCH_SIZE_BYTES, ge=1)
    size_trigger_requires_count: bool = False

    @property
    def flush_threshold_bytes(self) -> float:
        return self.max_batch_size_bytes * FLUSH_THRESHOLD_RATIO


class BatchAccumulator:
    """In-memory record buffer with size/time driven flushing."""

    def __init__(self, policy: BatchPolicy, deliver: DeliverFn) -> None:
        self._policy = policy
        self._deliver = deliver
        self._buffer: list[Any] = []
        self._size_bytes = 0
        self._flushing = False
        self._closed = False
        self._timer_task: asyncio.Task[None] | None = None
        self._inflight: asyncio.Task[FlushOutcome] | None = None
        self._stop_task: asyncio.Task[None] | None = None
        self._ensure_timer()

    @property
    def policy(self) -> BatchPolicy:
        return self._policy

    @property
    def is_flushing(self) -> bool:
        return self._flushing

    @property
    def closed(self) -> bool:
        return self._closed

    def add(self, record: Record) -> bool:
        """Buffer one record.

        Returns:
            True when the byte threshold has been reached. Never performs I/O;
            acting on the signal is the caller's decision.
        """
        if self._closed:
            raise AccumulatorClosedError("add")
        self._ensure_timer()
        self._buffer.append(record)
        self._size_bytes += estimate_record_size(record)
        return self.needs_flush()

    def needs_flush(self) -> bool:
        return self._size_bytes >= self._policy.flush_threshold_bytes

    def size(self) -> int:
        return len(self._buffer)

    def estimated_size_bytes(self) -> int:
        return self._size_bytes

    async def flush(self) -> FlushOutcome:
        """Deliver the buffered records as one batch.

        No-op when the buffer is empty or a delivery is already in flight.
        Delivery errors are reported via diagnostics and returned as
        ``FlushOutcome.FAILED``; they are never raised.
        """
        if self._closed:
            raise AccumulatorClosedError("flush")
        return await self._flush()

    async def stop(self) -> None:
        """Cancel the timer, wait for an in-flight delivery, then drain.

        Safe to call more than once; only the first call does any work and
        later calls wait for it. Once started, the drain runs to completion
        even if the caller is cancelled.
        """
        if self._stop_task is None:
            self._closed = True
            self._stop_task = asyncio.get_running_loop().create_task(
                self._drain(), name="logship-accumulator-stop"
            )
        await asyncio.shield(self._stop_task)

    async def _drain(self) -> None:
        timer = self._timer_task
        self._timer_task = None
        if timer is not None:
            timer.cancel()
            try:
                await timer
            except asyncio.CancelledError:
                pass

        inflight = self._inflight
        if inflight is not None and not inflight.done():
            # Started deliveries run to completion; never aborted
            await asyncio.wait({inflight})

        await self._flush()

    async def _flush(self) -> FlushOutcome:
        if self._flushing:
            return FlushOutcome.SKIPPED_IN_PROGRESS
        if not self._buffer:
            return FlushOutcome.SKIPPED_EMPTY

        batch = self._buffer
        self._buffer = []
        self._size_bytes = 0
        self._flushing = True

        task = asyncio.get_running_loop().create_task(self._deliver_batch(batch))
        del batch
        self._inflight = task
        # Shielded: cancelling the caller must not abort a started delivery
        return await asyncio.shield(task)

    async def _deliver_batch(self, batch: list[Any]) -> FlushOutcome:
        try:
            await self._deliver(batch)
            return FlushOutcome.DELIVERED
        except Exception as exc:
            diagnostics.warn(
                "batch",
                "flush callback error",
                error_type=type(exc).__name__,
                error=str(exc),
                batch_size=len(batch),
                _rate_limit_key="batch-flush",
            )
            return FlushOutcome.FAILED
        finally:
            self._flushing = False
            self._inflight = None

    def _ensure_timer(self) -> None:
        if self._timer_task is not None or self._closed:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Started on first add() from inside a running loop
            return
        self._timer_task = loop.create_task(
            self._run_timer(), name="logship-flush-timer"
        )

    async def _run_timer(self) -> None:
        interval = self._policy.flush_interval_seconds
        while True:
            await asyncio.sleep(interval)
            await self._flush()


__all__ = [
    "FLUSH_THRESHOLD_RATIO",
    "BatchAccumulator",
    "BatchPolicy",
    "DeliverFn",
    "FlushOutcome",
]
