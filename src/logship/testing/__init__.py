"""
Testing utilities for code built on logship.

In-memory fakes for the delivery side so accumulators and transports can be
exercised without a network.

Example:
    from logship.testing import RecordingDeliver
    from logship import BatchAccumulator, BatchPolicy

    async def test_flush():
        deliver = RecordingDeliver()
        acc = BatchAccumulator(BatchPolicy(), deliver)
        acc.add({"text": "hi"})
        await acc.flush()
        assert deliver.batches == [[{"text": "hi"}]]
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Mapping, Sequence

from ..core.errors import DeliveryError
from ..sinks.http_client import DeliveryResult


class RecordingDeliver:
    """Async ``deliver`` callable that records every batch it receives.

    Args:
        fail_with: exception raised on every call (after recording).
        delay: seconds to sleep before completing, to keep a flush in flight.
    """

    def __init__(
        self, *, fail_with: BaseException | None = None, delay: float = 0.0
    ) -> None:
        self.batches: list[list[Any]] = []
        self.calls = 0
        self.fail_with = fail_with
        self.delay = delay
        self.started = asyncio.Event()

    async def __call__(self, batch: list[Any]) -> None:
        self.calls += 1
        # Copy: the accumulator must not mutate a batch after hand-off anyway
        self.batches.append(list(batch))
        self.started.set()
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_with is not None:
            raise self.fail_with

    @property
    def records(self) -> list[Any]:
        return [record for batch in self.batches for record in batch]


class RecordingSender:
    """``BatchSender`` fake: records batches, optionally fails per call.

    ``outcomes`` is consumed one entry per ``send``; an exception entry is
    raised, anything else counts as success. When exhausted every call
    succeeds.
    """

    def __init__(self, outcomes: Sequence[Any] | None = None) -> None:
        self.outcomes = list(outcomes or [])
        self.batches: list[list[Any]] = []
        self.closed = False

    async def send(self, logs: Sequence[Mapping[str, Any]]) -> DeliveryResult:
        self.batches.append(list(logs))
        if self.outcomes:
            outcome = self.outcomes.pop(0)
            if isinstance(outcome, BaseException):
                raise outcome
        return DeliveryResult(success=True, status_code=200, record_count=len(logs))

    async def aclose(self) -> None:
        self.closed = True

    @property
    def records(self) -> list[Any]:
        return [record for batch in self.batches for record in batch]


def make_pino_record(
    msg: Any = "test message",
    *,
    level: int = 30,
    time_ms: int | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Build a pino-shaped raw record."""
    record: dict[str, Any] = {
        "level": level,
        "time": time_ms if time_ms is not None else int(time.time() * 1000),
        "pid": 1234,
        "hostname": "test-host",
        "msg": msg,
    }
    record.update(extra)
    return record


def delivery_failure(message: str = "boom") -> DeliveryError:
    return DeliveryError(f"Failed to send logs: {message}")


__all__ = [
    "RecordingDeliver",
    "RecordingSender",
    "delivery_failure",
    "make_pino_record",
]
