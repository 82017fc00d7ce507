"""
Async-friendly delivery metrics for logship.

Implements a small set of Prometheus counters and a latency histogram for
batch delivery. In-memory counters are always tracked (for tests and
``snapshot()``); Prometheus objects only exist when metrics are enabled,
and live in an isolated registry.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

from prometheus_client import CollectorRegistry, Counter, Histogram


@dataclass
class DeliveryMetrics:
    """Captured runtime counters for quick assertions in tests."""

    batches_delivered: int = 0
    records_delivered: int = 0
    records_dropped: int = 0
    delivery_errors: int = 0
    records_skipped: int = 0


class MetricsCollector:
    """Transport-scoped metrics collector.

    When disabled, all Prometheus operations are no-ops while the in-memory
    counters keep counting.
    """

    def __init__(self, *, enabled: bool = False) -> None:
        self._enabled = bool(enabled)
        self._lock = asyncio.Lock()
        self._state = DeliveryMetrics()

        self._c_batches: Any | None = None
        self._c_records: Any | None = None
        self._c_dropped: Any | None = None
        self._c_errors: Any | None = None
        self._c_skipped: Any | None = None
        self._h_latency: Any | None = None
        self._registry: CollectorRegistry | None = None

        if self._enabled:
            self._registry = CollectorRegistry()
            self._c_batches = Counter(
                "logship_batches_delivered_total",
                "Total number of batches accepted by the backend",
                registry=self._registry,
            )
            self._c_records = Counter(
                "logship_records_delivered_total",
                "Total number of records accepted by the backend",
                registry=self._registry,
            )
            self._c_dropped = Counter(
                "logship_records_dropped_total",
                "Total number of records lost with a failed batch",
                registry=self._registry,
            )
            self._c_errors = Counter(
                "logship_delivery_errors_total",
                "Total number of failed batch deliveries",
                ["kind"],
                registry=self._registry,
            )
            self._c_skipped = Counter(
                "logship_records_skipped_total",
                "Total number of malformed input records skipped",
                registry=self._registry,
            )
            self._h_latency = Histogram(
                "logship_delivery_seconds",
                "Latency of one batch delivery",
                buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
                registry=self._registry,
            )

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    @property
    def registry(self) -> CollectorRegistry | None:
        """Expose the isolated Prometheus registry when enabled."""
        return self._registry

    async def record_batch_delivered(
        self, record_count: int, *, latency_seconds: float | None = None
    ) -> None:
        async with self._lock:
            self._state.batches_delivered += 1
            self._state.records_delivered += record_count
        if not self._enabled:
            return
        if self._c_batches is not None:
            self._c_batches.inc()
        if self._c_records is not None:
            self._c_records.inc(record_count)
        if latency_seconds is not None and self._h_latency is not None:
            self._h_latency.observe(latency_seconds)

    async def record_batch_failed(
        self,
        record_count: int,
        *,
        kind: str = "unknown",
        latency_seconds: float | None = None,
    ) -> None:
        async with self._lock:
            self._state.delivery_errors += 1
            self._state.records_dropped += record_count
        if not self._enabled:
            return
        if self._c_errors is not None:
            self._c_errors.labels(kind=kind).inc()
        if self._c_dropped is not None:
            self._c_dropped.inc(record_count)
        if latency_seconds is not None and self._h_latency is not None:
            self._h_latency.observe(latency_seconds)

    def record_skipped(self) -> None:
        # Called from the synchronous submit path; no lock needed on one loop
        self._state.records_skipped += 1
        if self._enabled and self._c_skipped is not None:
            self._c_skipped.inc()

    async def snapshot(self) -> DeliveryMetrics:
        async with self._lock:
            return DeliveryMetrics(
                batches_delivered=self._state.batches_delivered,
                records_delivered=self._state.records_delivered,
                records_dropped=self._state.records_dropped,
                delivery_errors=self._state.delivery_errors,
                records_skipped=self._state.records_skipped,
            )
