from __future__ import annotations

import pytest

from logship.metrics import MetricsCollector


@pytest.mark.asyncio
async def test_disabled_collector_still_counts() -> None:
    metrics = MetricsCollector(enabled=False)

    await metrics.record_batch_delivered(3, latency_seconds=0.01)
    await metrics.record_batch_failed(2, kind="http")
    metrics.record_skipped()

    snap = await metrics.snapshot()
    assert snap.batches_delivered == 1
    assert snap.records_delivered == 3
    assert snap.delivery_errors == 1
    assert snap.records_dropped == 2
    assert snap.records_skipped == 1
    assert metrics.registry is None
    assert metrics.is_enabled is False


@pytest.mark.asyncio
async def test_enabled_collector_exports_prometheus_samples() -> None:
    metrics = MetricsCollector(enabled=True)

    await metrics.record_batch_delivered(4, latency_seconds=0.2)
    await metrics.record_batch_failed(5, kind="network", latency_seconds=1.0)
    await metrics.record_batch_failed(1, kind="http")
    metrics.record_skipped()

    registry = metrics.registry
    assert registry is not None
    assert registry.get_sample_value("logship_batches_delivered_total") == 1
    assert registry.get_sample_value("logship_records_delivered_total") == 4
    assert registry.get_sample_value("logship_records_dropped_total") == 6
    assert (
        registry.get_sample_value(
            "logship_delivery_errors_total", {"kind": "network"}
        )
        == 1
    )
    assert (
        registry.get_sample_value("logship_delivery_errors_total", {"kind": "http"})
        == 1
    )
    assert registry.get_sample_value("logship_records_skipped_total") == 1
    assert registry.get_sample_value("logship_delivery_seconds_count") == 2


def test_collectors_use_isolated_registries() -> None:
    first = MetricsCollector(enabled=True)
    second = MetricsCollector(enabled=True)
    assert first.registry is not second.registry
