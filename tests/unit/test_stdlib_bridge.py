from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator
from typing import Any

import pytest

from logship.core.stdlib_bridge import (
    CoralogixHandler,
    disable_stdlib_bridge,
    enable_stdlib_bridge,
    stdlib_level_to_pino,
)
from logship.testing import RecordingSender
from logship.transport import CoralogixTransport, build_transport

_IDENTITY: dict[str, Any] = {
    "domain": "eu1",
    "api_key": "k",
    "application_name": "shop",
    "subsystem_name": "api",
    "flush_interval_seconds": 60.0,
}


@pytest.fixture
def app_logger() -> Iterator[logging.Logger]:
    logger = logging.getLogger("bridge.test.app")
    logger.propagate = False
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


def _transport(sender: RecordingSender, **overrides: Any) -> CoralogixTransport:
    return build_transport(sender=sender, **{**_IDENTITY, **overrides})


async def _settle() -> None:
    for _ in range(3):
        await asyncio.sleep(0)


@pytest.mark.parametrize(
    "levelno,expected",
    [
        (logging.CRITICAL, 60),
        (logging.ERROR, 50),
        (logging.WARNING, 40),
        (logging.INFO, 30),
        (logging.DEBUG, 20),
        (5, 10),
        (logging.INFO + 5, 30),
    ],
)
def test_stdlib_level_to_pino(levelno: int, expected: int) -> None:
    assert stdlib_level_to_pino(levelno) == expected


@pytest.mark.asyncio
async def test_records_are_forwarded_with_severity_and_origin(
    app_logger: logging.Logger,
) -> None:
    sender = RecordingSender()
    transport = _transport(sender)
    enable_stdlib_bridge(transport, logger_name=app_logger.name)

    app_logger.warning("disk at %d%%", 91)
    await _settle()
    await transport.close()

    assert len(sender.records) == 1
    log = sender.records[0]
    assert log["text"] == "disk at 91%"
    assert log["severity"] == 4
    assert log["category"] == "bridge.test.app"
    assert log["methodName"] == "test_records_are_forwarded_with_severity_and_origin"
    assert log["threadId"] == "MainThread"
    assert log["applicationName"] == "shop"


@pytest.mark.asyncio
async def test_level_threshold_filters_records(app_logger: logging.Logger) -> None:
    sender = RecordingSender()
    transport = _transport(sender)
    enable_stdlib_bridge(transport, level=logging.INFO, logger_name=app_logger.name)

    app_logger.debug("hidden")
    app_logger.info("shown")
    await _settle()
    await transport.close()

    assert [log["text"] for log in sender.records] == ["shown"]


@pytest.mark.asyncio
async def test_extra_fields_override_defaults(app_logger: logging.Logger) -> None:
    sender = RecordingSender()
    transport = _transport(sender)
    enable_stdlib_bridge(transport, logger_name=app_logger.name)

    app_logger.error("charge failed", extra={"category": "billing", "className": "Pay"})
    await _settle()
    await transport.close()

    log = sender.records[0]
    assert log["category"] == "billing"
    assert log["className"] == "Pay"
    assert log["severity"] == 5


@pytest.mark.asyncio
async def test_exception_traceback_is_appended(app_logger: logging.Logger) -> None:
    sender = RecordingSender()
    transport = _transport(sender)
    enable_stdlib_bridge(transport, logger_name=app_logger.name)

    try:
        raise ValueError("bad input")
    except ValueError:
        app_logger.exception("handler crashed")
    await _settle()
    await transport.close()

    text = sender.records[0]["text"]
    assert text.startswith("handler crashed\n")
    assert "Traceback" in text
    assert "ValueError: bad input" in text


@pytest.mark.asyncio
async def test_own_loggers_are_never_forwarded() -> None:
    sender = RecordingSender()
    transport = _transport(sender)
    handler = CoralogixHandler(transport)

    for name in ("logship", "logship.transport", "httpx", "httpcore.connection"):
        record = logging.LogRecord(name, logging.ERROR, __file__, 1, "loop", None, None)
        handler.emit(record)
    unrelated = logging.LogRecord(
        "logshipper", logging.ERROR, __file__, 1, "kept", None, None
    )
    handler.emit(unrelated)
    await _settle()
    await transport.close()

    assert [log["text"] for log in sender.records] == ["kept"]


@pytest.mark.asyncio
async def test_batch_threshold_schedules_flush(app_logger: logging.Logger) -> None:
    sender = RecordingSender()
    transport = _transport(sender, batch_size=2)
    handler = enable_stdlib_bridge(transport, logger_name=app_logger.name)

    app_logger.info("one")
    app_logger.info("two")
    await _settle()
    await handler.wait_pending()

    assert [len(batch) for batch in sender.batches] == [2]
    await transport.close()


@pytest.mark.asyncio
async def test_emit_from_worker_thread(app_logger: logging.Logger) -> None:
    sender = RecordingSender()
    transport = _transport(sender)
    enable_stdlib_bridge(transport, logger_name=app_logger.name)

    await asyncio.to_thread(app_logger.info, "from thread")
    await _settle()
    await transport.close()

    assert sender.records[0]["text"] == "from thread"
    assert sender.records[0]["threadId"] != "MainThread"


@pytest.mark.asyncio
async def test_records_after_close_are_dropped(app_logger: logging.Logger) -> None:
    sender = RecordingSender()
    transport = _transport(sender)
    enable_stdlib_bridge(transport, logger_name=app_logger.name)
    await transport.close()

    app_logger.info("too late")
    await _settle()

    assert sender.records == []


def test_emit_with_closed_loop_drops_record() -> None:
    sender = RecordingSender()
    transport = _transport(sender)
    loop = asyncio.new_event_loop()
    loop.close()
    handler = CoralogixHandler(transport, loop=loop)

    record = logging.LogRecord("app", logging.INFO, __file__, 1, "dropped", None, None)
    handler.emit(record)

    assert transport.accumulator.size() == 0


@pytest.mark.asyncio
async def test_enable_and_disable(app_logger: logging.Logger) -> None:
    app_logger.addHandler(logging.NullHandler())
    transport = _transport(RecordingSender())

    handler = enable_stdlib_bridge(
        transport, logger_name=app_logger.name, remove_existing_handlers=True
    )
    assert app_logger.handlers == [handler]
    assert app_logger.level == logging.INFO

    disable_stdlib_bridge(handler, logger_name=app_logger.name)
    assert app_logger.handlers == []
    await transport.close()
