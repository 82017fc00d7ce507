"""
logship - batching Coralogix log transport for asyncio applications.

Records from pino-style NDJSON streams or the stdlib ``logging`` module are
converted to Coralogix's wire schema and delivered in size- and
time-bounded batches.

Example:
    import logship

    transport = logship.build_transport(
        domain="eu1",
        api_key="...",
        application_name="shop",
        subsystem_name="checkout",
    )
    async with transport:
        await transport.write({"level": 30, "time": 1700000000000, "msg": "hi"})
"""

from __future__ import annotations

from ._version import __version__
from .core.batch import BatchAccumulator, BatchPolicy, FlushOutcome
from .core.errors import (
    AccumulatorClosedError,
    ConfigurationError,
    DeliveryError,
    ErrorCategory,
    ErrorSeverity,
    HttpError,
    LogshipError,
    SerializationError,
)
from .core.settings import VALID_DOMAINS, TransportSettings, load_settings
from .core.stdlib_bridge import (
    CoralogixHandler,
    disable_stdlib_bridge,
    enable_stdlib_bridge,
)
from .core.transform import LEVEL_TO_SEVERITY, CoralogixLog, transform_log
from .metrics.metrics import MetricsCollector
from .sinks.http_client import (
    CoralogixHttpSender,
    DeliveryResult,
    build_endpoint_url,
    send_logs,
)
from .transport import CoralogixTransport, build_transport

__all__ = [
    "LEVEL_TO_SEVERITY",
    "VALID_DOMAINS",
    "AccumulatorClosedError",
    "BatchAccumulator",
    "BatchPolicy",
    "ConfigurationError",
    "CoralogixHandler",
    "CoralogixHttpSender",
    "CoralogixLog",
    "CoralogixTransport",
    "DeliveryError",
    "DeliveryResult",
    "ErrorCategory",
    "ErrorSeverity",
    "FlushOutcome",
    "HttpError",
    "LogshipError",
    "MetricsCollector",
    "SerializationError",
    "TransportSettings",
    "__version__",
    "build_endpoint_url",
    "build_transport",
    "disable_stdlib_bridge",
    "enable_stdlib_bridge",
    "load_settings",
    "send_logs",
    "transform_log",
]
