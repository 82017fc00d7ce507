from .batch import FLUSH_THRESHOLD_RATIO, BatchAccumulator, BatchPolicy, FlushOutcome
from .errors import (
    AccumulatorClosedError,
    ConfigurationError,
    DeliveryError,
    HttpError,
    LogshipError,
    SerializationError,
)
from .settings import VALID_DOMAINS, TransportSettings, load_settings
from .transform import LEVEL_TO_SEVERITY, CoralogixLog, format_message, transform_log

__all__ = [
    "FLUSH_THRESHOLD_RATIO",
    "LEVEL_TO_SEVERITY",
    "VALID_DOMAINS",
    "AccumulatorClosedError",
    "BatchAccumulator",
    "BatchPolicy",
    "ConfigurationError",
    "CoralogixLog",
    "DeliveryError",
    "FlushOutcome",
    "HttpError",
    "LogshipError",
    "SerializationError",
    "TransportSettings",
    "format_message",
    "load_settings",
    "transform_log",
]
