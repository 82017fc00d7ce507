"""
Mapping from pino-style log records to the Coralogix wire schema.

Pino levels: trace=10, debug=20, info=30, warn=40, error=50, fatal=60
Coralogix severity: Debug=1, Verbose=2, Info=3, Warn=4, Error=5, Critical=6
"""

from __future__ import annotations

import math
import time
from collections.abc import Mapping
from typing import Any, Final, Protocol, TypedDict

import orjson

from .serialization import dumps


class CoralogixLog(TypedDict, total=False):
    """One record of the Coralogix ``/logs/v1/singles`` array."""

    applicationName: str
    subsystemName: str
    timestamp: float
    computerName: str
    severity: int
    category: str
    className: str
    methodName: str
    threadId: str
    text: str


class TransformConfig(Protocol):
    application_name: str | None
    subsystem_name: str | None
    computer_name: str | None


LEVEL_TO_SEVERITY: Final[dict[int, int]] = {
    10: 1,  # trace -> debug
    20: 2,  # debug -> verbose
    30: 3,  # info -> info
    40: 4,  # warn -> warn
    50: 5,  # error -> error
    60: 6,  # fatal -> critical
}

LABEL_TO_LEVEL: Final[dict[str, int]] = {
    "trace": 10,
    "debug": 20,
    "info": 30,
    "warn": 40,
    "warning": 40,
    "error": 50,
    "fatal": 60,
    "critical": 60,
}

DEFAULT_SEVERITY: Final[int] = 3

# orjson only encodes integers in this range
_INT64_MIN: Final[int] = -(2**63) + 1
_INT64_MAX: Final[int] = 2**64 - 1

OPTIONAL_FIELDS: Final[tuple[str, ...]] = (
    "category",
    "className",
    "methodName",
    "threadId",
)


def map_severity(level: Any) -> int:
    """Map a pino level (ordinal or label) to a Coralogix severity."""
    if isinstance(level, bool):
        return DEFAULT_SEVERITY
    if isinstance(level, str):
        label = level.strip().lower()
        try:
            level = int(label)
        except ValueError:
            level = LABEL_TO_LEVEL.get(label)
    if isinstance(level, float) and level.is_integer():
        level = int(level)
    if isinstance(level, int):
        return LEVEL_TO_SEVERITY.get(level, DEFAULT_SEVERITY)
    return DEFAULT_SEVERITY


def format_message(msg: Any) -> str:
    """Render the free-form message field as a string."""
    if msg is None:
        return ""
    if isinstance(msg, str):
        return msg
    if isinstance(msg, bool):
        return "true" if msg else "false"
    if isinstance(msg, (Mapping, list, tuple)):
        try:
            return dumps(msg, option=orjson.OPT_NON_STR_KEYS).decode("utf-8")
        except TypeError:
            # Integers over 64 bits, circular references
            return str(msg)
    return str(msg)


def _timestamp_ms(value: Any) -> float:
    if isinstance(value, bool):
        return int(time.time() * 1000)
    if isinstance(value, int) and _INT64_MIN <= value <= _INT64_MAX:
        return value
    if isinstance(value, float) and math.isfinite(value):
        return value
    return int(time.time() * 1000)


def transform_log(raw: Mapping[str, Any], config: TransformConfig) -> CoralogixLog:
    """Transform one raw pino-style record into a Coralogix record.

    Total function: unknown levels map to Info, a missing message becomes an
    empty string, and absent optional fields are simply omitted.
    """
    log: CoralogixLog = {
        "timestamp": _timestamp_ms(raw.get("time")),
        "applicationName": config.application_name or "",
        "subsystemName": config.subsystem_name or "",
        "severity": map_severity(raw.get("level")),
        "text": format_message(raw.get("msg")),
    }

    # Configured computer name wins over the per-record hostname
    if config.computer_name:
        log["computerName"] = config.computer_name
    elif raw.get("hostname"):
        log["computerName"] = str(raw["hostname"])

    for field in OPTIONAL_FIELDS:
        value = raw.get(field)
        if value:
            log[field] = str(value)  # type: ignore[literal-required]

    return log
