"""
Internal diagnostics for non-fatal errors inside logship itself.

Diagnostics are written as one JSON object per line to stderr and never go
through the transport (a failing transport must not report its failures to
itself). Every function here is best-effort and never raises.
"""

from __future__ import annotations

import sys
import threading
import time
from typing import Any

import orjson

# Cached on first use; tests reset it to None between runs
_internal_logging_enabled: bool | None = None

_RATE_LIMIT_WINDOW_SECONDS = 10.0
_RATE_LIMIT_MAX_PER_WINDOW = 5

_rate_lock = threading.Lock()
_rate_state: dict[str, tuple[float, int]] = {}


def _is_enabled() -> bool:
    global _internal_logging_enabled
    if _internal_logging_enabled is None:
        try:
            from .settings import DiagnosticsSettings

            _internal_logging_enabled = bool(
                DiagnosticsSettings().internal_logging_enabled
            )
        except Exception:
            _internal_logging_enabled = True
    return _internal_logging_enabled


def set_enabled(enabled: bool) -> None:
    """Force diagnostics on or off, overriding the environment."""
    global _internal_logging_enabled
    _internal_logging_enabled = bool(enabled)


def _allow(key: str | None) -> bool:
    if key is None:
        return True
    now = time.monotonic()
    with _rate_lock:
        window_start, count = _rate_state.get(key, (now, 0))
        if now - window_start >= _RATE_LIMIT_WINDOW_SECONDS:
            window_start, count = now, 0
        if count >= _RATE_LIMIT_MAX_PER_WINDOW:
            _rate_state[key] = (window_start, count)
            return False
        _rate_state[key] = (window_start, count + 1)
        return True


def _write_line(payload: dict[str, Any]) -> None:
    data = orjson.dumps(payload, default=str)
    stream = sys.stderr
    stream.write(data.decode("utf-8") + "\n")
    stream.flush()


def _emit(level: str, component: str, message: str, fields: dict[str, Any]) -> None:
    try:
        if not _is_enabled():
            return
        if not _allow(fields.pop("_rate_limit_key", None)):
            return
        payload: dict[str, Any] = {
            "ts": round(time.time(), 3),
            "level": level,
            "logger": "logship",
            "component": component,
            "message": message,
        }
        payload.update(fields)
        _write_line(payload)
    except Exception:
        return


def warn(component: str, message: str, **fields: Any) -> None:
    """Emit a WARN diagnostic.

    Pass ``_rate_limit_key`` to cap repeated messages from hot paths.
    """
    _emit("WARN", component, message, fields)


def _reset_rate_limits() -> None:
    with _rate_lock:
        _rate_state.clear()
