"""
Error hierarchy for logship.

All library errors derive from ``LogshipError`` and carry a category and a
severity so callers (and the ``on_error`` hook) can branch on the kind of
failure without string matching.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    CONFIG = "config"
    DELIVERY = "delivery"
    SERIALIZATION = "serialization"
    USAGE = "usage"


class ErrorSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class LogshipError(Exception):
    """Base class for all logship errors."""

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory = ErrorCategory.USAGE,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.category = category
        self.severity = severity
        self.cause = cause

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
        }
        if self.cause is not None:
            data["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return data


class ConfigurationError(LogshipError):
    """Invalid or missing configuration. Raised before any record flows."""

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(
            message,
            category=ErrorCategory.CONFIG,
            severity=ErrorSeverity.CRITICAL,
            cause=cause,
        )


class DeliveryError(LogshipError):
    """A batch could not be delivered (network failure, timeout, rejection)."""

    def __init__(
        self,
        message: str,
        *,
        cause: BaseException | None = None,
        severity: ErrorSeverity = ErrorSeverity.HIGH,
    ) -> None:
        super().__init__(
            message,
            category=ErrorCategory.DELIVERY,
            severity=severity,
            cause=cause,
        )


class HttpError(DeliveryError):
    """The backend answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int, body: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["status_code"] = self.status_code
        return data


class SerializationError(LogshipError):
    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(
            message,
            category=ErrorCategory.SERIALIZATION,
            severity=ErrorSeverity.LOW,
            cause=cause,
        )


class AccumulatorClosedError(LogshipError, RuntimeError):
    """Raised when a stopped accumulator is used again."""

    def __init__(self, operation: str) -> None:
        super().__init__(
            f"Cannot {operation}: accumulator has been stopped",
            category=ErrorCategory.USAGE,
            severity=ErrorSeverity.MEDIUM,
        )


__all__ = [
    "AccumulatorClosedError",
    "ConfigurationError",
    "DeliveryError",
    "ErrorCategory",
    "ErrorSeverity",
    "HttpError",
    "LogshipError",
    "SerializationError",
]
