from __future__ import annotations

from typing import Any, Mapping, Protocol, Sequence, runtime_checkable

from .http_client import (
    CoralogixHttpSender,
    DeliveryResult,
    build_endpoint_url,
    send_logs,
)


@runtime_checkable
class BatchSender(Protocol):
    """Anything that can deliver one batch asynchronously, and may fail.

    Implementations raise ``DeliveryError`` on failure and must resolve or
    raise within a bounded time: a call that never returns blocks every
    later flush of the owning transport.
    """

    async def send(self, logs: Sequence[Mapping[str, Any]]) -> Any:  # noqa: D401
        ...

    async def aclose(self) -> None:
        ...


__all__ = [
    "BatchSender",
    "CoralogixHttpSender",
    "DeliveryResult",
    "build_endpoint_url",
    "send_logs",
]
