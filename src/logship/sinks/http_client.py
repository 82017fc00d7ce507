"""
HTTP delivery to the Coralogix singles endpoint using ``httpx.AsyncClient``.

One call sends one batch: a JSON array body, bearer authentication, and a
bounded timeout. There is no retry; a failed attempt is reported to the
caller as a ``DeliveryError``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

import httpx

from ..core.errors import DeliveryError, HttpError
from ..core.serialization import serialize_batch
from ..core.settings import TransportSettings


def build_endpoint_url(domain: str) -> str:
    """Return the ingestion URL for a Coralogix region domain."""
    return f"https://ingress.{domain}.coralogix.com/logs/v1/singles"


@dataclass(frozen=True)
class DeliveryResult:
    success: bool
    status_code: int
    record_count: int


class CoralogixHttpSender:
    """Sends batches to Coralogix.

    The ``httpx.AsyncClient`` is created on first use and closed by
    ``aclose()`` unless it was injected by the caller.
    """

    def __init__(
        self,
        *,
        domain: str,
        api_key: str,
        timeout_seconds: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._endpoint = build_endpoint_url(domain)
        self._headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
        }
        self._timeout = httpx.Timeout(timeout_seconds)
        self._client = client
        self._owns_client = client is None

    @classmethod
    def from_settings(
        cls,
        settings: TransportSettings,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> CoralogixHttpSender:
        return cls(
            domain=settings.domain or "",
            api_key=settings.api_key_value(),
            timeout_seconds=settings.timeout_seconds,
            client=client,
        )

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def send(self, logs: Sequence[Mapping[str, Any]]) -> DeliveryResult:
        """POST one batch.

        Raises:
            HttpError: the backend answered with a non-2xx status.
            DeliveryError: the request could not be completed.
        """
        body = serialize_batch(logs)
        try:
            response = await self._get_client().post(
                self._endpoint,
                content=body.data,
                headers=self._headers,
                timeout=self._timeout,
            )
        except (httpx.HTTPError, OSError) as exc:
            raise DeliveryError(f"Failed to send logs: {exc}", cause=exc) from exc

        if 200 <= response.status_code < 300:
            return DeliveryResult(
                success=True,
                status_code=response.status_code,
                record_count=len(logs),
            )

        text = response.text
        raise HttpError(f"HTTP {response.status_code}: {text}", response.status_code, text)

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None


async def send_logs(
    logs: Sequence[Mapping[str, Any]],
    settings: TransportSettings,
    *,
    client: httpx.AsyncClient | None = None,
) -> DeliveryResult:
    """Send one batch with a short-lived sender."""
    sender = CoralogixHttpSender.from_settings(settings, client=client)
    try:
        return await sender.send(logs)
    finally:
        await sender.aclose()
