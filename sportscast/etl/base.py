"""Shared HTTP plumbing for data providers.

Providers catch ProviderError at their public boundary and return a default
(empty list, healthy report, None), so callers never see a fetch failure.
"""

import logging
import time
from typing import Optional

import httpx

from sportscast.telemetry.metrics import record_provider_error, record_provider_request

logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """A data source could not produce a usable response."""

    def __init__(self, provider: str, message: str, error_code: str = "provider_error"):
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.error_code = error_code


class HTTPProvider:
    """Base for providers that read JSON over HTTP with one shared AsyncClient.

    Args:
        client: Optional pre-built client (tests pass one with MockTransport).
        timeout: Request timeout in seconds when the client is created here.
        headers: Default headers for a client created here.
    """

    name = "http"

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 15.0,
        headers: Optional[dict] = None,
    ):
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout
        self._headers = headers or {}

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout, headers=self._headers)
        return self._client

    async def _get_json(self, url: str, params: Optional[dict] = None, entity: str = "default") -> dict:
        """GET url and decode JSON, raising ProviderError on any failure."""
        start_time = time.time()
        try:
            response = await self._get_client().get(url, params=params)
            latency_ms = (time.time() - start_time) * 1000
            record_provider_request(self.name, entity, response.status_code, latency_ms)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            record_provider_error(self.name, entity, "timeout")
            raise ProviderError(self.name, f"timeout: {e}", "timeout") from e
        except httpx.HTTPStatusError as e:
            code = e.response.status_code
            error_code = "http_4xx" if code < 500 else "http_5xx"
            record_provider_error(self.name, entity, error_code)
            raise ProviderError(self.name, f"HTTP {code} for {entity}", error_code) from e
        except httpx.RequestError as e:
            record_provider_error(self.name, entity, "request_error")
            raise ProviderError(self.name, f"request error: {e}", "request_error") from e
        except ValueError as e:
            record_provider_error(self.name, entity, "parse_error")
            raise ProviderError(self.name, f"invalid JSON: {e}", "parse_error") from e

        if not isinstance(data, dict):
            record_provider_error(self.name, entity, "parse_error")
            raise ProviderError(self.name, "unexpected payload shape", "parse_error")
        return data

    async def close(self) -> None:
        """Close the HTTP client if this provider created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
