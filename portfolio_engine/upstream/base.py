"""
Shared async HTTP plumbing for the upstream clients.

Each client owns a lazily created httpx.AsyncClient and funnels every call
through `_request`, which logs (redacted), tracks latency and maps failures
onto the UpstreamError / NetworkError taxonomy. There is no retry layer:
a failure goes straight back to the caller.
"""

import time
from logging import Logger
from typing import Any

import httpx

from portfolio_engine.config import Settings
from portfolio_engine.upstream.errors import NetworkError, UpstreamError
from portfolio_engine.upstream.redaction import redact_body, redact_headers, safe_log_request


class AsyncUpstreamClient:
    """
    Base class for the Trading 212, CoinGecko and Anthropic clients.

    Subclasses set `service_name` and implement `_base_url_from` and
    `_get_base_headers`.
    """

    service_name: str = "upstream"

    def __init__(self, settings: Settings, logger: Logger) -> None:
        """
        Initialize client.

        Args:
            settings: Application settings
            logger: Logger instance
        """
        self._settings = settings
        self._logger = logger
        self._base_url = self._base_url_from(settings)
        self._timeout = settings.upstream_timeout_s

        # HTTP client
        self._client: httpx.AsyncClient | None = None

        # Latency tracking
        self._last_latency_ms: int = 0
        self._latency_history: list[int] = []
        self._max_history = 100
        self._total_requests: int = 0
        self._failed_requests: int = 0

    def _base_url_from(self, settings: Settings) -> str:
        raise NotImplementedError

    def _get_base_headers(self) -> dict[str, str]:
        """Get base headers for all requests."""
        return {"Accept": "application/json"}

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def metrics(self) -> dict[str, Any]:
        """Get connection metrics."""
        avg_latency = (
            sum(self._latency_history) / len(self._latency_history)
            if self._latency_history
            else 0
        )
        return {
            "total_requests": self._total_requests,
            "failed_requests": self._failed_requests,
            "last_request_latency_ms": self._last_latency_ms,
            "average_latency_ms": round(avg_latency, 1),
        }

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client, rebuilding it if the timeout setting changed."""
        if self._client is not None and self._client.timeout != httpx.Timeout(self._timeout):
            await self.close()
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    def update_settings(self, settings: Settings) -> None:
        """
        Refresh runtime settings for an existing client instance.

        Keeps singleton-based DI safe when tests or environment overrides
        rebuild Settings without recreating the client object. A changed
        timeout takes effect on the next request.
        """
        self._settings = settings
        self._base_url = self._base_url_from(settings)
        self._timeout = settings.upstream_timeout_s

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
        extra_headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """
        Make one HTTP request to the upstream.

        Args:
            method: HTTP method
            path: API path (without base URL)
            params: Query parameters
            json_body: JSON request body
            extra_headers: Headers merged over the base headers

        Returns:
            The successful (2xx) HTTP response

        Raises:
            UpstreamError: Upstream answered with a non-success status
            NetworkError: Upstream could not be reached
        """
        url = f"{self._base_url}{path}"
        headers = self._get_base_headers()
        if extra_headers:
            headers.update(extra_headers)

        self._logger.debug(
            "%s request: %s",
            self.service_name,
            safe_log_request(method, url, headers, json_body),
        )

        self._total_requests += 1
        client = await self._get_client()
        start_time = time.perf_counter()
        try:
            response = await client.request(
                method,
                url,
                headers=headers,
                params=params,
                json=json_body,
            )
        except httpx.RequestError as e:
            self._failed_requests += 1
            self._logger.error("%s transport error: %s", self.service_name, str(e))
            raise NetworkError(
                f"{self.service_name} unreachable: {e}",
                service=self.service_name,
            ) from e

        latency_ms = int((time.perf_counter() - start_time) * 1000)
        self._last_latency_ms = latency_ms
        self._latency_history.append(latency_ms)
        if len(self._latency_history) > self._max_history:
            self._latency_history.pop(0)

        self._logger.debug(
            "%s response: status=%d latency_ms=%d headers=%s",
            self.service_name,
            response.status_code,
            latency_ms,
            redact_headers(dict(response.headers)),
        )

        if not response.is_success:
            self._failed_requests += 1
            self._logger.error(
                "%s API error: status=%d body=%s",
                self.service_name,
                response.status_code,
                redact_body(response.text),
            )
            raise UpstreamError(self.service_name, response.status_code, response.text)

        return response
