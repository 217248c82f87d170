"""
HTTP transport for the parliament open-data API.

Single-call GET with timeout, retry and backoff, in two variants:
JSON (raises FetchError on failure) and text/HTML (returns None on 404,
used by callers to detect the end of a numbered page sequence).

Responsibility: Resilient HTTP access with scoped request metrics
"""

from typing import Any, Dict, Optional
import logging

import httpx

from ..config import ApiConfig, settings
from ..models.fetch_models import RequestMetrics
from ..utils.retry import RetryError, retry_async

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """
    A request that could not be completed.

    Attributes:
        url: Requested URL
        status: HTTP status code, or None for transport failures
    """

    def __init__(self, url: str, status: Optional[int] = None, message: Optional[str] = None):
        self.url = url
        self.status = status
        detail = message or (f"HTTP {status}" if status else "request failed")
        super().__init__(f"{detail}: {url}")

    @property
    def is_not_found(self) -> bool:
        return self.status == 404


class SejmTransport:
    """
    Async HTTP client wrapper shared by all adapters of one run.

    Example:
        async with SejmTransport() as transport:
            members = await transport.fetch_json("/sejm/term10/MP")
            html = await transport.fetch_text(
                "/sejm/term10/proceedings/1/2023-11-13/transcripts/1"
            )
    """

    def __init__(
        self,
        config: Optional[ApiConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
        metrics: Optional[RequestMetrics] = None,
    ):
        self.config = config or settings.api
        self.metrics = metrics or RequestMetrics()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=self.config.timeout_seconds,
            headers={"User-Agent": self.config.user_agent},
            follow_redirects=True,
        )

    async def __aenter__(self) -> "SejmTransport":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def url(self, path: str) -> str:
        """Resolve an API path against the configured base URL."""
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.config.base_url}/{path.lstrip('/')}"

    async def fetch_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        GET a JSON resource.

        Raises:
            FetchError: On exhausted retries, non-retryable status (404
                included) or an undecodable body
        """
        url = self.url(path)
        response = await self._get(url, params, allow_not_found=False)
        try:
            return response.json()
        except ValueError as e:
            self.metrics.failures += 1
            raise FetchError(url, response.status_code, "invalid JSON body") from e

    async def fetch_text(self, path: str, params: Optional[Dict[str, Any]] = None) -> Optional[str]:
        """
        GET a text/HTML resource.

        Returns:
            Body text, or None if the resource does not exist (404)
        """
        response = await self._get(self.url(path), params, allow_not_found=True)
        if response is None:
            return None
        return response.text

    async def _get(
        self,
        url: str,
        params: Optional[Dict[str, Any]],
        allow_not_found: bool,
    ) -> Optional[httpx.Response]:

        async def attempt() -> Optional[httpx.Response]:
            self.metrics.requests += 1
            self.metrics.in_flight += 1
            try:
                response = await self._client.get(
                    url, params=params, timeout=self.config.timeout_seconds
                )
            finally:
                self.metrics.in_flight -= 1

            if response.status_code == 404:
                self.metrics.not_found += 1
                if allow_not_found:
                    return None
            response.raise_for_status()
            return response

        def count_retry() -> None:
            self.metrics.retries += 1

        def count_rate_limit() -> None:
            self.metrics.rate_limit_waits += 1

        try:
            return await retry_async(
                attempt,
                max_attempts=self.config.max_attempts,
                base_delay=self.config.base_delay_seconds,
                max_delay=self.config.max_delay_seconds,
                rate_limit_cooldown=self.config.rate_limit_cooldown_seconds,
                max_rate_limit_waits=self.config.max_rate_limit_waits,
                on_retry=count_retry,
                on_rate_limit=count_rate_limit,
                logger_instance=logger,
            )
        except RetryError as e:
            self.metrics.failures += 1
            raise FetchError(url, _status_of(e.last_exception), str(e)) from e
        except httpx.HTTPStatusError as e:
            self.metrics.failures += 1
            raise FetchError(url, e.response.status_code) from e
        except httpx.HTTPError as e:
            self.metrics.failures += 1
            raise FetchError(url, None, f"{type(e).__name__}: {e}") from e


def _status_of(exc: Optional[Exception]) -> Optional[int]:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code
    return None
