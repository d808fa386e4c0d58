"""
HTTP client for the upstream API with retry and exponential backoff.

The client is the transport port of the ingestion engine:

- ``get`` issues one request and returns decoded JSON, or ``None`` when the
  upstream answered with something that is not JSON
- ``get_with_retry`` repeats ``get`` on transport failures and non-2xx
  responses, sleeping ``2 ** attempt`` seconds between attempts, and raises
  ``NetworkError`` once every attempt has failed
"""

import httpx
import asyncio
from typing import Any, Dict, Optional
from core.config import settings
from core.exceptions import ConfigurationError, NetworkError
import logging

logger = logging.getLogger(__name__)


class APIClient:
    """
    Async API client for the upstream JSON API.

    Usage:
        async with APIClient(base_url, api_key) as api:
            data = await api.get_with_retry("/api/client/master/item", {"page_number": "1"})

    Attributes:
        base_url: API root that endpoint paths are joined to
        max_retries: Attempts per request (default: settings.MAX_RETRIES)
        timeout: Request timeout in seconds (default: 30.0)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        max_retries: Optional[int] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url or settings.API_URL
        self.api_key = api_key or settings.API_KEY
        if not self.base_url or not self.api_key:
            raise ConfigurationError(
                "API_URL and API_KEY must be configured",
                context={"api_url_set": bool(self.base_url), "api_key_set": bool(self.api_key)}
            )

        self.max_retries = max_retries or settings.MAX_RETRIES
        self.timeout = timeout or settings.REQUEST_TIMEOUT
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "APIClient":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def open(self):
        """Create the underlying HTTP client"""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={
                    "X-API-KEY": self.api_key,
                    "Accept": "application/json",
                },
                timeout=self.timeout,
                transport=self._transport,
            )

    async def close(self):
        """Release the underlying HTTP client"""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Optional[Any]:
        """
        Issue a single GET request.

        Args:
            path: Endpoint path relative to the base URL
            params: Query parameters

        Returns:
            Decoded JSON body, or None if the response is not JSON

        Raises:
            httpx.HTTPStatusError: For non-2xx responses
            httpx.TransportError: For network failures and timeouts
        """
        await self.open()
        logger.debug(f"GET {path} params={params}")

        response = await self._client.get(path, params=params)

        if response.is_error:
            logger.error(
                f"API request failed: {response.status_code} for {path}",
                extra={"url": str(response.url), "status": response.status_code}
            )
        response.raise_for_status()

        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            logger.warning(f"Non-JSON response for {path}: {content_type}")
            return None

        try:
            return response.json()
        except ValueError:
            logger.warning(f"Invalid JSON body for {path}")
            return None

    async def get_with_retry(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        max_attempts: Optional[int] = None
    ) -> Optional[Any]:
        """
        GET with exponential backoff.

        Waits ``2 ** attempt`` seconds after failed attempt ``attempt``
        (1-based) and gives up after ``max_attempts``.

        Raises:
            NetworkError: When every attempt failed; chained to the last error
        """
        attempts = max_attempts or self.max_retries
        last_exception: Optional[Exception] = None

        for attempt in range(1, attempts + 1):
            try:
                return await self.get(path, params)

            except httpx.HTTPError as e:
                last_exception = e
                if attempt < attempts:
                    delay = 2 ** attempt
                    logger.warning(
                        f"Retry {attempt}/{attempts} for {path} after {delay}s: "
                        f"{type(e).__name__}: {e}"
                    )
                    await asyncio.sleep(delay)

        status_code = None
        if isinstance(last_exception, httpx.HTTPStatusError):
            status_code = last_exception.response.status_code

        raise NetworkError(
            f"Request to {path} failed after {attempts} attempts",
            context={
                "path": path,
                "attempts": attempts,
                "status_code": status_code,
            },
            original_exception=last_exception,
            max_retries=attempts
        )
