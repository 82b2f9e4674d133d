"""Origin access and other helpers used directly by request handlers."""

import asyncio
import logging
from typing import Any, Callable

import httpx

from .errors import FetchError

logger = logging.getLogger(__name__)


class OriginClient:
    """
    Client for the upstream origin holding the original images.

    Usage:
        origin = OriginClient("http://images.internal")
        raw_bytes = await origin.fetch("products/42.jpg")
    """

    def __init__(
        self,
        upstream_uri: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize origin client.

        Args:
            upstream_uri: Base URI that request paths are appended to
            timeout: Timeout for origin requests in seconds
            transport: Optional httpx transport (used to stub the origin)
        """
        self.upstream_uri = upstream_uri.rstrip("/")
        self.timeout = timeout
        self._client = httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    def url_for(self, path: str) -> str:
        return f"{self.upstream_uri}/{path}"

    async def fetch(self, path: str) -> bytes:
        """
        Download the full body of ``{upstream}/{path}``.

        Raises:
            FetchError: If the origin is unreachable or answers with a non-success status
        """
        url = self.url_for(path)
        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise FetchError(f"Origin returned {exc.response.status_code} for {url}") from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"Origin request to {url} failed: {exc!r}") from exc

        logger.debug("Fetched %d bytes from %s", len(response.content), url)
        return response.content

    async def close(self):
        """Close the HTTP client."""
        await self._client.aclose()


async def run_blocking(func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """
    Run a blocking function in a thread pool to avoid blocking the event loop.
    """

    return await asyncio.to_thread(func, *args, **kwargs)


__all__ = ["OriginClient", "run_blocking"]
