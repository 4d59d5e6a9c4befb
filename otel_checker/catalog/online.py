"""Remote catalog fetching."""

import asyncio
import ssl
from typing import Optional

import aiohttp
import certifi
from aiohttp import ClientTimeout

from ..errors import CatalogLoadError
from ..utils.logging import get_logger
from ..utils.performance import PerformanceMonitor


class CatalogClient:
    """Async client downloading catalog documents as text."""

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: Optional[float] = None,
    ) -> None:
        """Initialize the catalog client.

        Args:
            session: Optional aiohttp session for connection reuse
            timeout: Total seconds allowed per request, None waits forever
        """
        self.logger = get_logger("otel_checker.catalog.online")
        self.performance_monitor = PerformanceMonitor()
        self.timeout = ClientTimeout(total=timeout)
        self._session = session
        self._ssl_context = ssl.create_default_context(cafile=certifi.where())

    async def __aenter__(self) -> "CatalogClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if not self._session or self._session.closed:
            connector = aiohttp.TCPConnector(ssl=self._ssl_context)
            self._session = aiohttp.ClientSession(timeout=self.timeout, connector=connector)
        return self._session

    async def fetch_text(self, url: str) -> str:
        """Download a document.

        Args:
            url: Raw-text URL of the catalog

        Returns:
            Response body

        Raises:
            CatalogLoadError: On network failure or a non-200 response
        """
        with self.performance_monitor.measure("fetch_catalog"):
            self.logger.info(f"Fetching catalog from {url}")
            try:
                async with self._get_session().get(url) as response:
                    if response.status != 200:
                        raise CatalogLoadError(
                            f"Failed to fetch {url}: HTTP {response.status}"
                        )
                    return await response.text()
            except aiohttp.ClientError as e:
                raise CatalogLoadError(f"Failed to fetch {url}: {e}") from e
            except asyncio.TimeoutError as e:
                raise CatalogLoadError(f"Timed out fetching {url}") from e


def fetch_catalog_text(url: str, timeout: Optional[float] = None) -> str:
    """Blocking wrapper around ``CatalogClient.fetch_text``."""

    async def _fetch() -> str:
        async with CatalogClient(timeout=timeout) as client:
            return await client.fetch_text(url)

    return asyncio.run(_fetch())
