"""
Data Ingestion - Hydrological Page Collector.

============================================================
RESPONSIBILITY
============================================================
Retrieves the station page published by the hydrology service.

- Single unauthenticated GET to a fixed URL
- Bounded timeout, browser-like User-Agent
- Returns the body as bytes so the parser can honour the
  charset the page declares

============================================================
"""

from typing import Optional

import httpx

from data_ingestion.collectors.base import BaseCollector
from data_ingestion.types import FetchError, HydroSourceConfig


class HydroPageCollector(BaseCollector):
    """
    Collector for the measured-data HTML page.

    ``transport`` is passed straight to ``httpx.AsyncClient``;
    tests use ``httpx.MockTransport``.
    """

    def __init__(
        self,
        config: HydroSourceConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(config)
        self._transport = transport

    async def fetch_document(self) -> bytes:
        """
        Fetch the page.

        Raises:
            FetchError: On network or HTTP errors
        """
        headers = {"User-Agent": self._config.user_agent}

        try:
            async with httpx.AsyncClient(
                timeout=self._config.timeout_seconds,
                headers=headers,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                response = await client.get(self._config.url)
                response.raise_for_status()

                self._logger.info(
                    f"Fetched {len(response.content)} bytes from {self._config.url}"
                )
                return response.content

        except httpx.HTTPStatusError as e:
            raise FetchError(
                message=f"HTTP {e.response.status_code} from {self._config.url}",
                source=self.source_name,
                recoverable=e.response.status_code >= 500,
                details={"status_code": e.response.status_code},
            ) from e
        except httpx.TimeoutException as e:
            raise FetchError(
                message=f"Request timeout after {self._config.timeout_seconds}s: {e}",
                source=self.source_name,
                recoverable=True,
            ) from e
        except httpx.RequestError as e:
            raise FetchError(
                message=f"Request error: {e}",
                source=self.source_name,
                recoverable=True,
            ) from e
