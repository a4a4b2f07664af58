"""
Data Ingestion - Base Collector.

============================================================
PURPOSE
============================================================
Abstract base class for document collectors.

A collector only retrieves the raw document. Parsing,
reconciliation and logging belong to the orchestrator.

============================================================
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict

from data_ingestion.types import HydroSourceConfig


class BaseCollector(ABC):
    """
    Abstract base class for collectors.

    ============================================================
    CONTRACT
    ============================================================
    ``fetch_document`` returns the full response body or raises
    FetchError. No retries: the next scheduled cycle is the retry.

    ============================================================
    """

    def __init__(self, config: HydroSourceConfig) -> None:
        self._config = config
        self._logger = logging.getLogger(f"collector.{config.source_name}")

    @property
    def source_name(self) -> str:
        return self._config.source_name

    @property
    def config(self) -> HydroSourceConfig:
        return self._config

    @abstractmethod
    async def fetch_document(self) -> bytes:
        """
        Fetch the raw document from the external source.

        Raises:
            FetchError: On network errors, timeouts or non-2xx responses
        """
        pass

    def get_health_status(self) -> Dict[str, Any]:
        return {
            "source": self.source_name,
            "url": self._config.url,
            "timeout_seconds": self._config.timeout_seconds,
        }
