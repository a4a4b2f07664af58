"""
Data Ingestion - Collectors Package.

Collectors retrieve raw documents from external sources.

Collectors:
- hydro_page: HTML station page of the hydrology service
"""

from data_ingestion.collectors.base import BaseCollector
from data_ingestion.collectors.hydro_page import HydroPageCollector


__all__ = [
    "BaseCollector",
    "HydroPageCollector",
]
