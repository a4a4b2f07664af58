"""
Data Ingestion - Extractors Package.

Extractors walk a fetched document into raw rows.

Extractors:
- table_extractor: measured-data HTML table
"""

from data_ingestion.extractors.table_extractor import extract_rows


__all__ = ["extract_rows"]
