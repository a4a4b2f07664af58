"""
Data Ingestion - Measured-Data Table Extractor.

============================================================
RESPONSIBILITY
============================================================
Locates the measured-data table in the fetched page and walks
its rows into raw cell texts.

- The page carries several tables (measured, forecast, ...);
  the measured one is inside a container with both marker
  classes
- First row is the header and is always skipped
- Short rows and repeated header rows are skipped with a
  recorded reason

============================================================
DESIGN PRINCIPLES
============================================================
- Stateless: parse the document, return rows
- A missing table is an empty result, not an exception
- No value parsing here (see value_parser)

============================================================
"""

import logging
from typing import Sequence, Union

from bs4 import BeautifulSoup

from data_ingestion.types import (
    HydroSourceConfig,
    RawRow,
    RowStatus,
    SkipReason,
    TableExtraction,
)


logger = logging.getLogger(__name__)

HTML_PARSER = "html.parser"


def _container_selector(container_classes: Sequence[str]) -> str:
    return "".join(f".{name}" for name in container_classes) + " table"


def _cell_text(cell) -> str:
    return cell.get_text().strip()


def extract_rows(
    document: Union[str, bytes],
    config: HydroSourceConfig = HydroSourceConfig(),
) -> TableExtraction:
    """
    Extract raw rows from the measured-data table.

    Args:
        document: Raw HTML (bytes are decoded using the page's
            declared charset)
        config: Source configuration (marker classes, header word)

    Returns:
        TableExtraction; ``table_found`` is False when no element
        matches the marker classes
    """
    soup = BeautifulSoup(document, HTML_PARSER)
    table = soup.select_one(_container_selector(config.container_classes))

    if table is None:
        logger.warning("Measured-data table not found in document")
        return TableExtraction(table_found=False)

    rows = table.find_all("tr")
    header_marker = config.header_marker.casefold()
    extracted = []

    # Row 0 is the column header.
    for row_number, row in enumerate(rows[1:], start=1):
        cells = tuple(_cell_text(cell) for cell in row.find_all("td"))

        if len(cells) < config.min_cells:
            extracted.append(RawRow(
                row_number=row_number,
                cells=cells,
                status=RowStatus.SKIPPED,
                reason=SkipReason.INSUFFICIENT_CELLS.value,
            ))
            continue

        first = cells[0]
        if not first or header_marker in first.casefold():
            extracted.append(RawRow(
                row_number=row_number,
                cells=cells,
                status=RowStatus.SKIPPED,
                reason=SkipReason.HEADER_OR_EMPTY.value,
            ))
            continue

        extracted.append(RawRow(row_number=row_number, cells=cells))

    logger.debug(
        f"Extracted {len(extracted)} rows "
        f"({sum(1 for r in extracted if r.is_candidate)} candidates)"
    )
    return TableExtraction(
        table_found=True,
        total_rows_found=len(rows),
        rows=tuple(extracted),
    )
