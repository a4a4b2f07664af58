"""
Data Ingestion - Value Parser.

============================================================
RESPONSIBILITY
============================================================
Converts raw cell text into typed measurement values.

- Czech date-time ``DD.MM.YYYY HH:MM`` -> naive datetime
- Decimal-comma numbers -> Decimal
- Dash / empty placeholders -> None

Both parsers return None for anything they cannot read;
callers decide what an unreadable value means.

============================================================
"""

import re
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional


SOURCE_DATETIME_FORMAT = "%d.%m.%Y %H:%M"

_DATETIME_PATTERN = re.compile(r"(\d{2})\.(\d{2})\.(\d{4})\s+(\d{2}):(\d{2})")
_NUMBER_PATTERN = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")

MISSING_PLACEHOLDER = "-"


def parse_datetime(text: Optional[str]) -> Optional[datetime]:
    """
    Parse a source timestamp of the form ``DD.MM.YYYY HH:MM``.

    The pattern is searched within the cell, so surrounding
    whitespace or a trailing zone label is tolerated. Calendar-
    invalid values (e.g. 31.02.) yield None.
    """
    if not text:
        return None

    match = _DATETIME_PATTERN.search(text)
    if match is None:
        return None

    day, month, year, hour, minute = (int(part) for part in match.groups())
    try:
        return datetime(year, month, day, hour, minute)
    except ValueError:
        return None


def parse_numeric_value(text: Optional[str]) -> Optional[Decimal]:
    """
    Parse a measured value rendered with a decimal comma.

    ``""`` and ``"-"`` mean no measurement. Anything that is not a
    plain finite number after the comma swap is also None.
    """
    if text is None:
        return None

    value = text.strip()
    if not value or value == MISSING_PLACEHOLDER:
        return None

    value = value.replace(",", ".")
    if not _NUMBER_PATTERN.fullmatch(value):
        return None

    try:
        return Decimal(value)
    except InvalidOperation:
        return None


def format_datetime(value: datetime) -> str:
    """Render a timestamp back into the source format."""
    return value.strftime(SOURCE_DATETIME_FORMAT)


def format_decimal(
    value: Optional[Decimal],
    places: int,
    decimal_separator: str = ",",
) -> str:
    """
    Render a measured value for display, half-up rounded.

    None renders as the dash placeholder.
    """
    if value is None:
        return MISSING_PLACEHOLDER

    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP)
    rendered = f"{rounded:f}"
    if decimal_separator != ".":
        rendered = rendered.replace(".", decimal_separator)
    return rendered
