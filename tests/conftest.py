"""
Shared test fixtures.

============================================================
FIXTURES
============================================================
- engine / session_factory / session: in-memory SQLite store
  with both tables created
- clock: MockClock pinned to 20.05.2024 12:00 civil time
- make_page: builds an HTML document shaped like the station
  page (decoy table plus the measured-data table)

============================================================
"""

from datetime import datetime
from typing import Iterable, Sequence

import pytest

from core.clock import MockClock
from database.engine import create_database_engine, get_session_factory, init_db


NOW = datetime(2024, 5, 20, 12, 0)


# ============================================================
# DATABASE
# ============================================================

@pytest.fixture
def engine():
    """In-memory SQLite engine with the schema created."""
    engine = create_database_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return get_session_factory(engine)


@pytest.fixture
def session(session_factory):
    session = session_factory()
    yield session
    session.close()


# ============================================================
# CLOCK
# ============================================================

@pytest.fixture
def clock():
    """Clock pinned to a fixed civil time."""
    return MockClock(NOW)


# ============================================================
# HTML PAGES
# ============================================================

def _row(cells: Sequence[str], tag: str = "td") -> str:
    return "<tr>" + "".join(f"<{tag}>{cell}</{tag}>" for cell in cells) + "</tr>"


def build_page(
    rows: Iterable[Sequence[str]],
    container_class: str = "tborder center_text",
    include_decoy: bool = True,
) -> str:
    header = _row(["Datum a čas", "Stav [cm]", "Průtok [m³/s]", "Teplota [°C]"], tag="th")
    body = "".join(_row(cells) for cells in rows)

    decoy = ""
    if include_decoy:
        decoy = (
            '<div class="tborder"><table>'
            + _row(["Předpověď", "Stav", "Průtok", "Teplota"], tag="th")
            + _row(["21.05.2024 10:00", "999", "99,99", "9,9"])
            + "</table></div>"
        )

    return (
        "<html><head><meta charset=\"utf-8\"><title>Stanice</title></head><body>"
        + decoy
        + f'<div class="{container_class}"><table>{header}{body}</table></div>'
        + "</body></html>"
    )


@pytest.fixture
def make_page():
    """Factory for station-shaped HTML documents."""
    return build_page


@pytest.fixture
def sample_rows():
    """Three recent rows, newest first as the page lists them."""
    return [
        ["20.05.2024 10:20", "352", "12,80", "15,4"],
        ["20.05.2024 10:10", "351", "12,65", "15,3"],
        ["20.05.2024 10:00", "350", "12,50", "15,2"],
    ]
