"""
Base ORM Model.

============================================================
PURPOSE
============================================================
Provides the declarative base used by all ORM models of the
hydrological store.

============================================================
TIME HANDLING
============================================================
The source publishes civil time without an offset and the
store keeps it exactly that way, so datetime columns are
timezone-naive.

============================================================
"""

from datetime import datetime

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Declarative base for all ORM models.

    ``Base.metadata`` is what ``database.engine.init_db`` creates.
    """

    type_annotation_map = {
        datetime: DateTime(timezone=False),
    }
