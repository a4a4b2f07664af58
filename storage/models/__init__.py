"""
Storage Models Package.

ORM models for the hydrological store.

- Base (base.py)
- Measurement, FetchLog (hydro.py)
"""

from storage.models.base import Base
from storage.models.hydro import FetchLog, Measurement


__all__ = [
    "Base",
    "FetchLog",
    "Measurement",
]
