"""
Pydantic schemas for the read API.

Field names are snake_case in Python; the wire format keeps the
camelCase keys the browser dashboard reads (``dateTime``,
``lastFetch``).
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

# =======================
# MEASUREMENTS
# =======================

class MeasurementItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date_time: str = Field(alias="dateTime")  # DD.MM.YYYY HH:MM
    level: str
    flow: str
    temperature: str

class LastFetch(BaseModel):
    time: str
    status: str  # success, error
    records: int

class MeasurementsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    count: int
    data: List[MeasurementItem]
    last_fetch: Optional[LastFetch] = Field(default=None, alias="lastFetch")
    timestamp: str

# =======================
# COMMON
# =======================

class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    message: str

class HealthResponse(BaseModel):
    status: str
    timestamp: str
