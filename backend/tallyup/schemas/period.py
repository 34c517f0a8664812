"""
Pydantic schemas for month periods.
"""
from pydantic import BaseModel
from datetime import datetime


class PeriodKeyResponse(BaseModel):
    """Schema for a derived period key."""
    key: str
    fell_back: bool  # True when the input could not be read and the current month was used


class PeriodBoundariesResponse(BaseModel):
    """Schema for period boundaries."""
    key: str
    start: datetime
    end: datetime
