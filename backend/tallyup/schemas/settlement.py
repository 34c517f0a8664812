"""
Pydantic schemas for Settlement entity.
"""
from pydantic import BaseModel
from typing import Dict, Any
from datetime import datetime
from decimal import Decimal


class SettlementResultResponse(BaseModel):
    """Schema for settlement result response."""
    id: int
    group_id: int
    month_key: str
    calculation_data: Dict[str, Any]  # Net balances, transfers, totals
    summary: str
    created_at: datetime

    class Config:
        from_attributes = True


class SettlementRecordCreate(BaseModel):
    """Schema for recording a payment that was actually made."""
    from_member: str
    to_member: str
    amount: Decimal
