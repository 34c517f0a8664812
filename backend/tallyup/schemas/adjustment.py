"""
Pydantic schemas for balance adjustments.
"""
from pydantic import BaseModel
from typing import Literal, Optional
from datetime import datetime
from decimal import Decimal


class AdjustmentCreate(BaseModel):
    """Schema for adjusting one member's balance."""
    member_id: str
    adjustment_type: Literal["ADD", "DEDUCT"]
    amount: Decimal
    comment: str
    created_by: Optional[str] = None


class AdjustmentResponse(BaseModel):
    """Schema for a stored adjustment."""
    id: int
    group_id: int
    month_key: str
    member_id: str
    adjustment_type: str
    amount: Decimal
    comment: str
    created_by: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
