"""
Pydantic schemas for Expense entity.
"""
from pydantic import BaseModel, Field
from typing import Dict, List, Literal, Optional, Union
from datetime import date, datetime
from decimal import Decimal


class EpochTimestampIn(BaseModel):
    """Document-store timestamp: seconds and nanoseconds since the epoch."""
    seconds: int
    nanoseconds: int = 0


class ExpenseCreate(BaseModel):
    """Schema for expense creation."""
    description: str
    amount: Decimal
    payer_id: str
    split_type: Literal["equal", "custom"] = "equal"
    participant_ids: Optional[List[str]] = None  # Defaults to every group member
    custom_shares: Optional[Dict[str, Decimal]] = None  # Required for custom splits
    expense_date: Optional[Union[date, EpochTimestampIn]] = None  # Defaults to today
    category: Optional[str] = None


class ExpenseShareResponse(BaseModel):
    """Schema for one member's share of an expense."""
    member_id: str
    share_amount: Decimal

    class Config:
        from_attributes = True


class ExpenseResponse(BaseModel):
    """Schema for expense response."""
    id: int
    group_id: int
    payer_id: str
    description: str
    amount: Decimal
    split_type: str
    expense_date: datetime
    month_key: str
    category: Optional[str] = None
    shares: List[ExpenseShareResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
