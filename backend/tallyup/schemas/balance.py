"""
Pydantic schemas for balances and monthly aggregates.
"""
from pydantic import BaseModel
from typing import Any, Dict, List, Optional
from datetime import datetime
from decimal import Decimal


class BalanceSummaryResponse(BaseModel):
    """Schema for balance summary."""
    total_positive: Decimal
    total_negative: Decimal
    max_debt: Decimal
    max_credit: Decimal
    is_settled: bool

    class Config:
        from_attributes = True


class BalanceResponse(BaseModel):
    """Schema for balances of a group over one month."""
    group_id: int
    month_key: str
    balances: Dict[str, Decimal]  # member_id -> net balance
    total_by_member: Dict[str, Decimal]  # member_id -> total paid
    total_expenses: Decimal
    summary: BalanceSummaryResponse
    adjusted_balances: Dict[str, Decimal] = {}  # member_id -> balance after adjustments
    skipped_expense_ids: List[int] = []


class MonthlyDataResponse(BaseModel):
    """Schema for the stored monthly aggregate."""
    group_id: int
    month_key: str
    total_expenses: Decimal
    member_balances: Dict[str, Dict[str, Any]]
    settlements: List[Dict[str, Any]]
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
