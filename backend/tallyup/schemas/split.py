"""
Pydantic schemas for share allocation previews.
"""
from pydantic import BaseModel
from typing import Dict, List, Optional
from decimal import Decimal


class ShareAllocationRequest(BaseModel):
    """Schema for an allocation preview request."""
    total_amount: Decimal
    participant_ids: List[str]
    split_type: str = "equal"
    custom_shares: Optional[Dict[str, Decimal]] = None


class RedistributeRequest(BaseModel):
    """Schema for spreading the unallocated amount over empty shares."""
    total_amount: Decimal
    participant_ids: List[str]
    existing_shares: Dict[str, Decimal] = {}


class SharesResponse(BaseModel):
    """Schema for computed shares."""
    shares: Dict[str, Decimal]
    total_amount: Decimal
    remaining_amount: Decimal
