"""
Balance adjustment routes.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from tallyup.api.dependencies import get_group_or_404, valid_month_key
from tallyup.core.exceptions import InvalidAdjustment, InvalidAmount
from tallyup.db.session import get_db
from tallyup.models.group import Group
from tallyup.schemas.adjustment import AdjustmentCreate, AdjustmentResponse
from tallyup.services.adjustment_service import create_adjustment, get_adjustments

router = APIRouter(prefix="/adjustments", tags=["adjustments"])


@router.post("/{group_id}/{month_key}", response_model=AdjustmentResponse, status_code=status.HTTP_201_CREATED)
async def add_adjustment(
    adjustment: AdjustmentCreate,
    month_key: str = Depends(valid_month_key),
    group: Group = Depends(get_group_or_404),
    db: Session = Depends(get_db)
):
    """Adjust one member's balance for a month."""
    try:
        return create_adjustment(
            group.id,
            month_key,
            adjustment.member_id,
            adjustment.adjustment_type,
            adjustment.amount,
            adjustment.comment,
            db,
            created_by=adjustment.created_by
        )
    except (InvalidAmount, InvalidAdjustment) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )


@router.get("/{group_id}/{month_key}", response_model=List[AdjustmentResponse])
async def list_adjustments(
    member_id: Optional[str] = Query(None),
    adjustment_type: Optional[str] = Query(None),
    month_key: str = Depends(valid_month_key),
    group: Group = Depends(get_group_or_404),
    db: Session = Depends(get_db)
):
    """Adjustment history of a month, optionally for one member or one type."""
    return get_adjustments(group.id, month_key, db, member_id=member_id, adjustment_type=adjustment_type)
