"""
Settlement management routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from tallyup.api.dependencies import get_group_or_404, valid_month_key
from tallyup.core.exceptions import InvalidAmount
from tallyup.db.session import get_db
from tallyup.models.group import Group
from tallyup.models.settlement import SettlementResult
from tallyup.schemas.balance import MonthlyDataResponse
from tallyup.schemas.settlement import SettlementResultResponse, SettlementRecordCreate
from tallyup.services.settlement_service import calculate_settlement, record_settlement

router = APIRouter(prefix="/settlement", tags=["settlement"])


@router.post("/{group_id}/{month_key}/trigger")
async def trigger_settlement(
    month_key: str = Depends(valid_month_key),
    group: Group = Depends(get_group_or_404),
    db: Session = Depends(get_db)
):
    """Trigger settlement calculation for a group's month."""
    result = calculate_settlement(group.id, month_key, db)

    return {"message": "Settlement calculated successfully", "settlement_id": result.id}


@router.get("/{group_id}/{month_key}/result", response_model=SettlementResultResponse)
async def get_settlement_result(
    month_key: str = Depends(valid_month_key),
    group: Group = Depends(get_group_or_404),
    db: Session = Depends(get_db)
):
    """Get settlement result for a group's month."""
    # Since we only keep the latest settlement, just get the first (and only) one
    settlement = db.query(SettlementResult).filter(
        SettlementResult.group_id == group.id,
        SettlementResult.month_key == month_key
    ).first()

    if not settlement:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Settlement result not found"
        )

    return settlement


@router.post("/{group_id}/{month_key}/record", response_model=MonthlyDataResponse)
async def record_payment(
    payment: SettlementRecordCreate,
    month_key: str = Depends(valid_month_key),
    group: Group = Depends(get_group_or_404),
    db: Session = Depends(get_db)
):
    """Record a payment made between two members."""
    member_ids = group.member_ids
    if payment.from_member not in member_ids or payment.to_member not in member_ids:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Both members must belong to this group"
        )
    if payment.from_member == payment.to_member:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A member cannot pay themselves"
        )

    try:
        return record_settlement(group.id, month_key, payment.from_member, payment.to_member, payment.amount, db)
    except InvalidAmount as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except LookupError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
