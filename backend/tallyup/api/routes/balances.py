"""
Balance routes.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from tallyup.api.dependencies import get_group_or_404, valid_month_key
from tallyup.db.session import get_db
from tallyup.models.group import Group
from tallyup.schemas.balance import BalanceResponse, BalanceSummaryResponse, MonthlyDataResponse
from tallyup.services.adjustment_service import calculate_adjusted_balances
from tallyup.services.monthly_service import get_all_monthly_data, get_monthly_data

router = APIRouter(prefix="/balances", tags=["balances"])


# Declared before /{group_id}/{month_key} so "monthly" is not taken for a month key
@router.get("/{group_id}/monthly", response_model=List[MonthlyDataResponse])
async def list_monthly(
    group: Group = Depends(get_group_or_404),
    db: Session = Depends(get_db)
):
    """List every stored monthly aggregate of a group."""
    return get_all_monthly_data(group.id, db)


@router.get("/{group_id}/{month_key}", response_model=BalanceResponse)
async def get_balances(
    month_key: str = Depends(valid_month_key),
    group: Group = Depends(get_group_or_404),
    db: Session = Depends(get_db)
):
    """Calculate member balances of a group for one month."""
    report, adjusted, skipped_ids = calculate_adjusted_balances(group.id, month_key, db)

    return BalanceResponse(
        group_id=group.id,
        month_key=month_key,
        balances=report.balances,
        total_by_member=report.total_by_member,
        total_expenses=report.total_expenses,
        summary=BalanceSummaryResponse.model_validate(report.summary),
        adjusted_balances=adjusted,
        skipped_expense_ids=skipped_ids
    )


@router.get("/{group_id}/{month_key}/monthly", response_model=MonthlyDataResponse)
async def get_monthly(
    month_key: str = Depends(valid_month_key),
    group: Group = Depends(get_group_or_404),
    db: Session = Depends(get_db)
):
    """Get the stored monthly aggregate of a group."""
    return get_monthly_data(group.id, month_key, db)
