"""
Expense management routes.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

from tallyup.api.dependencies import get_group_or_404, share_error, valid_month_key
from tallyup.core.exceptions import ExpenseValidationError, ShareAllocationError
from tallyup.db.session import get_db
from tallyup.models.group import Group
from tallyup.schemas.expense import ExpenseCreate, ExpenseResponse
from tallyup.services.expense_service import create_expense
from tallyup.services.monthly_service import get_period_expenses

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/expenses", tags=["expenses"])


@router.post("/{group_id}", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
async def add_expense(
    expense_data: ExpenseCreate,
    group: Group = Depends(get_group_or_404),
    db: Session = Depends(get_db)
):
    """Create a new expense and update the month's balances."""
    try:
        expense = create_expense(group.id, expense_data, db)
    except ShareAllocationError as e:
        logger.warning(f"Rejected split for group {group.id}: {e}")
        raise share_error(e)
    except ExpenseValidationError as e:
        logger.warning(f"Rejected expense for group {group.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    return expense


@router.get("/{group_id}/{month_key}", response_model=List[ExpenseResponse])
async def list_expenses(
    month_key: str = Depends(valid_month_key),
    group: Group = Depends(get_group_or_404),
    db: Session = Depends(get_db)
):
    """Get the expenses of a group for one month."""
    return get_period_expenses(group.id, month_key, db)
