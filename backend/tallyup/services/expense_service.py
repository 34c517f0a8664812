"""
Expense service for expense-entry business logic.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from sqlalchemy.orm import Session
from typing import Dict, List, Optional

from tallyup.core.config import settings, get_period_timezone
from tallyup.core.exceptions import ExpenseValidationError, UnparseableDate
from tallyup.core.money import to_amount
from tallyup.core.periods import normalize_instant, period_key_of, to_date_like
from tallyup.core.records import SPLIT_CUSTOM
from tallyup.models.expense import Expense, ExpenseShare
from tallyup.models.group import Group
from tallyup.schemas.expense import ExpenseCreate
from tallyup.services.monthly_service import refresh_monthly_data
from tallyup.services.share_service import allocate_shares

logger = logging.getLogger(__name__)


@dataclass
class ValidatedExpense:
    """Expense input that passed validation, ready to be stored."""
    description: str
    amount: Decimal
    payer_id: str
    split_type: str
    shares: Dict[str, Decimal]
    expense_date: datetime
    month_key: str
    category: str


def _resolve_expense_date(value, today: date, tz) -> datetime:
    """Calendar date of the expense at noon, stored without zone."""
    if value is None:
        value = today
    try:
        instant = normalize_instant(to_date_like(value), tz)
    except UnparseableDate:
        logger.warning(f"Rejected expense date {value!r}")
        raise ExpenseValidationError("Invalid date format. Please use YYYY-MM-DD")

    if instant.date() > today and not settings.ALLOW_FUTURE_EXPENSES:
        raise ExpenseValidationError("Cannot create expenses for future dates")
    return instant.replace(tzinfo=None)


def validate_expense(
    data: ExpenseCreate,
    member_ids: List[str],
    today: Optional[date] = None
) -> ValidatedExpense:
    """
    Validate an expense against the group's members and compute its shares.

    Raises ExpenseValidationError, or a ShareAllocationError from the split.
    """
    tz = get_period_timezone()
    if today is None:
        today = datetime.now(tz).date()

    description = (data.description or "").strip()
    if not description:
        raise ExpenseValidationError("Description is required")

    amount = to_amount(data.amount)
    if amount is None or amount <= 0:
        raise ExpenseValidationError("Valid amount is required")

    if data.payer_id not in member_ids:
        raise ExpenseValidationError(f"Payer {data.payer_id} is not a member of this group")

    participant_ids = data.participant_ids if data.participant_ids is not None else list(member_ids)
    outsiders = [member_id for member_id in participant_ids if member_id not in member_ids]
    if outsiders:
        raise ExpenseValidationError(f"Not members of this group: {', '.join(outsiders)}")

    if data.split_type == SPLIT_CUSTOM and not data.custom_shares:
        raise ExpenseValidationError("Shares information is required")

    shares = allocate_shares(amount, participant_ids, data.split_type, data.custom_shares)
    expense_date = _resolve_expense_date(data.expense_date, today, tz)

    return ValidatedExpense(
        description=description,
        amount=amount,
        payer_id=data.payer_id,
        split_type=data.split_type,
        shares=shares,
        expense_date=expense_date,
        month_key=period_key_of(expense_date),
        category=data.category or settings.DEFAULT_CATEGORY
    )


def create_expense(group_id: int, data: ExpenseCreate, db: Session, today: Optional[date] = None) -> Expense:
    """Create an expense with its shares and refresh the month's aggregate."""
    group = db.query(Group).filter(Group.id == group_id).first()
    if not group:
        raise LookupError("Group not found")

    validated = validate_expense(data, group.member_ids, today=today)

    expense = Expense(
        group_id=group_id,
        payer_id=validated.payer_id,
        description=validated.description,
        amount=validated.amount,
        split_type=validated.split_type,
        expense_date=validated.expense_date,
        month_key=validated.month_key,
        category=validated.category,
        shares=[
            ExpenseShare(member_id=member_id, share_amount=share_amount)
            for member_id, share_amount in validated.shares.items()
        ]
    )
    db.add(expense)
    db.flush()

    try:
        refresh_monthly_data(group_id, validated.month_key, db)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(expense)

    logger.info(f"Created expense {expense.id} of {validated.amount} in group {group_id} for {validated.month_key}")
    return expense
