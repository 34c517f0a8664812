"""
Monthly aggregate service: period queries and the per-month balance snapshot.
"""
import logging
from sqlalchemy.orm import Session, selectinload
from typing import List, Tuple

from tallyup.core.periods import period_boundaries
from tallyup.core.records import BalanceReport
from tallyup.models.expense import Expense
from tallyup.models.group import Group
from tallyup.models.monthly import MonthlyData
from tallyup.services.balance_service import calculate_balances, find_invalid_expenses

logger = logging.getLogger(__name__)


def get_period_expenses(group_id: int, month_key: str, db: Session) -> List[Expense]:
    """Get all expenses of a group whose date falls inside the month."""
    bounds = period_boundaries(month_key)
    # expense_date is stored naive, as the calendar date at noon
    start = bounds.start.replace(tzinfo=None)
    end = bounds.end.replace(tzinfo=None)

    return db.query(Expense).options(
        selectinload(Expense.shares)
    ).filter(
        Expense.group_id == group_id,
        Expense.expense_date >= start,
        Expense.expense_date <= end
    ).order_by(Expense.expense_date, Expense.id).all()


def calculate_period_balances(group_id: int, month_key: str, db: Session) -> Tuple[BalanceReport, List[int]]:
    """
    Calculate balances of a group over one month.

    Returns the report and the ids of expenses that were skipped as malformed.
    """
    group = db.query(Group).filter(Group.id == group_id).first()
    member_ids = group.member_ids if group else []

    expenses = get_period_expenses(group_id, month_key, db)
    records = [expense.to_record() for expense in expenses]

    skipped_ids = [expenses[index].id for index in find_invalid_expenses(records)]
    for expense_id in skipped_ids:
        logger.warning(f"Skipping invalid expense {expense_id} in group {group_id} for {month_key}")

    return calculate_balances(records, member_ids), skipped_ids


def _empty_monthly_data(group_id: int, month_key: str) -> MonthlyData:
    return MonthlyData(
        group_id=group_id,
        month_key=month_key,
        total_expenses=0,
        member_balances={},
        settlements=[]
    )


def get_monthly_data(group_id: int, month_key: str, db: Session) -> MonthlyData:
    """Get the stored aggregate, or an unsaved empty one if the month has none."""
    monthly = db.query(MonthlyData).filter(
        MonthlyData.group_id == group_id,
        MonthlyData.month_key == month_key
    ).first()
    return monthly if monthly else _empty_monthly_data(group_id, month_key)


def lock_monthly_data(group_id: int, month_key: str, db: Session, create: bool = True):
    """
    Select the month's aggregate row FOR UPDATE, creating it when missing.

    Concurrent expense submissions race on this row, so every read-modify-write
    of it goes through here inside the caller's transaction.
    """
    monthly = db.query(MonthlyData).filter(
        MonthlyData.group_id == group_id,
        MonthlyData.month_key == month_key
    ).with_for_update().first()

    if not monthly and create:
        monthly = _empty_monthly_data(group_id, month_key)
        db.add(monthly)
        db.flush()
    return monthly


def refresh_monthly_data(group_id: int, month_key: str, db: Session) -> MonthlyData:
    """
    Recompute a month's totals and member balances from its expenses.

    Does not commit; the caller commits together with the change that triggered it.
    """
    monthly = lock_monthly_data(group_id, month_key, db)
    report, _ = calculate_period_balances(group_id, month_key, db)

    monthly.total_expenses = report.total_expenses
    monthly.member_balances = {
        member_id: {
            "balance": float(balance),
            "total_paid": float(report.total_by_member.get(member_id, 0))
        }
        for member_id, balance in report.balances.items()
    }
    db.flush()

    logger.info(f"Refreshed monthly data for group {group_id} {month_key}: total {report.total_expenses}")
    return monthly


def get_all_monthly_data(group_id: int, db: Session) -> List[MonthlyData]:
    """Get every stored monthly aggregate of a group, oldest month first."""
    return db.query(MonthlyData).filter(
        MonthlyData.group_id == group_id
    ).order_by(MonthlyData.month_key).all()
