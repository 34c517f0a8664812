"""
Balance adjustments: manual corrections and recorded payments layered on top of
the balances computed from a month's expenses.

Adjustments never touch expenses. ADD raises a member's balance, DEDUCT lowers
it; a payment from X to Y is an ADD for X and a DEDUCT for Y of the same amount.
"""
import logging
from decimal import Decimal
from sqlalchemy.orm import Session
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from tallyup.core.exceptions import InvalidAdjustment, InvalidAmount
from tallyup.core.money import ZERO, round_money, to_amount
from tallyup.core.records import BalanceReport
from tallyup.models.adjustment import Adjustment
from tallyup.models.group import Group
from tallyup.services.monthly_service import calculate_period_balances, lock_monthly_data

logger = logging.getLogger(__name__)

ADJUST_ADD = "ADD"
ADJUST_DEDUCT = "DEDUCT"
ADJUSTMENT_TYPES = (ADJUST_ADD, ADJUST_DEDUCT)


def signed_amount(adjustment_type: str, amount: Decimal) -> Decimal:
    """Amount as it moves the balance: positive for ADD, negative for DEDUCT."""
    return amount if adjustment_type == ADJUST_ADD else -amount


def apply_adjustments(balances: Mapping[str, Decimal], adjustments: Iterable[Adjustment]) -> Dict[str, Decimal]:
    """
    Add the adjustments to a copy of ``balances``.

    Members that only appear in adjustments are added. The input is not modified.
    """
    adjusted = dict(balances)
    for adjustment in adjustments:
        amount = to_amount(adjustment.amount)
        if amount is None:
            continue
        current = adjusted.get(adjustment.member_id, ZERO)
        adjusted[adjustment.member_id] = current + signed_amount(adjustment.adjustment_type, amount)
    return {member_id: round_money(value) for member_id, value in adjusted.items()}


def get_adjustments(
    group_id: int,
    month_key: str,
    db: Session,
    member_id: Optional[str] = None,
    adjustment_type: Optional[str] = None
) -> List[Adjustment]:
    """Adjustment history of a month, oldest first, optionally filtered."""
    query = db.query(Adjustment).filter(
        Adjustment.group_id == group_id,
        Adjustment.month_key == month_key
    )
    if member_id:
        query = query.filter(Adjustment.member_id == member_id)
    if adjustment_type:
        query = query.filter(Adjustment.adjustment_type == adjustment_type.upper())
    return query.order_by(Adjustment.id).all()


def calculate_adjusted_balances(
    group_id: int,
    month_key: str,
    db: Session
) -> Tuple[BalanceReport, Dict[str, Decimal], List[int]]:
    """Computed report, balances with the month's adjustments applied, and skipped expense ids."""
    report, skipped_ids = calculate_period_balances(group_id, month_key, db)
    adjusted = apply_adjustments(report.balances, get_adjustments(group_id, month_key, db))
    return report, adjusted, skipped_ids


def build_adjustment(
    group_id: int,
    month_key: str,
    member_id: str,
    adjustment_type: str,
    amount,
    comment: str,
    created_by: Optional[str] = None
) -> Adjustment:
    """Validate and build an unsaved Adjustment. Raises InvalidAmount or InvalidAdjustment."""
    value = to_amount(amount)
    if value is None or value <= 0:
        raise InvalidAmount(amount)

    kind = adjustment_type.upper() if isinstance(adjustment_type, str) else adjustment_type
    if kind not in ADJUSTMENT_TYPES:
        raise InvalidAdjustment(f"Adjustment type must be one of {', '.join(ADJUSTMENT_TYPES)}")

    text = (comment or "").strip()
    if not text:
        raise InvalidAdjustment("Comment is required")

    return Adjustment(
        group_id=group_id,
        month_key=month_key,
        member_id=member_id,
        adjustment_type=kind,
        amount=round_money(value),
        comment=text,
        created_by=created_by
    )


def create_adjustment(
    group_id: int,
    month_key: str,
    member_id: str,
    adjustment_type: str,
    amount,
    comment: str,
    db: Session,
    created_by: Optional[str] = None
) -> Adjustment:
    """
    Store an adjustment of one member's balance for a month.

    The month's aggregate row is locked for the duration, so adjustments and
    expense submissions for the same month are applied one at a time.
    """
    group = db.query(Group).filter(Group.id == group_id).first()
    if not group:
        raise LookupError("Group not found")
    if member_id not in group.member_ids:
        raise InvalidAdjustment(f"Member {member_id} is not a member of this group")

    adjustment = build_adjustment(group_id, month_key, member_id, adjustment_type, amount, comment, created_by)

    try:
        lock_monthly_data(group_id, month_key, db)
        db.add(adjustment)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(adjustment)

    logger.info(f"Adjusted {member_id} by {adjustment.adjustment_type} {adjustment.amount} in group {group_id} for {month_key}")
    return adjustment
