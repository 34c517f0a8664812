"""
Settlement service: turns balances into the payments that settle a group.
"""
import logging
from datetime import datetime, timezone
from sqlalchemy.orm import Session
from typing import Any, List, Mapping

from tallyup.core.exceptions import InvalidAmount
from tallyup.core.money import SETTLEMENT_EPSILON, round_money, to_amount
from tallyup.core.records import Settlement
from tallyup.models.monthly import MonthlyData
from tallyup.models.settlement import SettlementResult
from tallyup.services.adjustment_service import (
    ADJUST_ADD,
    ADJUST_DEDUCT,
    build_adjustment,
    calculate_adjusted_balances,
)
from tallyup.services.balance_service import create_balance_summary
from tallyup.services.monthly_service import lock_monthly_data

logger = logging.getLogger(__name__)


def plan_settlements(balances: Mapping[str, Any]) -> List[Settlement]:
    """
    Minimize the number of transfers needed to settle debts.

    Greedy: the largest debtor pays the largest creditor until one of them is
    even, then the next in line steps up. Ties keep the balance map's order.
    Balances within SETTLEMENT_EPSILON of zero are treated as settled.
    """
    # Separate creditors (positive balance) and debtors (negative balance)
    debtors = []
    creditors = []
    for member_id, raw_balance in balances.items():
        balance = to_amount(raw_balance)
        if balance is None:
            continue
        if balance < -SETTLEMENT_EPSILON:
            debtors.append([member_id, -balance])  # Store as positive for easier calculation
        elif balance > SETTLEMENT_EPSILON:
            creditors.append([member_id, balance])

    # Sort in descending order
    debtors.sort(key=lambda x: x[1], reverse=True)
    creditors.sort(key=lambda x: x[1], reverse=True)

    settlements = []
    debt_idx = 0
    cred_idx = 0

    while debt_idx < len(debtors) and cred_idx < len(creditors):
        debtor_id, owed = debtors[debt_idx]
        creditor_id, due = creditors[cred_idx]

        # Transfer the minimum of what's owed and what's needed
        amount = min(owed, due)
        rounded = round_money(amount)
        if rounded > 0:
            settlements.append(Settlement(from_member=debtor_id, to_member=creditor_id, amount=rounded))

        debtors[debt_idx][1] = owed - amount
        creditors[cred_idx][1] = due - amount

        if debtors[debt_idx][1] < SETTLEMENT_EPSILON:
            debt_idx += 1
        if creditors[cred_idx][1] < SETTLEMENT_EPSILON:
            cred_idx += 1

    return settlements


def calculate_settlement(group_id: int, month_key: str, db: Session) -> SettlementResult:
    """
    Calculate the settlement plan of a group for one month.

    Transfers are planned on the balances after the month's adjustments, so
    recorded payments shrink the plan. Returns SettlementResult with calculation
    data, replacing the previous one.
    """
    report, adjusted, skipped_ids = calculate_adjusted_balances(group_id, month_key, db)
    transfers = plan_settlements(adjusted)
    adjusted_summary = create_balance_summary(adjusted)

    calculation_data = {
        "net_balances": {member_id: float(balance) for member_id, balance in report.balances.items()},
        "adjusted_balances": {member_id: float(balance) for member_id, balance in adjusted.items()},
        "total_by_member": {member_id: float(total) for member_id, total in report.total_by_member.items()},
        "transfers": [
            {
                "from_member": t.from_member,
                "to_member": t.to_member,
                "amount": float(t.amount)
            }
            for t in transfers
        ],
        "total_expenses": float(report.total_expenses),
        "participant_count": len(adjusted),
        "is_settled": adjusted_summary.is_settled,
        "skipped_expense_ids": skipped_ids
    }

    # Create summary text
    summary_lines = []
    summary_lines.append(f"Period: {month_key}")
    summary_lines.append(f"Total expenses: {report.total_expenses:.2f}")
    summary_lines.append(f"Participants: {calculation_data['participant_count']}")
    summary_lines.append("\nNet balances:")
    for member_id, balance in report.balances.items():
        summary_lines.append(f"  {member_id}: {balance:+.2f}")
    if adjusted != report.balances:
        summary_lines.append("\nAfter adjustments:")
        for member_id, balance in adjusted.items():
            summary_lines.append(f"  {member_id}: {balance:+.2f}")
    summary_lines.append("\nTransfers:")
    if not transfers:
        summary_lines.append("  All settled up")
    for transfer in transfers:
        summary_lines.append(f"  {transfer.from_member} -> {transfer.to_member}: {transfer.amount:.2f}")
    summary = "\n".join(summary_lines)

    # Delete old settlement results for this month (we only need the latest)
    db.query(SettlementResult).filter(
        SettlementResult.group_id == group_id,
        SettlementResult.month_key == month_key
    ).delete()

    settlement = SettlementResult(
        group_id=group_id,
        month_key=month_key,
        calculation_data=calculation_data,
        summary=summary
    )
    db.add(settlement)
    db.commit()
    db.refresh(settlement)

    logger.info(f"Calculated settlement for group {group_id} {month_key}: {len(transfers)} transfers")
    return settlement


def record_settlement(group_id: int, month_key: str, from_member: str, to_member: str, amount, db: Session) -> MonthlyData:
    """
    Record a payment made between two members in the month's aggregate.

    The payment is kept in the month's list and booked as a pair of adjustments
    (ADD for the payer, DEDUCT for the receiver); past expenses are not touched.
    """
    value = to_amount(amount)
    if value is None or value <= 0:
        raise InvalidAmount(amount)

    monthly = lock_monthly_data(group_id, month_key, db, create=False)
    if not monthly:
        raise LookupError("Monthly data not found")

    # Reassign so the JSON column change is picked up
    monthly.settlements = list(monthly.settlements or []) + [{
        "from_member": from_member,
        "to_member": to_member,
        "amount": float(round_money(value)),
        "recorded_at": datetime.now(timezone.utc).isoformat()
    }]
    comment = f"Settlement payment from {from_member} to {to_member}"
    db.add(build_adjustment(group_id, month_key, from_member, ADJUST_ADD, value, comment))
    db.add(build_adjustment(group_id, month_key, to_member, ADJUST_DEDUCT, value, comment))
    db.commit()
    db.refresh(monthly)

    logger.info(f"Recorded settlement {from_member} -> {to_member} of {value} for group {group_id} {month_key}")
    return monthly
