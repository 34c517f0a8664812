"""
Balance calculation for a batch of expenses.

A positive balance means the group owes the member money, a negative one means
the member owes the group. Every unit credited to a payer is debited from the
share holders, so the balances of a valid batch always sum to zero.
"""
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from tallyup.core.money import (
    SETTLEMENT_EPSILON,
    ZERO,
    is_negligible,
    round_money,
    sum_money,
    to_amount,
)
from tallyup.core.records import BalanceReport, BalanceSummary


def _field(record: Any, name: str):
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def read_expense(record: Any) -> Optional[Tuple[Decimal, str, Dict[str, Decimal]]]:
    """
    Extract (amount, payer, shares) from a record, or None if it cannot be folded.

    Records may be ExpenseRecords, mappings or any object exposing the fields.
    A record is only folded whole: every share must be a non-negative amount keyed
    by a member id, and the shares must add up to the amount within
    SETTLEMENT_EPSILON.
    """
    if record is None:
        return None
    amount = to_amount(_field(record, "amount"))
    payer = _field(record, "payer")
    shares = _field(record, "shares")
    if amount is None or amount <= 0 or not payer or not isinstance(payer, str):
        return None
    if not shares or not isinstance(shares, Mapping):
        return None

    parsed = {}
    for member_id, raw_share in shares.items():
        share = to_amount(raw_share)
        if not isinstance(member_id, str) or share is None or share < 0:
            return None
        parsed[member_id] = share

    if abs(sum_money(parsed.values()) - amount) > SETTLEMENT_EPSILON:
        return None
    return amount, payer, parsed


def find_invalid_expenses(expenses: Iterable[Any]) -> List[int]:
    """Positions of the records calculate_balances will skip."""
    return [index for index, record in enumerate(expenses or []) if read_expense(record) is None]


def create_balance_summary(balances: Mapping[str, Decimal]) -> BalanceSummary:
    """Totals and extremes of a balance map."""
    total_positive = ZERO
    total_negative = ZERO
    max_debt = ZERO
    max_credit = ZERO

    for balance in balances.values():
        if balance > 0:
            total_positive += balance
            max_credit = max(max_credit, balance)
        elif balance < 0:
            total_negative += abs(balance)
            max_debt = max(max_debt, abs(balance))

    return BalanceSummary(
        total_positive=round_money(total_positive),
        total_negative=round_money(total_negative),
        max_debt=round_money(max_debt),
        max_credit=round_money(max_credit),
        is_settled=all(is_negligible(balance) for balance in balances.values())
    )


def calculate_balances(expenses: Iterable[Any], members: Iterable[str] = ()) -> BalanceReport:
    """
    Fold expenses into one signed balance per member.

    Malformed records are skipped, never raised on. Members listed in ``members``
    always appear in the result, even with a zero balance.
    """
    balances: Dict[str, Decimal] = {}
    total_by_member: Dict[str, Decimal] = {}
    for member_id in members or ():
        balances[member_id] = ZERO
        total_by_member[member_id] = ZERO

    folded_amounts = []
    for record in expenses or ():
        parsed = read_expense(record)
        if parsed is None:
            continue
        amount, payer, shares = parsed

        balances[payer] = balances.get(payer, ZERO) + amount
        total_by_member[payer] = total_by_member.get(payer, ZERO) + amount
        folded_amounts.append(amount)

        for member_id, share in shares.items():
            balances[member_id] = balances.get(member_id, ZERO) - share
            total_by_member.setdefault(member_id, ZERO)

    balances = {member_id: round_money(value) for member_id, value in balances.items()}
    total_by_member = {member_id: round_money(value) for member_id, value in total_by_member.items()}

    return BalanceReport(
        balances=balances,
        total_by_member=total_by_member,
        total_expenses=round_money(sum_money(folded_amounts)),
        summary=create_balance_summary(balances)
    )
