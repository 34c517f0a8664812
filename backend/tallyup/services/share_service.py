"""
Share allocation for new expenses.

Equal splits floor every share to the cent and let the last participant absorb
the rounding remainder, so the shares always add up to the total exactly. "Last"
is the last participant in the order the caller lists them.
"""
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional

from tallyup.core.exceptions import (
    EmptyParticipantSet,
    InvalidAmount,
    InvalidSplitType,
    ShareMismatch,
)
from tallyup.core.money import (
    SETTLEMENT_EPSILON,
    ZERO,
    floor_money,
    round_money,
    sum_money,
    to_amount,
    to_decimal,
)
from tallyup.core.records import SPLIT_CUSTOM, SPLIT_EQUAL


def _ordered_participants(participants: Iterable[str]) -> List[str]:
    """Drop duplicates, keeping first occurrence order."""
    if participants is None:
        return []
    return list(dict.fromkeys(participants))


def _validated_total(total_amount) -> Decimal:
    total = to_amount(total_amount)
    if total is None or total <= 0:
        raise InvalidAmount(total_amount)
    return total


def split_evenly(amount: Decimal, participants: List[str]) -> Dict[str, Decimal]:
    """Floor each share to the cent; the last participant takes the remainder."""
    count = len(participants)
    share = floor_money(amount / count)
    shares = {member_id: share for member_id in participants[:-1]}
    shares[participants[-1]] = round_money(amount - share * (count - 1))
    return shares


def allocate_shares(
    total_amount,
    participants: Iterable[str],
    split_type: str = SPLIT_EQUAL,
    custom_shares: Optional[Mapping[str, object]] = None
) -> Dict[str, Decimal]:
    """
    Compute per-member shares for a new expense.

    Raises InvalidAmount, EmptyParticipantSet, InvalidSplitType or ShareMismatch.
    """
    total = _validated_total(total_amount)
    members = _ordered_participants(participants)
    if not members:
        raise EmptyParticipantSet()

    kind = split_type.lower() if isinstance(split_type, str) else split_type
    if kind == SPLIT_EQUAL:
        return split_evenly(total, members)
    if kind == SPLIT_CUSTOM:
        return _validate_custom_shares(total, members, custom_shares or {})
    raise InvalidSplitType(split_type)


def _validate_custom_shares(
    total: Decimal,
    members: List[str],
    custom_shares: Mapping[str, object]
) -> Dict[str, Decimal]:
    parsed = {}
    for member_id, raw in custom_shares.items():
        parsed[member_id] = to_decimal(raw)
    share_sum = sum_money(value for value in parsed.values() if value is not None)

    outsiders = [member_id for member_id in parsed if member_id not in members]
    if outsiders:
        raise ShareMismatch(share_sum, total, f"shares given for non-participants: {', '.join(map(str, outsiders))}")

    invalid = [member_id for member_id, value in parsed.items() if value is None]
    if invalid:
        raise ShareMismatch(share_sum, total, f"non-numeric shares for: {', '.join(map(str, invalid))}")

    negative = [member_id for member_id, value in parsed.items() if value < 0]
    if negative:
        raise ShareMismatch(share_sum, total, f"negative shares for: {', '.join(map(str, negative))}")

    if abs(share_sum - total) > SETTLEMENT_EPSILON:
        raise ShareMismatch(share_sum, total)

    return {member_id: round_money(parsed.get(member_id, ZERO)) for member_id in members}


def redistribute_remainder(
    existing_shares: Mapping[str, object],
    participants: Iterable[str],
    total_amount
) -> Dict[str, Decimal]:
    """
    Spread the unallocated part of ``total_amount`` over participants without a share.

    Participants with no entry or a zero entry count as unfilled. When nothing is
    left to allocate, or nobody is unfilled, the shares come back unchanged.
    """
    total = _validated_total(total_amount)
    members = _ordered_participants(participants)

    shares = {}
    for member_id, raw in existing_shares.items():
        value = to_amount(raw)
        shares[member_id] = value if value is not None else ZERO
    for member_id in members:
        shares.setdefault(member_id, ZERO)

    remainder = round_money(total - sum_money(shares.values()))
    unfilled = [member_id for member_id in members if shares[member_id] == 0]
    if remainder <= 0 or not unfilled:
        return shares

    shares.update(split_evenly(remainder, unfilled))
    return shares
