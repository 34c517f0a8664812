"""
In-memory value types passed between the split, balance and settlement services.
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Mapping, Optional

SPLIT_EQUAL = "equal"
SPLIT_CUSTOM = "custom"
SPLIT_TYPES = (SPLIT_EQUAL, SPLIT_CUSTOM)


@dataclass(frozen=True)
class ExpenseRecord:
    """A recorded expense: who paid, how much, and each member's share."""
    amount: Decimal
    payer: str
    shares: Mapping[str, Decimal]
    split_type: str = SPLIT_EQUAL
    date: Optional[datetime] = None
    period: Optional[str] = None


@dataclass(frozen=True)
class Settlement:
    """One recommended payment from a debtor to a creditor."""
    from_member: str
    to_member: str
    amount: Decimal


@dataclass(frozen=True)
class BalanceSummary:
    """Aggregate view of a balance map."""
    total_positive: Decimal
    total_negative: Decimal
    max_debt: Decimal
    max_credit: Decimal
    is_settled: bool


@dataclass
class BalanceReport:
    """Result of folding a batch of expenses into balances."""
    balances: dict = field(default_factory=dict)
    total_by_member: dict = field(default_factory=dict)
    total_expenses: Decimal = Decimal("0")
    summary: Optional[BalanceSummary] = None
