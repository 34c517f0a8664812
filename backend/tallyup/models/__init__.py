"""Models package - Import all models for SQLAlchemy registration."""
from tallyup.models.group import Group, GroupMember
from tallyup.models.expense import Expense, ExpenseShare
from tallyup.models.monthly import MonthlyData
from tallyup.models.settlement import SettlementResult
from tallyup.models.adjustment import Adjustment

__all__ = [
    "Group",
    "GroupMember",
    "Expense",
    "ExpenseShare",
    "MonthlyData",
    "SettlementResult",
    "Adjustment",
]
