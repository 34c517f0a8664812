"""
Expense model for tracking shared spending.
"""
from sqlalchemy import Column, String, Numeric, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from tallyup.core.records import ExpenseRecord, SPLIT_EQUAL
from tallyup.db.base import BaseModel


class Expense(BaseModel):
    """Expense model representing a single payment split among members."""
    __tablename__ = "expenses"

    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False, index=True)
    payer_id = Column(String(128), nullable=False, index=True)
    description = Column(Text, nullable=False)
    amount = Column(Numeric(15, 2), nullable=False)
    split_type = Column(String(10), nullable=False, default=SPLIT_EQUAL)
    expense_date = Column(DateTime, nullable=False, index=True)  # Calendar date at noon
    month_key = Column(String(7), nullable=False, index=True)  # YYYY-MM
    category = Column(String(50), nullable=True)

    # Relationships
    group = relationship("Group", back_populates="expenses")
    shares = relationship(
        "ExpenseShare",
        back_populates="expense",
        cascade="all, delete-orphan",
        order_by="ExpenseShare.id"
    )

    def to_record(self) -> ExpenseRecord:
        """Snapshot this row as an ExpenseRecord for the balance engine."""
        return ExpenseRecord(
            amount=self.amount,
            payer=self.payer_id,
            shares={share.member_id: share.share_amount for share in self.shares},
            split_type=self.split_type,
            date=self.expense_date,
            period=self.month_key
        )


class ExpenseShare(BaseModel):
    """One member's share of an expense."""
    __tablename__ = "expense_shares"

    expense_id = Column(Integer, ForeignKey("expenses.id"), nullable=False, index=True)
    member_id = Column(String(128), nullable=False, index=True)
    share_amount = Column(Numeric(15, 2), nullable=False)

    # Relationships
    expense = relationship("Expense", back_populates="shares")
