"""
Monthly aggregate of a group's expenses and balances.
"""
from sqlalchemy import Column, String, Numeric, ForeignKey, Integer, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from tallyup.db.base import BaseModel


class MonthlyData(BaseModel):
    """Per-month totals, member balances and recorded settlement payments."""
    __tablename__ = "monthly_data"
    __table_args__ = (UniqueConstraint("group_id", "month_key", name="uq_monthly_group_month"),)

    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False, index=True)
    month_key = Column(String(7), nullable=False, index=True)
    total_expenses = Column(Numeric(15, 2), nullable=False, default=0)
    member_balances = Column(JSON, nullable=False, default=dict)  # member_id -> {"balance", "total_paid"}
    settlements = Column(JSON, nullable=False, default=list)  # Recorded payments

    # Relationships
    group = relationship("Group", back_populates="monthly_data")
