"""
Settlement model for the latest suggested payment plan of a month.
"""
from sqlalchemy import Column, String, Text, ForeignKey, Integer, JSON
from sqlalchemy.orm import relationship
from tallyup.db.base import BaseModel


class SettlementResult(BaseModel):
    """Settlement result model storing calculation results."""
    __tablename__ = "settlement_results"

    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False, index=True)
    month_key = Column(String(7), nullable=False, index=True)
    calculation_data = Column(JSON, nullable=False)  # Stores net balances, transfers, etc.
    summary = Column(Text, nullable=True)

    # Relationships
    group = relationship("Group", back_populates="settlement_results")
