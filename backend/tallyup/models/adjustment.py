"""
Manual adjustments of a member's balance within one month.
"""
from sqlalchemy import Column, String, Text, Numeric, ForeignKey, Integer
from sqlalchemy.orm import relationship
from tallyup.db.base import BaseModel


class Adjustment(BaseModel):
    """An ADD or DEDUCT applied on top of a member's computed balance."""
    __tablename__ = "adjustments"

    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False, index=True)
    month_key = Column(String(7), nullable=False, index=True)
    member_id = Column(String(128), nullable=False, index=True)
    adjustment_type = Column(String(10), nullable=False)  # ADD or DEDUCT
    amount = Column(Numeric(15, 2), nullable=False)
    comment = Column(Text, nullable=False)
    created_by = Column(String(128), nullable=True)

    # Relationships
    group = relationship("Group", back_populates="adjustments")
