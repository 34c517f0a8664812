"""
Group and membership models.

Membership is managed elsewhere; this service only reads it.
"""
from sqlalchemy import Column, String, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship
from tallyup.db.base import BaseModel


class Group(BaseModel):
    """A group of members sharing expenses."""
    __tablename__ = "groups"

    name = Column(String(200), nullable=False)

    # Relationships
    members = relationship(
        "GroupMember",
        back_populates="group",
        cascade="all, delete-orphan",
        order_by="GroupMember.id"
    )
    expenses = relationship("Expense", back_populates="group", cascade="all, delete-orphan")
    monthly_data = relationship("MonthlyData", back_populates="group", cascade="all, delete-orphan")
    settlement_results = relationship("SettlementResult", back_populates="group", cascade="all, delete-orphan")
    adjustments = relationship("Adjustment", back_populates="group", cascade="all, delete-orphan")

    @property
    def member_ids(self):
        """Member ids in the order they joined."""
        return [member.member_id for member in self.members]


class GroupMember(BaseModel):
    """A member of a group, identified by an opaque external id."""
    __tablename__ = "group_members"
    __table_args__ = (UniqueConstraint("group_id", "member_id", name="uq_group_member"),)

    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False, index=True)
    member_id = Column(String(128), nullable=False, index=True)
    display_name = Column(String(200), nullable=True)

    # Relationships
    group = relationship("Group", back_populates="members")
