from datetime import datetime, timezone
from decimal import Decimal
from sqlalchemy import Column, Integer, String, DateTime, Numeric
from sqlalchemy.orm import relationship
from groupledger.db.session import Base

GROUP_CATEGORIES = ("Trip", "Home", "Office", "Other")

class Group(Base):
    __tablename__ = "groups"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=False, default="")
    category = Column(String, nullable=False, default="Other")
    created_by = Column(Integer, nullable=False, index=True)
    total_expenses = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    members = relationship(
        "GroupMember",
        back_populates="group",
        cascade="all, delete-orphan",
        order_by="GroupMember.id",
        lazy="selectin",
    )

    def member_for(self, user_id: int):
        for m in self.members:
            if m.user_id == user_id:
                return m
        return None

    def balances(self):
        return [(m.user_id, m.balance) for m in self.members]
