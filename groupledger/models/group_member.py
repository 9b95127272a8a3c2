from datetime import datetime, timezone
from decimal import Decimal
from sqlalchemy import Column, ForeignKey, Integer, DateTime, Numeric, UniqueConstraint
from groupledger.db.session import Base
from sqlalchemy.orm import relationship

class GroupMember(Base):
    __tablename__ = "group_members"
    __table_args__ = (
        UniqueConstraint("group_id", "user_id", name="uq_group_member_user"),
    )

    id = Column(Integer, primary_key=True, index=True)

    group_id = Column(Integer, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, nullable=False, index=True)
    # > 0: the group owes this member, < 0: this member owes the group
    balance = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    joined_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    group = relationship("Group", back_populates="members")
