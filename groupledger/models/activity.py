from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Numeric, DateTime
from groupledger.db.session import Base

ACTIVITY_TYPES = (
    "GROUP_CREATE",
    "GROUP_UPDATE",
    "GROUP_DELETE",
    "MEMBER_ADD",
    "MEMBER_REMOVE",
    "EXPENSE_ADD",
    "EXPENSE_UPDATE",
    "EXPENSE_DELETE",
    "PAYMENT_MADE",
    "PAYMENT_DELETE",
    "BALANCE_SETTLE",
)


class Activity(Base):
    __tablename__ = "activities"

    # plain id columns, no foreign keys: the log outlives what it describes
    id = Column(Integer, primary_key=True)
    type = Column(String, nullable=False)
    actor = Column(Integer, nullable=False, index=True)
    target = Column(Integer, nullable=True, index=True)
    group_id = Column(Integer, nullable=True, index=True)
    expense_id = Column(Integer, nullable=True)
    payment_id = Column(Integer, nullable=True)
    amount = Column(Numeric(12, 2), nullable=True)
    description = Column(String, nullable=False)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)
