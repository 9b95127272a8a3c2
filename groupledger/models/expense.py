from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Numeric
from sqlalchemy.orm import relationship
from groupledger.db.session import Base

EXPENSE_CATEGORIES = ("Food", "Transport", "Shopping", "Entertainment", "Bills", "Other")

class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)
    group_id = Column(Integer, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True)
    paid_by = Column(Integer, nullable=False, index=True)
    description = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    category = Column(String, nullable=False, default="Other")
    notes = Column(String, nullable=True)
    date = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    splits = relationship(
        "ExpenseSplit",
        back_populates="expense",
        cascade="all, delete-orphan",
        order_by="ExpenseSplit.id",
        lazy="selectin",
    )

    @property
    def split_between(self):
        # is_paid is derived from the payer rather than stored
        return [
            {
                "user_id": s.user_id,
                "share": s.share,
                "share_type": s.share_type,
                "is_paid": s.user_id == self.paid_by,
            }
            for s in self.splits
        ]
