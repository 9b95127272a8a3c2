from sqlalchemy import Column, Integer, Numeric, String, ForeignKey
from sqlalchemy.orm import relationship
from groupledger.db.session import Base

class ExpenseSplit(Base):
    __tablename__ = "expense_splits"

    id = Column(Integer, primary_key=True, index=True)
    expense_id = Column(Integer, ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    # charged amount, already rounded to cents
    share = Column(Numeric(12, 2), nullable=False)
    share_type = Column(String, nullable=False, default="equal")

    expense = relationship("Expense", back_populates="splits")
