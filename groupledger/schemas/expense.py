from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel
from typing import List

class SplitInput(BaseModel):
    user_id: int
    share: Decimal = Decimal("1")
    # anything other than percentage or exact is priced by weight
    share_type: str = "equal"

class ExpenseCreate(BaseModel):
    description: str
    amount: Decimal
    split_between: List[SplitInput]
    category: str = "Other"
    notes: str | None = None

class SplitOut(BaseModel):
    user_id: int
    share: Decimal
    share_type: str
    is_paid: bool

class ExpenseOut(BaseModel):
    id: int
    group_id: int
    description: str
    amount: Decimal
    paid_by: int
    split_between: List[SplitOut]
    category: str
    notes: str | None = None
    date: datetime | None = None

    class Config:
        from_attributes = True
