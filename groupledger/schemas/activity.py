from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel
from typing import List

class ActivityOut(BaseModel):
    id: int
    type: str
    actor: int
    target: int | None = None
    group_id: int | None = None
    expense_id: int | None = None
    payment_id: int | None = None
    amount: Decimal | None = None
    description: str
    created_at: datetime | None = None

    class Config:
        from_attributes = True

class ActivityPage(BaseModel):
    total: int
    page: int
    limit: int
    activities: List[ActivityOut]
