from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel

class PaymentCreate(BaseModel):
    paid_to: int
    amount: Decimal
    description: str | None = None

class PaymentOut(BaseModel):
    id: int
    group_id: int
    paid_by: int
    paid_to: int
    amount: Decimal
    description: str
    date: datetime | None = None

    class Config:
        from_attributes = True
