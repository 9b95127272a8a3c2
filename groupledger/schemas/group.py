from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel
from typing import List

class GroupCreate(BaseModel):
    name: str
    description: str = ""
    category: str = "Other"
    members: List[int] = []

class GroupMemberOut(BaseModel):
    user_id: int
    balance: Decimal

    class Config:
        from_attributes = True

class GroupOut(BaseModel):
    id: int
    name: str
    description: str
    category: str
    created_by: int
    total_expenses: Decimal
    members: List[GroupMemberOut]
    created_at: datetime | None = None

    class Config:
        from_attributes = True
