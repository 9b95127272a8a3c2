from decimal import Decimal
from pydantic import BaseModel
from typing import List

class Transfer(BaseModel):
    from_user: int
    to_user: int
    amount: Decimal

class CounterpartyBalance(BaseModel):
    user_id: int
    # > 0: the viewer owes them, < 0: they owe the viewer
    balance: Decimal

class BalanceMismatch(BaseModel):
    user_id: int
    stored: Decimal
    expected: Decimal

class BalanceCheckOut(BaseModel):
    group_id: int
    consistent: bool
    balance_sum: Decimal
    mismatches: List[BalanceMismatch]
