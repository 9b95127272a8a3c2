from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from groupledger.core.dependencies import get_current_user, get_db
from groupledger.schemas.expense import ExpenseCreate, ExpenseOut
from groupledger.services.expense_services import (
    create_expense,
    delete_expense,
    get_expense_by_id,
    get_expenses,
    get_expenses_by_group,
)

router = APIRouter()

@router.post("/{group_id}/add", response_model=ExpenseOut)
async def add_expense(group_id: int, data: ExpenseCreate, db: AsyncSession = Depends(get_db), user_id: int = Depends(get_current_user)):
    return await create_expense(
        db,
        group_id=group_id,
        paid_by=user_id,
        description=data.description,
        amount=data.amount,
        split_between=data.split_between,
        category=data.category,
        notes=data.notes,
    )

@router.get("/my-expenses/all", response_model=list[ExpenseOut])
async def my_expenses(
    db: AsyncSession = Depends(get_db),
    user_id: int = Depends(get_current_user),
):
    return await get_expenses(db, user_id=user_id)

@router.get("/{group_id}/all", response_model=list[ExpenseOut])
async def all_expenses(group_id: int, db: AsyncSession = Depends(get_db), user_id: int = Depends(get_current_user)):
    return await get_expenses_by_group(db, group_id, user_id)

@router.delete("/{expense_id}")
async def del_expense(expense_id: int, db: AsyncSession = Depends(get_db), user_id: int = Depends(get_current_user)):
    return await delete_expense(db, user_id=user_id, expense_id=expense_id)

@router.get("/{expense_id}", response_model=ExpenseOut)
async def fetch(
    expense_id: int,
    db: AsyncSession = Depends(get_db),
    user_id: int = Depends(get_current_user),
):
    return await get_expense_by_id(db, expense_id=expense_id, user_id=user_id)
