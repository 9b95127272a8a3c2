from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from groupledger.core.dependencies import get_current_user, get_db
from groupledger.schemas.payment import PaymentCreate, PaymentOut
from groupledger.services.payment_services import (
    create_payment,
    delete_payment,
    get_group_payments,
    get_my_payments,
    get_payment_by_id,
)

router = APIRouter()

@router.post("/{group_id}/add", response_model=PaymentOut)
async def add_payment(group_id: int, data: PaymentCreate, db: AsyncSession = Depends(get_db), user_id: int = Depends(get_current_user)):
    return await create_payment(
        db,
        group_id=group_id,
        paid_by=user_id,
        paid_to=data.paid_to,
        amount=data.amount,
        description=data.description,
    )

@router.get("/mine", response_model=list[PaymentOut])
async def my_payments(db: AsyncSession = Depends(get_db), user_id: int = Depends(get_current_user)):
    return await get_my_payments(db, user_id)

@router.get("/{group_id}/all", response_model=list[PaymentOut])
async def group_payments(group_id: int, db: AsyncSession = Depends(get_db), user_id: int = Depends(get_current_user)):
    return await get_group_payments(db, group_id, user_id)

@router.get("/{payment_id}", response_model=PaymentOut)
async def fetch(payment_id: int, db: AsyncSession = Depends(get_db), user_id: int = Depends(get_current_user)):
    return await get_payment_by_id(db, payment_id, user_id)

@router.delete("/{payment_id}")
async def del_payment(payment_id: int, db: AsyncSession = Depends(get_db), user_id: int = Depends(get_current_user)):
    return await delete_payment(db, payment_id, user_id)
