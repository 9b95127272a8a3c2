from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from groupledger.core.dependencies import get_current_user, get_db
from groupledger.schemas.balances import CounterpartyBalance, Transfer
from groupledger.services.settlement_service import get_aggregated_balances, get_settlement_plan

router = APIRouter()


@router.get("/overall/me", response_model=list[CounterpartyBalance])
async def overall_balances(
    db: AsyncSession = Depends(get_db), user_id: int = Depends(get_current_user)
):
    return await get_aggregated_balances(db, user_id)


@router.get("/{group_id}", response_model=list[Transfer])
async def group_settlement_plan(
    group_id: int, db: AsyncSession = Depends(get_db), user_id: int = Depends(get_current_user)
):
    return await get_settlement_plan(db, group_id, user_id)
