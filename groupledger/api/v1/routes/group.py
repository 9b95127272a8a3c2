from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from groupledger.core.dependencies import get_current_user, get_db
from groupledger.schemas.balances import BalanceCheckOut
from groupledger.schemas.group import GroupCreate, GroupOut
from groupledger.services.group_services import (
    add_member,
    create_group,
    delete_group,
    get_group,
    list_group_for_user,
    remove_member,
    verify_group_balances,
)

router = APIRouter()

@router.post("/", response_model=GroupOut)
async def create_new_group(
    data: GroupCreate,
    db: AsyncSession = Depends(get_db),
    user_id: int = Depends(get_current_user)
):
    return await create_group(
        db,
        data.name,
        user_id,
        description=data.description,
        category=data.category,
        members=data.members,
    )

@router.get("/my-groups", response_model=list[GroupOut])
async def my_groups(db: AsyncSession = Depends(get_db), user_id: int = Depends(get_current_user)):
    return await list_group_for_user(db, user_id)

@router.get("/{group_id}", response_model=GroupOut)
async def fetch(group_id: int, db: AsyncSession = Depends(get_db), user_id: int = Depends(get_current_user)):
    return await get_group(db, group_id, user_id)

@router.delete("/{group_id}")
async def remove_group(group_id: int, db: AsyncSession = Depends(get_db), user_id: int = Depends(get_current_user)):
    return await delete_group(db, group_id, user_id)

@router.post("/{group_id}/members/{member_id}", response_model=GroupOut)
async def add_user_to_group(group_id: int, member_id: int, db: AsyncSession = Depends(get_db), user_id: int = Depends(get_current_user)):
    return await add_member(db, group_id, member_id, user_id)

@router.delete("/{group_id}/members/{member_id}", response_model=GroupOut)
async def remove_user_from_group(group_id: int, member_id: int, db: AsyncSession = Depends(get_db), user_id: int = Depends(get_current_user)):
    return await remove_member(db, group_id, member_id, user_id)

@router.get("/{group_id}/verify-balances", response_model=BalanceCheckOut)
async def verify_balances(group_id: int, db: AsyncSession = Depends(get_db), user_id: int = Depends(get_current_user)):
    return await verify_group_balances(db, group_id, user_id)
