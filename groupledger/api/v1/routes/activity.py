from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from groupledger.core.dependencies import get_current_user, get_db
from groupledger.schemas.activity import ActivityPage
from groupledger.services.activity_services import list_activities

router = APIRouter()


@router.get("/", response_model=ActivityPage)
async def my_activities(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    user_id: int = Depends(get_current_user),
):
    return await list_activities(db, user_id, page=page, limit=limit)
