import logging
from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from groupledger.models.activity import Activity, ACTIVITY_TYPES
from groupledger.models.group_member import GroupMember

logger = logging.getLogger(__name__)


async def record_activity(
    db: AsyncSession,
    type: str,
    actor: int,
    description: str,
    group_id: int | None = None,
    target: int | None = None,
    expense_id: int | None = None,
    payment_id: int | None = None,
    amount=None,
):
    """
    Best-effort audit write, done after the ledger change has committed.

    Uses its own session so a failure here can neither roll back nor expire
    anything the caller still holds. Errors are logged and dropped.
    """
    if type not in ACTIVITY_TYPES:
        raise ValueError(f"Unknown activity type {type!r}")

    try:
        async with AsyncSession(bind=db.bind, expire_on_commit=False) as log_db:
            log_db.add(Activity(
                type=type,
                actor=actor,
                target=target,
                group_id=group_id,
                expense_id=expense_id,
                payment_id=payment_id,
                amount=amount,
                description=description,
            ))
            await log_db.commit()
        logger.info("Activity %s recorded for group %s", type, group_id)
    except Exception:
        logger.exception("Failed to record %s activity for group %s", type, group_id)


async def list_activities(db: AsyncSession, user_id: int, page: int = 1, limit: int = 10):
    page = max(page, 1)
    limit = max(min(limit, 100), 1)

    my_groups = select(GroupMember.group_id).where(GroupMember.user_id == user_id)
    visible = or_(
        Activity.actor == user_id,
        Activity.target == user_id,
        Activity.group_id.in_(my_groups),
    )

    total = await db.scalar(select(func.count(Activity.id)).where(visible))

    q = (
        select(Activity)
        .where(visible)
        .order_by(Activity.created_at.desc(), Activity.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    res = await db.execute(q)

    return {
        "total": total or 0,
        "page": page,
        "limit": limit,
        "activities": res.scalars().all(),
    }
