import logging
from decimal import Decimal

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from groupledger.core.utils import qround
from groupledger.models.group import Group
from groupledger.models.group_member import GroupMember
from groupledger.models.expense import Expense
from groupledger.models.payment import Payment

logger = logging.getLogger(__name__)


async def check_db_service(db: AsyncSession):
    try:
        await db.execute(select(1))
        return {"db": True, "message": "Database is connected"}
    except SQLAlchemyError as e:
        logger.error("Database health check failed: %s", e)
        return {"db": False, "error": str(e)}


async def system_health():
    return {
        "status": "ok"
    }


async def system_metrics(db: AsyncSession):
    """Row counts plus the money moved through expenses and payments."""
    counts = {}
    for key, column in (
        ("groups", Group.id),
        ("members", GroupMember.id),
        ("expenses", Expense.id),
        ("payments", Payment.id),
    ):
        counts[key] = await db.scalar(select(func.count(column)))

    expense_volume = await db.scalar(select(func.coalesce(func.sum(Expense.amount), 0)))
    payment_volume = await db.scalar(select(func.coalesce(func.sum(Payment.amount), 0)))

    return {
        **counts,
        "expense_volume": str(qround(Decimal(str(expense_volume)))),
        "payment_volume": str(qround(Decimal(str(payment_volume)))),
    }
