import logging
from contextlib import asynccontextmanager
from decimal import Decimal, InvalidOperation
from typing import Dict

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from groupledger.core.exceptions import InvalidArgument, LedgerError, NotFound, Unauthorized
from groupledger.core.locks import group_lock
from groupledger.core.utils import has_cents_precision, qround
from groupledger.models.group import Group

logger = logging.getLogger(__name__)

# NUMERIC(12, 2) columns
MAX_AMOUNT = Decimal("10000000000")


def parse_amount(value, field: str = "amount") -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidArgument(f"{field} must be a number")

    if not amount.is_finite() or amount <= 0:
        raise InvalidArgument(f"{field} must be positive")
    if amount >= MAX_AMOUNT:
        raise InvalidArgument(f"{field} is too large")
    if not has_cents_precision(amount):
        raise InvalidArgument(f"{field} must have at most two decimal places")

    return qround(amount)


async def get_group_or_404(db: AsyncSession, group_id: int, for_update: bool = False) -> Group:
    q = select(Group).where(Group.id == group_id).execution_options(populate_existing=True)
    if for_update:
        q = q.with_for_update()

    res = await db.execute(q)
    group = res.scalar_one_or_none()

    if not group:
        raise NotFound(f"Group {group_id} does not exist")
    return group


async def ensure_group_member(db: AsyncSession, group_id: int, user_id: int) -> Group:
    group = await get_group_or_404(db, group_id)
    if group.member_for(user_id) is None:
        raise Unauthorized("You are not a member of this group")
    return group


@asynccontextmanager
async def locked_group(db: AsyncSession, group_id: int):
    """
    Runs one balance mutation as a single transaction on one group.

    The per-group lock is held for the whole read-modify-write and the group
    row is selected FOR UPDATE, so two mutations of the same group never
    interleave. Commits when the block exits cleanly.

    Business rules are checked before anything is modified, so a rejected
    operation only has to end the transaction: it commits nothing and the
    objects the caller already holds stay loaded. Any other failure, or a
    rejection with changes pending, rolls back and leaves balances untouched.
    """
    async with group_lock(group_id):
        try:
            group = await get_group_or_404(db, group_id, for_update=True)
            yield group
            await db.commit()
        except LedgerError:
            if db.new or db.dirty or db.deleted:
                await db.rollback()
            else:
                await db.commit()
            raise
        except Exception:
            await db.rollback()
            raise


def apply_deltas(group: Group, deltas: Dict[int, Decimal], sign: int = 1):
    for user_id, delta in deltas.items():
        member = group.member_for(user_id)
        if member is None:
            logger.warning("Group %s has no member %s, skipping delta %s", group.id, user_id, delta)
            continue
        member.balance = member.balance + sign * delta
