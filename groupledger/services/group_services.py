import logging
from decimal import Decimal
from sqlalchemy import delete, exists, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from groupledger.core.config import settings
from groupledger.core.exceptions import Conflict, InvalidArgument, Unauthorized
from groupledger.core.utils import ZERO, expense_deltas, payment_deltas, qround
from groupledger.models.expense import Expense
from groupledger.models.expense_split import ExpenseSplit
from groupledger.models.group import Group, GROUP_CATEGORIES
from groupledger.models.group_member import GroupMember
from groupledger.models.payment import Payment
from groupledger.services.activity_services import record_activity
from groupledger.services.ledger import ensure_group_member, locked_group

logger = logging.getLogger(__name__)


async def create_group(
    db: AsyncSession,
    name: str,
    creator_id: int,
    description: str = "",
    category: str = "Other",
    members: list[int] | None = None,
):
    if not name or not name.strip():
        raise InvalidArgument("Group name is required")
    if category not in GROUP_CATEGORIES:
        raise InvalidArgument(f"Unknown category {category!r}")

    # creator first, then the others once each
    extra = [uid for uid in dict.fromkeys(members or []) if uid != creator_id]

    group = Group(
        name=name,
        description=description or "",
        category=category,
        created_by=creator_id,
        total_expenses=Decimal("0.00"),
        members=[GroupMember(user_id=uid, balance=Decimal("0.00")) for uid in [creator_id, *extra]],
    )
    db.add(group)
    await db.commit()

    logger.info("Group %s created by user %s with %s members", group.id, creator_id, len(group.members))

    await record_activity(
        db,
        type="GROUP_CREATE",
        actor=creator_id,
        group_id=group.id,
        description=f'created group "{name}"',
    )
    for uid in extra:
        await record_activity(
            db,
            type="MEMBER_ADD",
            actor=creator_id,
            target=uid,
            group_id=group.id,
            description=f'added to group "{name}"',
        )

    return group


async def add_member(db: AsyncSession, group_id: int, user_id: int, requester_id: int):
    async with locked_group(db, group_id) as group:
        if group.created_by != requester_id:
            raise Unauthorized("Only the group creator can add members")

        if group.member_for(user_id) is not None:
            raise Conflict("User already in group")

        group.members.append(GroupMember(user_id=user_id, balance=Decimal("0.00")))
        name = group.name

    logger.info("User %s added to group %s", user_id, group_id)

    await record_activity(
        db,
        type="MEMBER_ADD",
        actor=requester_id,
        target=user_id,
        group_id=group_id,
        description=f'added to group "{name}"',
    )

    return group


async def _has_related_records(db: AsyncSession, group_id: int, user_id: int):
    expense_q = select(
        exists().where(
            Expense.group_id == group_id,
            or_(
                Expense.paid_by == user_id,
                Expense.id.in_(
                    select(ExpenseSplit.expense_id).where(ExpenseSplit.user_id == user_id)
                ),
            ),
        )
    )
    if await db.scalar(expense_q):
        return "Cannot remove member with related expenses"

    payment_q = select(
        exists().where(
            Payment.group_id == group_id,
            or_(Payment.paid_by == user_id, Payment.paid_to == user_id),
        )
    )
    if await db.scalar(payment_q):
        return "Cannot remove member with related payments"

    return None


async def remove_member(db: AsyncSession, group_id: int, user_id: int, requester_id: int):
    async with locked_group(db, group_id) as group:
        if group.created_by != requester_id:
            raise Unauthorized("Only the group creator can remove members")

        member = group.member_for(user_id)
        if member is None:
            raise Conflict("Member not found in group")

        reason = await _has_related_records(db, group_id, user_id)
        if reason:
            raise Conflict(reason)

        if member.balance != 0:
            raise Conflict("Cannot remove member with outstanding balance")

        group.members.remove(member)
        name = group.name

    logger.info("User %s removed from group %s", user_id, group_id)

    await record_activity(
        db,
        type="MEMBER_REMOVE",
        actor=requester_id,
        target=user_id,
        group_id=group_id,
        description=f'removed from group "{name}"',
    )

    return group


async def delete_group(db: AsyncSession, group_id: int, requester_id: int):
    async with locked_group(db, group_id) as group:
        if group.created_by != requester_id:
            raise Unauthorized("Not authorized to delete this group")

        group_expenses = select(Expense.id).where(Expense.group_id == group_id)
        await db.execute(delete(ExpenseSplit).where(ExpenseSplit.expense_id.in_(group_expenses)))
        await db.execute(delete(Expense).where(Expense.group_id == group_id))
        await db.execute(delete(Payment).where(Payment.group_id == group_id))

        name = group.name
        await db.delete(group)

    logger.info("Group %s deleted by user %s", group_id, requester_id)

    await record_activity(
        db,
        type="GROUP_DELETE",
        actor=requester_id,
        group_id=group_id,
        description=f'deleted group "{name}"',
    )

    return {"status": "deleted"}


async def get_group(db: AsyncSession, group_id: int, user_id: int):
    return await ensure_group_member(db, group_id, user_id)


async def list_group_for_user(db: AsyncSession, user_id: int):
    q = (
        select(Group)
        .join(GroupMember)
        .where(GroupMember.user_id == user_id)
        .order_by(Group.created_at.desc(), Group.id.desc())
    )
    result = await db.execute(q)
    return result.scalars().all()


async def verify_group_balances(db: AsyncSession, group_id: int, user_id: int):
    """
    Replays the group's expense and payment history and compares the result
    with the stored balances.

    A member is reported when the two differ by more than the configured
    tolerance. The sum of stored balances is returned as well; split rounding
    lets it drift by at most a cent per expense.
    """
    group = await ensure_group_member(db, group_id, user_id)
    tolerance = settings.BALANCE_TOLERANCE

    expected = {m.user_id: ZERO for m in group.members}

    expenses = (await db.scalars(select(Expense).where(Expense.group_id == group_id))).all()
    for exp in expenses:
        for uid, delta in expense_deltas(exp.amount, exp.paid_by, exp.splits).items():
            expected[uid] = expected.get(uid, ZERO) + delta

    payments = (await db.scalars(select(Payment).where(Payment.group_id == group_id))).all()
    for p in payments:
        for uid, delta in payment_deltas(p.amount, p.paid_by, p.paid_to).items():
            expected[uid] = expected.get(uid, ZERO) + delta

    mismatches = []
    for m in group.members:
        want = qround(expected.get(m.user_id, ZERO))
        if abs(m.balance - want) > tolerance:
            mismatches.append({"user_id": m.user_id, "stored": m.balance, "expected": want})

    balance_sum = qround(sum((m.balance for m in group.members), ZERO))
    total = qround(sum((exp.amount for exp in expenses), ZERO))

    return {
        "group_id": group_id,
        "consistent": not mismatches and total == group.total_expenses,
        "balance_sum": balance_sum,
        "mismatches": mismatches,
    }
