import logging
from decimal import Decimal, InvalidOperation
from types import SimpleNamespace

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from groupledger.core.exceptions import InvalidArgument, NotFound, Unauthorized
from groupledger.core.utils import ZERO, SHARE_EXACT, SHARE_PERCENTAGE, compute_shares, expense_deltas
from groupledger.models.expense import Expense, EXPENSE_CATEGORIES
from groupledger.models.expense_split import ExpenseSplit
from groupledger.services.activity_services import record_activity
from groupledger.services.ledger import (
    MAX_AMOUNT,
    apply_deltas,
    ensure_group_member,
    locked_group,
    parse_amount,
)

logger = logging.getLogger(__name__)


def _field(entry, key):
    if isinstance(entry, dict):
        return entry.get(key)
    return getattr(entry, key, None)


def _normalise_splits(split_between):
    """
    Checks raw split entries and returns them with Decimal shares.

    Entries may be dicts or objects exposing user_id, share and share_type.
    """
    if not split_between:
        raise InvalidArgument("Split information is required")

    splits = []
    for entry in split_between:
        user_id = _field(entry, "user_id")
        if user_id is None:
            raise InvalidArgument("Every split needs a user_id")

        try:
            share = Decimal(str(_field(entry, "share")))
        except (InvalidOperation, TypeError, ValueError):
            raise InvalidArgument(f"Share for user {user_id} must be a number")

        if not share.is_finite() or share < 0:
            raise InvalidArgument(f"Share for user {user_id} must not be negative")
        if share >= MAX_AMOUNT:
            raise InvalidArgument(f"Share for user {user_id} is too large")

        splits.append(SimpleNamespace(
            user_id=user_id,
            share=share,
            share_type=_field(entry, "share_type") or "equal",
        ))

    user_ids = [s.user_id for s in splits]
    if len(user_ids) != len(set(user_ids)):
        raise InvalidArgument("Duplicate users found in splits")

    weighted = [s for s in splits if s.share_type not in (SHARE_EXACT, SHARE_PERCENTAGE)]
    if weighted and sum((s.share for s in splits), ZERO) == 0:
        raise InvalidArgument("Equal splits need a positive total share")

    return splits


async def create_expense(
    db: AsyncSession,
    group_id: int,
    paid_by: int,
    description: str,
    amount,
    split_between,
    category: str = "Other",
    notes: str | None = None,
):
    amount = parse_amount(amount)
    splits = _normalise_splits(split_between)

    if not description or not description.strip():
        raise InvalidArgument("Description is required")
    if category not in EXPENSE_CATEGORIES:
        raise InvalidArgument(f"Unknown category {category!r}")

    resolved = compute_shares(amount, paid_by, splits)
    if any(s["share"] >= MAX_AMOUNT for s in resolved):
        raise InvalidArgument("A split share is larger than the largest storable amount")

    async with locked_group(db, group_id) as group:
        if group.member_for(paid_by) is None:
            raise Unauthorized("You are not a member of this group")

        outsiders = [s.user_id for s in splits if group.member_for(s.user_id) is None]
        if outsiders:
            raise InvalidArgument(f"Users {outsiders} in splits are not members of the group")

        expense = Expense(
            group_id=group.id,
            paid_by=paid_by,
            description=description,
            amount=amount,
            category=category,
            notes=notes,
            splits=[
                ExpenseSplit(user_id=s["user_id"], share=s["share"], share_type=s["share_type"])
                for s in resolved
            ],
        )

        apply_deltas(group, expense_deltas(amount, paid_by, expense.splits))
        group.total_expenses = group.total_expenses + amount

        db.add(expense)
        await db.flush()  # generates expense.id

    logger.info("Expense %s of %s added to group %s by user %s", expense.id, amount, group_id, paid_by)

    await record_activity(
        db,
        type="EXPENSE_ADD",
        actor=paid_by,
        group_id=group_id,
        expense_id=expense.id,
        amount=amount,
        description=f"Added expense: {description}",
    )

    return expense


async def get_expense_or_404(db: AsyncSession, expense_id: int) -> Expense:
    q = select(Expense).where(Expense.id == expense_id).execution_options(populate_existing=True)
    res = await db.execute(q)
    expense = res.scalar_one_or_none()

    if not expense:
        raise NotFound("Expense not found")
    return expense


async def delete_expense(db: AsyncSession, user_id: int, expense_id: int):
    expense = await get_expense_or_404(db, expense_id)

    async with locked_group(db, expense.group_id) as group:
        # re-read under the lock, a concurrent delete may have won
        expense = await get_expense_or_404(db, expense_id)

        # Authorization: only payer can delete
        if expense.paid_by != user_id:
            raise Unauthorized("You cannot delete this expense")

        # replay the stored shares so the reversal cancels exactly
        apply_deltas(group, expense_deltas(expense.amount, expense.paid_by, expense.splits), sign=-1)
        group.total_expenses = group.total_expenses - expense.amount

        group_id, amount, description = expense.group_id, expense.amount, expense.description
        await db.delete(expense)

    logger.info("Expense %s deleted from group %s by user %s", expense_id, group_id, user_id)

    await record_activity(
        db,
        type="EXPENSE_DELETE",
        actor=user_id,
        group_id=group_id,
        expense_id=expense_id,
        amount=amount,
        description=f"deleted expense: {description}",
    )

    return {"status": "deleted"}


async def get_expense_by_id(db: AsyncSession, expense_id: int, user_id: int):
    expense = await get_expense_or_404(db, expense_id)
    await ensure_group_member(db, expense.group_id, user_id)
    return expense


async def get_expenses_by_group(db: AsyncSession, group_id: int, user_id: int):
    await ensure_group_member(db, group_id, user_id)

    q = (
        select(Expense)
        .where(Expense.group_id == group_id)
        .order_by(Expense.date.desc(), Expense.id.desc())
    )
    res = await db.execute(q)
    return res.scalars().all()


async def get_expenses(db: AsyncSession, user_id: int):
    """Every expense the user paid for or takes a share of, newest first."""
    q = (
        select(Expense)
        .outerjoin(ExpenseSplit, Expense.id == ExpenseSplit.expense_id)
        .where(
            or_(
                Expense.paid_by == user_id,
                ExpenseSplit.user_id == user_id,
            )
        )
        .order_by(Expense.date.desc(), Expense.id.desc())
        .distinct()
    )

    res = await db.execute(q)
    return res.scalars().all()
