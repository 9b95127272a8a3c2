import logging
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from groupledger.core.exceptions import InvalidArgument, NotFound, Unauthorized
from groupledger.core.utils import payment_deltas
from groupledger.models.payment import Payment
from groupledger.services.activity_services import record_activity
from groupledger.services.ledger import apply_deltas, ensure_group_member, locked_group, parse_amount

logger = logging.getLogger(__name__)


async def create_payment(
    db: AsyncSession,
    group_id: int,
    paid_by: int,
    paid_to: int,
    amount,
    description: str | None = None,
):
    amount = parse_amount(amount)
    if paid_to == paid_by:
        raise InvalidArgument("You cannot pay yourself")

    async with locked_group(db, group_id) as group:
        if group.member_for(paid_by) is None:
            raise Unauthorized("You are not a member of this group")
        if group.member_for(paid_to) is None:
            raise NotFound("Receiver is not in this group")

        payment = Payment(
            group_id=group.id,
            paid_by=paid_by,
            paid_to=paid_to,
            amount=amount,
            description=description or "Balance settlement",
        )

        apply_deltas(group, payment_deltas(amount, paid_by, paid_to))

        db.add(payment)
        await db.flush()

    logger.info("Payment %s of %s from %s to %s in group %s", payment.id, amount, paid_by, paid_to, group_id)

    await record_activity(
        db,
        type="PAYMENT_MADE",
        actor=paid_by,
        target=paid_to,
        group_id=group_id,
        payment_id=payment.id,
        amount=amount,
        description=f"made a payment of ${amount}",
    )

    return payment


async def get_payment_or_404(db: AsyncSession, payment_id: int) -> Payment:
    q = select(Payment).where(Payment.id == payment_id).execution_options(populate_existing=True)
    res = await db.execute(q)
    payment = res.scalar_one_or_none()

    if not payment:
        raise NotFound("Payment not found")
    return payment


async def delete_payment(db: AsyncSession, payment_id: int, user_id: int):
    payment = await get_payment_or_404(db, payment_id)

    async with locked_group(db, payment.group_id) as group:
        payment = await get_payment_or_404(db, payment_id)

        # Only the user who made the payment can undo it
        if payment.paid_by != user_id:
            raise Unauthorized("You are not allowed to delete this payment")

        apply_deltas(group, payment_deltas(payment.amount, payment.paid_by, payment.paid_to), sign=-1)

        group_id, paid_to, amount = payment.group_id, payment.paid_to, payment.amount
        await db.delete(payment)

    logger.info("Payment %s deleted from group %s by user %s", payment_id, group_id, user_id)

    await record_activity(
        db,
        type="PAYMENT_DELETE",
        actor=user_id,
        target=paid_to,
        group_id=group_id,
        payment_id=payment_id,
        amount=amount,
        description=f"deleted a payment of ${amount}",
    )

    return {"status": "deleted"}


async def get_payment_by_id(db: AsyncSession, payment_id: int, user_id: int):
    payment = await get_payment_or_404(db, payment_id)

    if user_id not in (payment.paid_by, payment.paid_to):
        raise Unauthorized("Not authorized to view this payment")

    return payment


async def get_group_payments(db: AsyncSession, group_id: int, user_id: int):
    await ensure_group_member(db, group_id, user_id)

    q = (
        select(Payment)
        .where(Payment.group_id == group_id)
        .order_by(Payment.date.desc(), Payment.id.desc())
    )
    res = await db.execute(q)
    return res.scalars().all()


async def get_my_payments(db: AsyncSession, user_id: int):
    q = (
        select(Payment)
        .where(or_(Payment.paid_by == user_id, Payment.paid_to == user_id))
        .order_by(Payment.date.desc(), Payment.id.desc())
    )
    res = await db.execute(q)
    return res.scalars().all()
