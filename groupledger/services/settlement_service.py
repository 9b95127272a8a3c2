from sqlalchemy.ext.asyncio import AsyncSession

from groupledger.core.utils import net_for_viewer, simplify_debts
from groupledger.schemas.balances import CounterpartyBalance, Transfer
from groupledger.services.group_services import list_group_for_user
from groupledger.services.ledger import ensure_group_member


async def get_settlement_plan(db: AsyncSession, group_id: int, user_id: int):
    # a plain read of the current snapshot, no lock taken
    group = await ensure_group_member(db, group_id, user_id)

    return [
        Transfer(from_user=from_user, to_user=to_user, amount=amount)
        for from_user, to_user, amount in simplify_debts(group.balances())
    ]


async def get_aggregated_balances(db: AsyncSession, user_id: int):
    """
    Net position of the user against everyone they share a group with.

    Each group is settled on its own first; only the transfers that touch
    the user are then merged per counterparty.
    """
    groups = await list_group_for_user(db, user_id)

    per_group = [
        ([m.user_id for m in group.members], simplify_debts(group.balances()))
        for group in sorted(groups, key=lambda g: g.id)
    ]

    return [
        CounterpartyBalance(user_id=uid, balance=balance)
        for uid, balance in net_for_viewer(user_id, per_group)
    ]
