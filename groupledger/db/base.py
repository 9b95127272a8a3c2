# Importing the models registers their tables on Base.metadata.
from groupledger.db.session import Base  # noqa: F401
from groupledger.models.group import Group  # noqa: F401
from groupledger.models.group_member import GroupMember  # noqa: F401
from groupledger.models.expense import Expense  # noqa: F401
from groupledger.models.expense_split import ExpenseSplit  # noqa: F401
from groupledger.models.payment import Payment  # noqa: F401
from groupledger.models.activity import Activity  # noqa: F401


async def init_models(engine):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
