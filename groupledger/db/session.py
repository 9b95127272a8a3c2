from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from groupledger.core.config import settings

Base = declarative_base()


def make_engine(url: str = settings.DATABASE_URL, echo: bool = settings.DB_ECHO) -> AsyncEngine:
    kwargs = {"echo": echo, "pool_pre_ping": True}
    if url.startswith("sqlite"):
        # ledger writers queue behind each other instead of failing with "database is locked"
        kwargs["connect_args"] = {"timeout": settings.SQLITE_BUSY_TIMEOUT}
    return create_async_engine(url, **kwargs)


def make_session_factory(bind: AsyncEngine):
    return sessionmaker(bind=bind, class_=AsyncSession, expire_on_commit=False)


engine = make_engine()
async_session = make_session_factory(engine)


async def get_db():
    async with async_session() as session:
        yield session
