import pytest
from httpx import ASGITransport, AsyncClient

from groupledger.core.dependencies import get_db
from groupledger.core.security import create_access_token
from groupledger.db.base import init_models
from groupledger.db.session import make_engine, make_session_factory
from groupledger.main import app
from groupledger.services.group_services import create_group

ALICE, BOB, CAROL, DAVE = 1, 2, 3, 4


@pytest.fixture
async def engine(tmp_path):
    engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def trio(db):
    """Alice's group with Bob and Carol, everyone at zero."""
    group = await create_group(db, "Flat 4B", ALICE, members=[BOB, CAROL])
    return group.id


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def auth():
    def headers(user_id):
        return {"Authorization": f"Bearer {create_access_token(user_id)}"}
    return headers
