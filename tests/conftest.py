import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from opcc.auth import Identity, get_current_user
from opcc.db.database import get_session
from opcc.main import app
from opcc.models.db import Base, CardDB, UserDB


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def session(async_engine) -> AsyncSession:
    """Provide a database session for tests."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture
async def seeded_session(session: AsyncSession) -> AsyncSession:
    """A session with two users and a few catalog cards committed."""
    session.add_all(
        [
            UserDB(id=1, email="nami@example.com", name="nami", role="Admin"),
            UserDB(id=2, email="usopp@example.com", name="usopp", role="Normal User"),
            CardDB(id="ST01-001", card_code="ST01-001", name="Monkey.D.Luffy", color="Red"),
            CardDB(id="ST01-013", card_code="ST01-013", name="Roronoa Zoro", color="Red"),
            CardDB(id="ST01-013_p1", card_code="ST01-013", name="Roronoa Zoro", color="Red"),
        ]
    )
    await session.commit()
    return session


@pytest.fixture
def identity() -> Identity:
    """The authenticated caller used by API tests."""
    return Identity(id=1, email="nami@example.com", name="nami", role="Admin")


@pytest.fixture
async def client(async_engine, identity: Identity):
    """Provide an async test client with overridden database session and identity."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_session():
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def override_get_current_user() -> Identity:
        return identity

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_current_user] = override_get_current_user

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
