import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from tests.fixtures.json_loader import TestDataLoader
from logify.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from logify.api.app import create_app
from logify.api.utils.jwt import generate_jwt
from logify.depends import get_unit_of_work
import logify.domain.entities  # noqa: F401  registers the log tables


@pytest.fixture
def test_data():
    return TestDataLoader()


@pytest.fixture
def admin_headers():
    """Headers the host site sends with observations and maintenance calls"""
    return {"X-Admin-API-Key": ApplicationConfig.ADMIN_API_KEY}


@pytest.fixture
def reader_headers():
    """Builds bearer headers for a log reader"""

    def build(user_id: int = 1, role: str = "administrator"):
        return {"Authorization": f"Bearer {generate_jwt(user_id, role)}"}

    return build


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///./test.db")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with Session() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session):
    app = create_app(ApplicationConfig)

    async def override_get_unit_of_work():
        yield SqlAlchemyUnitOfWork(db_session)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
