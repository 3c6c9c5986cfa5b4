import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("ENV", "test")

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

import medbook.models  # noqa: F401 - register tables
from medbook.services.reconciliation import trackers
from medbook.store.gateway import DOCTORS, USERS, SqlStoreGateway


@pytest_asyncio.fixture
async def session():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with maker() as s:
        yield s
    await engine.dispose()


@pytest_asyncio.fixture
async def fk_session():
    """Like ``session`` but with SQLite foreign-key enforcement on, as on Postgres."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with maker() as s:
        yield s
    await engine.dispose()


@pytest.fixture
def gateway(session):
    return SqlStoreGateway(session)


@pytest_asyncio.fixture
async def patient_id(gateway):
    return await gateway.insert(
        USERS, {"email": "pat@example.com", "first_name": "Pat", "last_name": "Jones"}
    )


@pytest_asyncio.fixture
async def other_patient_id(gateway):
    return await gateway.insert(
        USERS, {"email": "sam@example.com", "first_name": "Sam", "last_name": "Lee"}
    )


@pytest_asyncio.fixture
async def doctor_id(gateway):
    return await gateway.insert(
        DOCTORS, {"email": "house@example.com", "first_name": "Greg", "last_name": "House"}
    )


@pytest_asyncio.fixture
async def other_doctor_id(gateway):
    return await gateway.insert(
        DOCTORS, {"email": "grey@example.com", "first_name": "Meredith", "last_name": "Grey"}
    )


@pytest.fixture(autouse=True)
def _fresh_trackers():
    trackers.reset()
    yield
    trackers.reset()
