"""
Pytest configuration and fixtures for ComplyArk API tests
"""
import pytest
from contextlib import asynccontextmanager
from typing import AsyncGenerator
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from complyark.main import app
from complyark.core.records import Organisation, User, UserRole
from complyark.db.database import Base
from complyark.db import models  # noqa: F401
from complyark.db.store import CaseStore, InMemoryCaseStore, SqlCaseStore, get_store
from complyark.db.store.seed import seed_reference_data
from complyark.middleware.rate_limiting import limiter

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

SYSTEM_ADMIN_ID = 1
ACME_ADMIN_ID = 2
ACME_USER_ID = 3
GLOBEX_ADMIN_ID = 4
INACTIVE_USER_ID = 5

ACME_ID = 1
GLOBEX_ID = 2


@pytest.fixture(autouse=True)
def disable_rate_limits():
    limiter.enabled = False
    yield
    limiter.enabled = True


async def seed_tenants(store: CaseStore) -> None:
    """Two organisations, their staff and one system administrator"""
    async with store.atomic():
        await store.add_organisation(Organisation(id=ACME_ID, business_name="Acme", industry_id=1))
        await store.add_organisation(Organisation(id=GLOBEX_ID, business_name="Globex", industry_id=2))

        await store.add_user(User(
            id=SYSTEM_ADMIN_ID, first_name="Sys", last_name="Admin", email="sys@complyark.local",
            role=UserRole.ADMIN, organisation_id=0,
        ))
        await store.add_user(User(
            id=ACME_ADMIN_ID, first_name="Alice", last_name="Admin", email="alice@acme.test",
            role=UserRole.ADMIN, organisation_id=ACME_ID,
        ))
        await store.add_user(User(
            id=ACME_USER_ID, first_name="Bob", last_name="Staff", email="bob@acme.test",
            role=UserRole.USER, organisation_id=ACME_ID,
        ))
        await store.add_user(User(
            id=GLOBEX_ADMIN_ID, first_name="Gina", last_name="Admin", email="gina@globex.test",
            role=UserRole.ADMIN, organisation_id=GLOBEX_ID,
        ))
        await store.add_user(User(
            id=INACTIVE_USER_ID, first_name="Ian", last_name="Gone", email="ian@acme.test",
            role=UserRole.USER, organisation_id=ACME_ID, is_active=False,
        ))


@pytest.fixture
async def memory_store() -> InMemoryCaseStore:
    """Fresh in-memory store with the catalogue and two tenants"""
    store = InMemoryCaseStore()
    await seed_tenants(store)
    return store


@asynccontextmanager
async def open_sql_store() -> AsyncGenerator[SqlCaseStore, None]:
    """SQL store on a private in-memory SQLite database"""
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        store = SqlCaseStore(session)
        await seed_reference_data(store)
        await seed_tenants(store)
        yield store

    await engine.dispose()


@pytest.fixture
async def sql_store() -> AsyncGenerator[SqlCaseStore, None]:
    async with open_sql_store() as store:
        yield store


@pytest.fixture(params=["memory", "sql"])
async def store(request) -> AsyncGenerator[CaseStore, None]:
    """Runs a test once per store backend"""
    if request.param == "memory":
        memory = InMemoryCaseStore()
        await seed_tenants(memory)
        yield memory
    else:
        async with open_sql_store() as sql:
            yield sql


@pytest.fixture
async def client(memory_store: InMemoryCaseStore) -> AsyncGenerator[AsyncClient, None]:
    """Test client with the store dependency pointed at a fresh memory store"""

    async def override_get_store():
        yield memory_store

    app.dependency_overrides[get_store] = override_get_store

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def as_user(user_id: int) -> dict:
    """Identity header for a staff user"""
    return {"X-User-Id": str(user_id)}


@pytest.fixture
def submission_data() -> dict:
    return {
        "first_name": "Priya",
        "last_name": "Raman",
        "email": "priya@example.com",
        "phone": "9876543210",
        "comments": "Please send me a copy of my data",
    }
