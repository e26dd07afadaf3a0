import os

# Point settings at an in-memory database and disable the language model before the app is imported.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["OPENAI_API_KEY"] = ""
os.environ["APP_ENV"] = "test"

import random
from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.api.dependencies import get_synthesizer
from app.db.base import Base
from app.db.session import get_session
from app.main import app
from app.services.recipe_synthesizer import RecipeSynthesizer

PASSWORD = "correct-horse-battery"


@pytest.fixture
async def engine():
    """Fresh in-memory schema per test."""
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def synthesizer() -> RecipeSynthesizer:
    """Synthesizer without a model, so every recipe comes from the seeded fallback."""
    return RecipeSynthesizer(llm=None, backup_llm=None, rng=random.Random(7))


@pytest.fixture
async def async_client(session_factory, synthesizer) -> AsyncGenerator[AsyncClient, None]:
    """Yield an HTTPX async test client bound to the test database."""

    async def _get_test_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = _get_test_session
    app.dependency_overrides[get_synthesizer] = lambda: synthesizer
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        yield client
    app.dependency_overrides.clear()


async def signup_and_login(client: AsyncClient, email: str = "cook@example.com", name: str = "Cook") -> int:
    response = await client.post(
        "/api/v1/auth/signup",
        json={"name": name, "email": email, "password": PASSWORD},
    )
    assert response.status_code == 201, response.text
    login = await client.post("/api/v1/auth/login", json={"email": email, "password": PASSWORD})
    assert login.status_code == 200, login.text
    return login.json()["user_id"]


@pytest.fixture
async def logged_in_client(async_client) -> AsyncClient:
    await signup_and_login(async_client)
    return async_client


@pytest.fixture
def login_as(async_client):
    """Sign up and log in another user on the shared client; returns the user id."""

    async def _login_as(email: str, name: str = "Cook") -> int:
        await async_client.post("/api/v1/auth/logout")
        return await signup_and_login(async_client, email=email, name=name)

    return _login_as
