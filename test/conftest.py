"""
Pytest configuration and fixtures for RestMeta tests

Every test gets a fresh in-memory SQLite database, a fresh field registry
and an app built around both.
"""

import os
import sys
from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))  # noqa: PTH100, PTH118, PTH120

from main import create_app  # noqa: E402
from restmeta.auth import hash_password  # noqa: E402
from restmeta.config import settings  # noqa: E402
from restmeta.database import Base, get_db  # noqa: E402
from restmeta.fields.custom_meta import register_custom_meta  # noqa: E402
from restmeta.fields.registry import FieldRegistry  # noqa: E402
from restmeta.models.user import Role, RoleEnum, User  # noqa: E402
from restmeta.services.post_service import create_post  # noqa: E402
from utils.mock_utils import PASSWORD  # noqa: E402

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

# One bcrypt hash shared by every fixture user
PASSWORD_HASH = hash_password(PASSWORD)


@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    if TEST_DATABASE_URL.startswith("sqlite"):
        # In-memory SQLite lives as long as its single connection
        engine = create_async_engine(
            TEST_DATABASE_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_async_engine(TEST_DATABASE_URL, pool_pre_ping=True)
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with factory() as session:
        for role in RoleEnum:
            session.add(Role(name=role.value, permissions=[]))
        await session.commit()

    yield factory

    await engine.dispose()


@pytest.fixture
async def test_db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


async def _make_user(db: AsyncSession, username: str, role_name: str) -> User:
    from sqlalchemy.future import select
    from sqlalchemy.orm import selectinload

    result = await db.execute(select(Role).where(Role.name == role_name))
    role = result.scalars().first()

    user = User(
        username=username,
        email=f"{username}@example.com",
        hashed_password=PASSWORD_HASH,
        role_id=role.id,
    )
    db.add(user)
    await db.commit()

    # Load the role eagerly; lazy loads are not available on async sessions
    result = await db.execute(
        select(User).options(selectinload(User.role)).where(User.id == user.id).execution_options(populate_existing=True)
    )
    return result.scalars().first()


@pytest.fixture
async def test_author(test_db: AsyncSession) -> User:
    return await _make_user(test_db, "author", "author")


@pytest.fixture
async def other_author(test_db: AsyncSession) -> User:
    return await _make_user(test_db, "otherauthor", "author")


@pytest.fixture
async def test_editor(test_db: AsyncSession) -> User:
    return await _make_user(test_db, "editor", "editor")


@pytest.fixture
async def test_subscriber(test_db: AsyncSession) -> User:
    return await _make_user(test_db, "subscriber", "subscriber")


@pytest.fixture
async def test_admin(test_db: AsyncSession) -> User:
    return await _make_user(test_db, "admin", "admin")


@pytest.fixture
async def test_post(test_db: AsyncSession, test_author: User):
    """Post #42, written by test_author."""
    post = await create_post(test_db, author=test_author, title="Hello", body="<p>First post</p>", post_id=42)
    await test_db.commit()
    return post


@pytest.fixture
def registry() -> FieldRegistry:
    """Fresh registry carrying the default custom_meta field."""
    reg = FieldRegistry()
    register_custom_meta(reg, settings)
    return reg


@pytest.fixture
def app(session_factory, registry):
    application = create_app(registry=registry)

    async def _override_get_db():
        async with session_factory() as session:
            yield session

    application.dependency_overrides[get_db] = _override_get_db
    return application


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
