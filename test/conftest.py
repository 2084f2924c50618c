"""
Pytest configuration and fixtures for ContentHub tests
"""

import io
import os
import sys
from collections.abc import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from PIL import Image
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))  # noqa: PTH100, PTH118, PTH120

from contenthub.database import Base, get_db  # noqa: E402
from contenthub.exception_handlers import register_exception_handlers  # noqa: E402
from contenthub.middleware.logging import StructuredLoggingMiddleware  # noqa: E402
from contenthub.middleware.rate_limit import configure_rate_limiting, limiter  # noqa: E402
from contenthub.models import ClassItem, Gallery, RoleEnum, User  # noqa: E402
from contenthub.routes import admin_classes, admin_galleries, admin_news, comments, content, engagement  # noqa: E402
from utils.mocks import InMemoryStorage  # noqa: E402
from utils.tokens import create_access_token  # noqa: E402


def _enable_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture(scope="function")
async def test_engine(tmp_path):
    """
    A fresh SQLite database file per test.
    Foreign keys are switched on so ON DELETE rules behave as in PostgreSQL.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    event.listen(engine.sync_engine, "connect", _enable_foreign_keys)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture(scope="function")
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture(scope="function")
async def test_db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session for arranging data and asserting on it directly."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def app(session_factory, storage) -> FastAPI:
    """The application wired to the test database and in-memory storage."""
    application = FastAPI()
    application.add_middleware(StructuredLoggingMiddleware)
    configure_rate_limiting(application)
    register_exception_handlers(application)

    application.include_router(content.router)
    application.include_router(comments.router)
    application.include_router(engagement.router)
    application.include_router(admin_classes.router)
    application.include_router(admin_galleries.router)
    application.include_router(admin_news.router)

    application.state.storage = storage

    async def override_get_db():
        async with session_factory() as session:
            yield session

    application.dependency_overrides[get_db] = override_get_db
    return application


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# ============== Users ==============


@pytest.fixture
async def test_user(test_db: AsyncSession) -> User:
    """Create a test user with 'user' role"""
    user = User(email="reader@example.com", name="Reader", role=RoleEnum.user)
    test_db.add(user)
    await test_db.commit()
    await test_db.refresh(user)
    return user


@pytest.fixture
async def other_user(test_db: AsyncSession) -> User:
    user = User(email="other@example.com", name="Other", role=RoleEnum.user)
    test_db.add(user)
    await test_db.commit()
    await test_db.refresh(user)
    return user


@pytest.fixture
async def test_admin(test_db: AsyncSession) -> User:
    """Create a test admin user"""
    admin = User(email="admin@example.com", name="Admin", role=RoleEnum.admin)
    test_db.add(admin)
    await test_db.commit()
    await test_db.refresh(admin)
    return admin


def make_auth_headers(user: User) -> dict:
    access_token = create_access_token(user.id)
    return {"Authorization": f"Bearer {access_token}"}


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    """Generate authentication headers for test user"""
    return make_auth_headers(test_user)


@pytest.fixture
def other_auth_headers(other_user: User) -> dict:
    return make_auth_headers(other_user)


@pytest.fixture
def admin_auth_headers(test_admin: User) -> dict:
    """Generate authentication headers for test admin"""
    return make_auth_headers(test_admin)


# ============== Content ==============


@pytest.fixture
async def published_class(test_db: AsyncSession, test_admin: User) -> ClassItem:
    item = ClassItem(
        title="Intro to Layout",
        slug="intro-to-layout",
        category="design",
        content_mdx="# Layout",
        is_published=True,
        author_id=test_admin.id,
    )
    test_db.add(item)
    await test_db.commit()
    await test_db.refresh(item)
    return item


@pytest.fixture
async def published_gallery(test_db: AsyncSession, test_admin: User) -> Gallery:
    gallery = Gallery(
        title="Spring Studio",
        slug="spring-studio",
        category="studio",
        image_urls=[],
        is_published=True,
        author_id=test_admin.id,
    )
    test_db.add(gallery)
    await test_db.commit()
    await test_db.refresh(gallery)
    return gallery


def make_png(width: int = 32, height: int = 32, color: str = "red") -> bytes:
    """Encode a small PNG in memory for upload tests."""
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()
