"""
Shared fixtures: in-memory SQLite with foreign keys and SAVEPOINT support,
profile factories, and an authenticated HTTP client.
"""

from __future__ import annotations

import os

# The app builds its engine and settings at import time.
os.environ.setdefault("KEEPER_DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("KEEPER_JWT_SECRET", "test-secret-test-secret-test-secret-0123")
os.environ.setdefault("KEEPER_LOG_FORMAT", "text")

import uuid  # noqa: E402
from typing import Optional  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402

from app import models  # noqa: E402,F401
from app.core.auth import create_jwt  # noqa: E402
from app.core.database import get_session  # noqa: E402
from app.main import app  # noqa: E402
from app.models.user import Profile  # noqa: E402


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # pysqlite's own transaction handling breaks SAVEPOINT; take it over.
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    """A single session for service-level tests. Never committed."""
    async with session_factory() as session:
        yield session


def _profile(
    email: Optional[str],
    first_name: str,
    last_name: str,
    is_superadmin: bool,
) -> Profile:
    return Profile(
        id=uuid.uuid4(),
        email=email or f"user-{uuid.uuid4().hex[:8]}@example.com",
        first_name=first_name,
        last_name=last_name,
        full_name=f"{first_name} {last_name}",
        is_superadmin=is_superadmin,
    )


@pytest.fixture
def make_profile(session):
    """Add a profile through the test's session."""

    async def _make(
        email: Optional[str] = None,
        first_name: str = "Test",
        last_name: str = "User",
        is_superadmin: bool = False,
    ) -> Profile:
        profile = _profile(email, first_name, last_name, is_superadmin)
        session.add(profile)
        await session.flush()
        return profile

    return _make


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

@pytest.fixture
async def client(session_factory):
    """HTTP client whose requests each run in their own committed session."""

    async def _override_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = _override_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def create_user(session_factory):
    """Commit a profile and return ``(profile, auth_headers)``."""

    async def _create(
        email: Optional[str] = None,
        first_name: str = "Test",
        last_name: str = "User",
        is_superadmin: bool = False,
    ) -> tuple[Profile, dict]:
        profile = _profile(email, first_name, last_name, is_superadmin)
        async with session_factory() as s:
            s.add(profile)
            await s.commit()
        return profile, auth_headers_for(profile)

    return _create


def auth_headers_for(profile: Profile) -> dict:
    return {"Authorization": f"Bearer {create_jwt(profile.id, profile.email)}"}
