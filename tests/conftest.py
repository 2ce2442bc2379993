"""Test fixtures for the URL shortener application."""

import asyncio
import os
import tempfile

# Settings are read at import time, so the environment is prepared first
os.environ["ENVIRONMENT"] = "testing"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["DB_CREATE_TABLES"] = "false"
os.environ["OTEL_ENABLED"] = "false"
os.environ["DEBUG"] = "false"
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="shortener-test-logs-")

import pytest
import pytest_asyncio
from typing import AsyncGenerator, Generator
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from shortener.db.base import create_tables
from shortener.db.session import get_db
from shortener.main import app as main_app
from shortener.repositories.url_repository import URLRepository

# Test database URL - using SQLite in-memory
TEST_SQLALCHEMY_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def test_engine():
    """Create test database engine with in-memory SQLite."""
    engine = create_async_engine(
        TEST_SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )
    await create_tables(engine)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def test_db(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create isolated test database session."""
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )

    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()


@pytest.fixture
def url_repository() -> URLRepository:
    """Return URL repository instance."""
    return URLRepository()


@pytest.fixture
def api_engine(tmp_path):
    """File-backed engine for HTTP tests.

    TestClient runs the app on its own event loop, so connections are not
    pooled across loops.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'api.db'}",
        connect_args={"check_same_thread": False},
        poolclass=NullPool,
    )
    asyncio.run(create_tables(engine))
    return engine


@pytest.fixture
def api_session_factory(api_engine):
    return async_sessionmaker(bind=api_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def override_get_db(api_session_factory):
    """Override the get_db dependency for testing."""
    async def _override_get_db():
        async with api_session_factory() as session:
            yield session

    return _override_get_db


@pytest.fixture
def test_app(override_get_db) -> Generator[FastAPI, None, None]:
    """FastAPI app with the database dependency pointed at the test engine."""
    app = main_app
    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(test_app) -> Generator[TestClient, None, None]:
    """Return FastAPI TestClient instance."""
    with TestClient(test_app) as test_client:
        yield test_client
