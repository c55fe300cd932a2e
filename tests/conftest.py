"""Test config and shared fixtures."""
import asyncio
import os

# Settings are read at import time; keep test runs off the MySQL defaults and the log dir
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SYNC_DATABASE_URL_OVERRIDE", "sqlite://")

import pytest
from typing import AsyncGenerator, Generator
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import apps.models  # noqa: F401  registers tables in SQLModel.metadata
from txscope.database.supplier import (
    AsyncResourceSupplier,
    AsyncSessionSupplier,
    ResourceSupplier,
    SessionSupplier,
)
from txscope.exceptions.errors import ResourceUnavailable
from txscope.uow import AsyncUnitOfWork, UnitOfWork


# In-memory SQLite for tests
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_SYNC_DATABASE_URL = "sqlite://"


# --- Fakes recording what the coordinator does to its handle ---

class FakeHandle:
    """Stands in for a Session: pending writes become durable only on commit."""

    def __init__(self, fail_commit: bool = False, fail_rollback: bool = False):
        self.fail_commit = fail_commit
        self.fail_rollback = fail_rollback
        self.calls = []
        self.pending = []
        self.durable = []

    def add(self, item):
        self.pending.append(item)

    def flush(self):
        self.calls.append("flush")

    def commit(self):
        self.calls.append("commit")
        if self.fail_commit:
            raise OperationalError("COMMIT", {}, Exception("disk I/O error"))
        self.durable.extend(self.pending)
        self.pending.clear()

    def rollback(self):
        self.calls.append("rollback")
        self.pending.clear()
        if self.fail_rollback:
            raise OperationalError("ROLLBACK", {}, Exception("connection lost"))

    def close(self):
        self.calls.append("close")


class AsyncFakeHandle(FakeHandle):
    """Async flavour; every I/O method yields to the event loop at least once.

    commit_delay / close_delay hold the task inside commit() / close() so a test
    can cancel it there; the *_started events fire as the call begins.
    """

    def __init__(self, fail_commit=False, fail_rollback=False, commit_delay=0.0, close_delay=0.0):
        super().__init__(fail_commit, fail_rollback)
        self.commit_delay = commit_delay
        self.close_delay = close_delay
        self.commit_started = asyncio.Event()
        self.close_started = asyncio.Event()

    async def flush(self):
        await asyncio.sleep(0)
        super().flush()

    async def commit(self):
        self.commit_started.set()
        await asyncio.sleep(self.commit_delay)
        super().commit()

    async def rollback(self):
        await asyncio.sleep(0)
        super().rollback()

    async def close(self):
        self.close_started.set()
        await asyncio.sleep(self.close_delay)
        super().close()


class FakeSupplier(ResourceSupplier):
    def __init__(self):
        self.unavailable = False
        self.fail_commit = False
        self.fail_rollback = False
        self.handles = []
        self.released = []

    def acquire(self):
        if self.unavailable:
            raise ResourceUnavailable("connection pool exhausted")
        handle = FakeHandle(self.fail_commit, self.fail_rollback)
        self.handles.append(handle)
        return handle

    def release(self, handle):
        self.released.append(handle)
        handle.close()


class AsyncFakeSupplier(AsyncResourceSupplier):
    def __init__(self):
        self.unavailable = False
        self.fail_commit = False
        self.fail_rollback = False
        self.commit_delay = 0.0
        self.close_delay = 0.0
        self.handles = []
        self.released = []

    async def acquire(self):
        await asyncio.sleep(0)
        if self.unavailable:
            raise ResourceUnavailable("connection pool exhausted")
        handle = AsyncFakeHandle(
            self.fail_commit, self.fail_rollback, self.commit_delay, self.close_delay
        )
        self.handles.append(handle)
        return handle

    async def release(self, handle):
        self.released.append(handle)
        await handle.close()


@pytest.fixture
def fake_supplier() -> FakeSupplier:
    return FakeSupplier()


@pytest.fixture
def fake_uow(fake_supplier: FakeSupplier) -> UnitOfWork:
    return UnitOfWork(fake_supplier)


@pytest.fixture
def async_fake_supplier() -> AsyncFakeSupplier:
    return AsyncFakeSupplier()


@pytest.fixture
def async_fake_uow(async_fake_supplier: AsyncFakeSupplier) -> AsyncUnitOfWork:
    return AsyncUnitOfWork(async_fake_supplier)


# --- Real SQLite-backed stores ---

@pytest.fixture
def sync_engine() -> Generator:
    engine = create_engine(
        TEST_SYNC_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def sync_supplier(sync_engine) -> SessionSupplier:
    return SessionSupplier(sessionmaker(sync_engine, class_=Session, expire_on_commit=False))


@pytest.fixture
def sync_uow(sync_supplier: SessionSupplier) -> UnitOfWork:
    return UnitOfWork(sync_supplier)


@pytest.fixture
async def async_engine() -> AsyncGenerator:
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def async_supplier(async_engine) -> AsyncSessionSupplier:
    return AsyncSessionSupplier(
        sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    )


@pytest.fixture
def async_uow(async_supplier: AsyncSessionSupplier) -> AsyncUnitOfWork:
    return AsyncUnitOfWork(async_supplier)


# --- HTTP ---

@pytest.fixture
async def client(async_uow: AsyncUnitOfWork) -> AsyncGenerator[AsyncClient, None]:
    """Create test client wired to the in-memory store."""
    from main import app
    from apps.identity.api.router import get_uow

    app.dependency_overrides[get_uow] = lambda: async_uow

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
