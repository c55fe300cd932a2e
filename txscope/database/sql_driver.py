from sqlalchemy import create_engine, text
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import Session
from sqlmodel.ext.asyncio.session import AsyncSession
from txscope.config import settings
from .base import BaseDatabaseDriver, BaseSyncDatabaseDriver
from .supplier import AsyncSessionSupplier, SessionSupplier


def engine_options(url: str) -> dict:
    """Engine keyword arguments from settings; sqlite takes no pool sizing."""
    options = {"echo": settings.DB_ECHO}
    if not url.startswith("sqlite"):
        options.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_pre_ping=True,
        )
    return options


class SQLDriver(BaseDatabaseDriver):
    """Async engine plus the supplier the cooperative Unit of Work draws from."""

    def __init__(self, url: str, **engine_kwargs):
        self.engine = create_async_engine(url, **(engine_kwargs or engine_options(url)))
        self.session_factory = sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )
        self._supplier = AsyncSessionSupplier(self.session_factory)

    async def connect(self):
        """Check the database is reachable."""
        async with self.engine.begin() as conn:
            await conn.execute(text("SELECT 1"))

    async def disconnect(self):
        """Dispose the engine's pool."""
        await self.engine.dispose()

    def supplier(self) -> AsyncSessionSupplier:
        return self._supplier


class SyncSQLDriver(BaseSyncDatabaseDriver):
    """Blocking engine plus the supplier for thread-per-scope callers."""

    def __init__(self, url: str, **engine_kwargs):
        self.engine = create_engine(url, **(engine_kwargs or engine_options(url)))
        self.session_factory = sessionmaker(
            self.engine, class_=Session, expire_on_commit=False
        )
        self._supplier = SessionSupplier(self.session_factory)

    def connect(self):
        with self.engine.begin() as conn:
            conn.execute(text("SELECT 1"))

    def disconnect(self):
        self.engine.dispose()

    def supplier(self) -> SessionSupplier:
        return self._supplier
