"""
Resource suppliers: hand out one session per logical operation and take it back.

Suppliers know nothing about transactions. They guarantee that a handle they
return has a live connection checked out, and that releasing it twice is safe.
"""

import asyncio
from abc import ABC, abstractmethod
from contextlib import suppress
from typing import Awaitable, Callable, Generic, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session
from sqlmodel.ext.asyncio.session import AsyncSession

from txscope.exceptions.errors import ResourceUnavailable
from txscope.logging.logger import get_logger

logger = get_logger("resource_supplier")

H = TypeVar("H")

# Marker stored in Session.info once the handle went back to its source
_RELEASED_KEY = "txscope.released"


async def run_to_completion(aw: Awaitable) -> None:
    """Await cleanup I/O even if the calling task is cancelled meanwhile.

    A cancellation arriving while it runs is delivered once the cleanup is done.
    """
    task = asyncio.ensure_future(aw)
    try:
        await asyncio.shield(task)
    except asyncio.CancelledError:
        if task.done():
            raise
        await asyncio.wait({task})
        if not task.cancelled() and task.exception() is not None:
            logger.opt(exception=task.exception()).error("Cleanup failed after cancellation")
        raise


class ResourceSupplier(ABC, Generic[H]):
    """Blocking supplier contract."""

    @abstractmethod
    def acquire(self) -> H:
        """Return a new handle or raise ResourceUnavailable."""
        pass

    @abstractmethod
    def release(self, handle: H) -> None:
        """Return the handle to its source; safe to call more than once."""
        pass


class AsyncResourceSupplier(ABC, Generic[H]):
    """Cooperative supplier contract; acquire/release may suspend the caller."""

    @abstractmethod
    async def acquire(self) -> H:
        """Return a new handle or raise ResourceUnavailable."""
        pass

    @abstractmethod
    async def release(self, handle: H) -> None:
        """Return the handle to its source; safe to call more than once."""
        pass


class SessionSupplier(ResourceSupplier[Session]):
    """Supplies blocking SQLModel sessions from a sessionmaker."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory
        self.acquired = 0
        self.released = 0

    def acquire(self) -> Session:
        session = self.session_factory()
        try:
            # Check out the connection now so pool exhaustion surfaces here
            session.connection()
        except BaseException as exc:
            with suppress(SQLAlchemyError):
                session.close()
            if not isinstance(exc, (SQLAlchemyError, OSError)):
                raise
            logger.error(f"Failed to acquire database session: {exc}")
            raise ResourceUnavailable(f"Could not acquire a database connection: {exc}") from exc

        self.acquired += 1
        return session

    def release(self, handle: Session) -> None:
        if handle.info.get(_RELEASED_KEY):
            logger.debug("Session already released, skipping")
            return
        handle.info[_RELEASED_KEY] = True
        self.released += 1
        try:
            handle.close()
        except SQLAlchemyError as exc:
            logger.error(f"Failed to close database session: {exc}")
            raise


class AsyncSessionSupplier(AsyncResourceSupplier[AsyncSession]):
    """Supplies SQLModel AsyncSessions from an async sessionmaker."""

    def __init__(self, session_factory: Callable[[], AsyncSession]):
        self.session_factory = session_factory
        self.acquired = 0
        self.released = 0

    async def acquire(self) -> AsyncSession:
        session = self.session_factory()
        try:
            await session.connection()
        except BaseException as exc:
            # Cancelled or failed mid-checkout: the session still has to be closed
            with suppress(SQLAlchemyError):
                await run_to_completion(session.close())
            if not isinstance(exc, (SQLAlchemyError, OSError)):
                raise
            logger.error(f"Failed to acquire database session: {exc}")
            raise ResourceUnavailable(f"Could not acquire a database connection: {exc}") from exc

        self.acquired += 1
        return session

    async def release(self, handle: AsyncSession) -> None:
        if handle.info.get(_RELEASED_KEY):
            logger.debug("Session already released, skipping")
            return
        handle.info[_RELEASED_KEY] = True
        self.released += 1
        try:
            await run_to_completion(handle.close())
        except SQLAlchemyError as exc:
            logger.error(f"Failed to close database session: {exc}")
            raise
