"""
Asyncio Unit of Work: one scope per task.

Same state machine as the blocking variant; acquire, commit, rollback and
release suspend the calling task instead of blocking the thread.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlmodel.ext.asyncio.session import AsyncSession

from txscope.database.supplier import AsyncResourceSupplier, run_to_completion
from txscope.exceptions.errors import CommitFailed
from .core import ExitAction, ScopeCore, ScopeState, logger


class AsyncScope(ScopeCore[AsyncSession]):
    """Cooperative scope over a SQLModel AsyncSession."""

    def __init__(self, handle: AsyncSession, supplier: AsyncResourceSupplier):
        super().__init__(handle)
        self._supplier = supplier

    async def commit(self) -> None:
        """Durably apply all work done through the handle."""
        self._check_commit()
        try:
            await self._handle.commit()
        except Exception as exc:
            self._log_commit_failure(exc)
            await self._discard()
            raise CommitFailed(f"Commit rejected by the store: {exc}", scope_id=self.id) from exc
        except BaseException:
            # Cancelled mid-commit: outcome unknown to the caller, so discard
            await self._discard()
            raise
        self._mark(ScopeState.COMMITTED)

    async def rollback(self) -> None:
        """Discard all work done through the handle."""
        if not self._needs_rollback():
            return
        try:
            await self._handle.rollback()
        finally:
            self._mark(ScopeState.ROLLED_BACK)

    async def flush(self) -> None:
        """Push pending changes (e.g. to get generated ids) without ending the scope."""
        await self.handle().flush()

    async def close(self) -> None:
        """Roll back if undecided, then release the handle exactly once."""
        if self.released:
            return
        try:
            if self.state is ScopeState.OPEN:
                await self.rollback()
        finally:
            self._finish_release()
            # Released exactly once even if the task is cancelled mid-close
            await run_to_completion(self._supplier.release(self._handle))

    async def _discard(self) -> None:
        try:
            await self._handle.rollback()
        except Exception as exc:
            self._log_rollback_failure(exc)
        finally:
            self._mark(ScopeState.ROLLED_BACK)

    async def __aenter__(self) -> "AsyncScope":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            action = self._exit_action(exc if exc_type is not None else None)
            if action is ExitAction.COMMIT:
                await self.commit()
            elif action is ExitAction.ROLLBACK:
                try:
                    await self.rollback()
                except Exception as rollback_exc:
                    # The original failure keeps propagating
                    self._log_rollback_failure(rollback_exc)
        finally:
            await self.close()


class AsyncUnitOfWork:
    """Coordinates one AsyncSession across the repositories of a logical operation."""

    def __init__(self, supplier: AsyncResourceSupplier):
        self.supplier = supplier

    async def open(self) -> AsyncScope:
        """Acquire a handle and return an open scope bound to it."""
        AsyncScope.ensure_not_nested()
        handle = await self.supplier.acquire()
        scope = AsyncScope(handle, self.supplier)
        scope._activate()
        logger.debug(f"Scope {scope.id} opened")
        return scope

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncScope]:
        """Open a scope; commit on normal exit, roll back and re-raise on failure."""
        async with await self.open() as scope:
            yield scope
