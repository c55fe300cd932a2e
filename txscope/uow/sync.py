"""
Blocking Unit of Work: one scope per worker thread.
"""

from contextlib import contextmanager
from typing import Iterator

from sqlmodel import Session

from txscope.database.supplier import ResourceSupplier
from txscope.exceptions.errors import CommitFailed
from .core import ExitAction, ScopeCore, ScopeState, logger


class Scope(ScopeCore[Session]):
    """Blocking scope over a SQLModel Session."""

    def __init__(self, handle: Session, supplier: ResourceSupplier):
        super().__init__(handle)
        self._supplier = supplier

    def commit(self) -> None:
        """Durably apply all work done through the handle."""
        self._check_commit()
        try:
            self._handle.commit()
        except Exception as exc:
            self._log_commit_failure(exc)
            self._discard()
            raise CommitFailed(f"Commit rejected by the store: {exc}", scope_id=self.id) from exc
        except BaseException:
            self._discard()
            raise
        self._mark(ScopeState.COMMITTED)

    def rollback(self) -> None:
        """Discard all work done through the handle."""
        if not self._needs_rollback():
            return
        try:
            self._handle.rollback()
        finally:
            self._mark(ScopeState.ROLLED_BACK)

    def flush(self) -> None:
        """Push pending changes (e.g. to get generated ids) without ending the scope."""
        self.handle().flush()

    def close(self) -> None:
        """Roll back if undecided, then release the handle exactly once."""
        if self.released:
            return
        try:
            if self.state is ScopeState.OPEN:
                self.rollback()
        finally:
            self._finish_release()
            self._supplier.release(self._handle)

    def _discard(self) -> None:
        try:
            self._handle.rollback()
        except Exception as exc:
            self._log_rollback_failure(exc)
        finally:
            self._mark(ScopeState.ROLLED_BACK)

    def __enter__(self) -> "Scope":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            action = self._exit_action(exc if exc_type is not None else None)
            if action is ExitAction.COMMIT:
                self.commit()
            elif action is ExitAction.ROLLBACK:
                try:
                    self.rollback()
                except Exception as rollback_exc:
                    # The original failure keeps propagating
                    self._log_rollback_failure(rollback_exc)
        finally:
            self.close()


class UnitOfWork:
    """Coordinates one Session across the repositories of a logical operation."""

    def __init__(self, supplier: ResourceSupplier):
        self.supplier = supplier

    def open(self) -> Scope:
        """Acquire a handle and return an open scope bound to it."""
        Scope.ensure_not_nested()
        handle = self.supplier.acquire()
        scope = Scope(handle, self.supplier)
        scope._activate()
        logger.debug(f"Scope {scope.id} opened")
        return scope

    @contextmanager
    def transaction(self) -> Iterator[Scope]:
        """Open a scope; commit on normal exit, roll back and re-raise on failure."""
        with self.open() as scope:
            yield scope
