"""
State machine shared by the blocking and the asyncio scopes.

Subclasses only perform the I/O (commit, rollback, release), blocking or
awaited; every decision about what is allowed lives here.
"""

import enum
import uuid
from contextvars import ContextVar
from typing import Any, Dict, Generic, Optional, Type, TypeVar

from txscope.exceptions.errors import InvalidTransition, NestedScopeError, ScopeClosed
from txscope.logging.logger import get_logger

logger = get_logger("unit_of_work")

H = TypeVar("H")
R = TypeVar("R")

# Scope currently open in this thread / task
_active_scope: ContextVar[Optional["ScopeCore"]] = ContextVar("active_uow_scope", default=None)


class ScopeState(str, enum.Enum):
    OPEN = "open"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"

    @property
    def is_terminal(self) -> bool:
        return self is not ScopeState.OPEN


class ExitAction(enum.Enum):
    COMMIT = "commit"
    ROLLBACK = "rollback"
    NONE = "none"


def active_scope() -> Optional["ScopeCore"]:
    """Return the scope open in the current context, if any."""
    scope = _active_scope.get()
    if scope is not None and scope.released:
        return None
    return scope


class ScopeCore(Generic[H]):
    """One handle bound to one logical operation, plus its terminal state."""

    def __init__(self, handle: H):
        self.id = uuid.uuid4().hex[:8]
        self.state = ScopeState.OPEN
        self.released = False
        self._handle = handle
        self._repositories: Dict[Type[Any], Any] = {}

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id} state={self.state.value} released={self.released}>"

    # --- nesting ---

    @staticmethod
    def ensure_not_nested() -> None:
        current = active_scope()
        if current is not None:
            raise NestedScopeError(
                "A Unit of Work scope is already active in this context",
                scope_id=current.id,
            )

    def _activate(self) -> None:
        _active_scope.set(self)

    def _deactivate(self) -> None:
        if _active_scope.get() is self:
            _active_scope.set(None)

    # --- collaborator access ---

    def handle(self) -> H:
        """Return the bound session for repositories."""
        if self.released or self.state.is_terminal:
            raise ScopeClosed(
                f"Scope is {self.state.value}; its session can no longer be used",
                scope_id=self.id,
            )
        return self._handle

    def get_repository(self, repo_class: Type[R]) -> R:
        """Get or create a repository bound to this scope (cached per scope)."""
        self.handle()
        if repo_class not in self._repositories:
            self._repositories[repo_class] = repo_class(self)
        return self._repositories[repo_class]

    # --- transition checks ---

    def _check_commit(self) -> None:
        if self.state is ScopeState.COMMITTED:
            raise InvalidTransition("Scope has already been committed", scope_id=self.id)
        if self.state is ScopeState.ROLLED_BACK:
            raise InvalidTransition("Cannot commit a rolled back scope", scope_id=self.id)

    def _needs_rollback(self) -> bool:
        """False when already rolled back; rollback is idempotent."""
        if self.state is ScopeState.COMMITTED:
            raise InvalidTransition("Cannot roll back a committed scope", scope_id=self.id)
        return self.state is ScopeState.OPEN

    def _mark(self, state: ScopeState) -> None:
        self.state = state
        logger.debug(f"Scope {self.id} {state.value}")

    def _exit_action(self, exc: Optional[BaseException]) -> ExitAction:
        """Decide by outcome: commit on normal exit, roll back on any failure."""
        if exc is None:
            return ExitAction.COMMIT if self.state is ScopeState.OPEN else ExitAction.NONE

        if self.state is ScopeState.OPEN:
            logger.debug(f"Scope {self.id} exiting with {type(exc).__name__}, rolling back")
            return ExitAction.ROLLBACK
        if self.state is ScopeState.COMMITTED:
            logger.warning(
                f"Scope {self.id} failed with {type(exc).__name__} after commit; committed work is kept"
            )
        return ExitAction.NONE

    def _log_commit_failure(self, exc: BaseException) -> None:
        logger.error(f"Scope {self.id} commit rejected by store, rolling back: {exc}")

    def _log_rollback_failure(self, exc: BaseException) -> None:
        logger.opt(exception=exc).error(
            f"Scope {self.id} rollback failed; session will be discarded on release"
        )

    def _finish_release(self) -> None:
        self.released = True
        self._deactivate()
        logger.debug(f"Scope {self.id} released ({self.state.value})")
