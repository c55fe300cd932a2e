"""
Unit of Work error taxonomy.

Domain failures raised by repositories or services are not part of it; the
coordinator only rolls back and lets them propagate.
"""

from typing import Optional


class UnitOfWorkError(Exception):
    """Base class for all coordinator errors."""

    def __init__(self, message: str, scope_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.scope_id = scope_id

    def __str__(self) -> str:
        if self.scope_id:
            return f"{self.message} (scope={self.scope_id})"
        return self.message


class ResourceUnavailable(UnitOfWorkError):
    """The resource supplier could not produce a handle; no scope exists."""


class ScopeClosed(UnitOfWorkError):
    """The handle was requested after the scope reached a terminal state."""


class InvalidTransition(UnitOfWorkError):
    """A terminal operation was invoked twice or after the opposite one."""


class NestedScopeError(InvalidTransition):
    """A scope was opened while another one is active in the same context."""


class CommitFailed(UnitOfWorkError):
    """The store rejected the commit; the scope has already been rolled back."""
