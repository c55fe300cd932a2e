"""
Unit of Work: binds one session to one logical operation and decides its outcome.
"""

from .aio import AsyncScope, AsyncUnitOfWork
from .core import ScopeState, active_scope
from .sync import Scope, UnitOfWork

__all__ = [
    "AsyncScope",
    "AsyncUnitOfWork",
    "Scope",
    "ScopeState",
    "UnitOfWork",
    "active_scope",
]
