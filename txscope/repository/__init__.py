"""
Repository pattern: data access abstraction, decouples service layer from database session.

Repositories reach the session through a Unit of Work scope and never commit,
roll back or close it themselves.
"""

from .base import BaseRepository, IRepository
from .sync import ISyncRepository, SyncRepository

__all__ = ["BaseRepository", "IRepository", "ISyncRepository", "SyncRepository"]
