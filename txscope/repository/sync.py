"""
Blocking counterpart of BaseRepository for thread-per-scope callers.
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar, Optional, List, Type
from sqlmodel import SQLModel, Session, select, func
from txscope.uow.sync import Scope

T = TypeVar("T", bound=SQLModel)


class ISyncRepository(ABC, Generic[T]):
    """Blocking repository interface; same data access API as IRepository."""

    @abstractmethod
    def get_by_id(self, id: int) -> Optional[T]:
        pass

    @abstractmethod
    def get_all(self, limit: int = 100, offset: int = 0) -> List[T]:
        pass

    @abstractmethod
    def create(self, entity: T) -> T:
        pass

    @abstractmethod
    def update(self, entity: T) -> T:
        pass

    @abstractmethod
    def delete(self, id: int) -> bool:
        pass


class SyncRepository(ISyncRepository[T]):
    """Generic CRUD over a blocking scope's Session."""

    def __init__(self, scope: Scope, model: Type[T]):
        self.scope = scope
        self.model = model

    @property
    def session(self) -> Session:
        return self.scope.handle()

    def _filtered(self, statement, filters: dict):
        for key, value in filters.items():
            if hasattr(self.model, key):
                statement = statement.where(getattr(self.model, key) == value)
        return statement

    def get_by_id(self, id: int) -> Optional[T]:
        return self.session.get(self.model, id)

    def get_all(self, limit: int = 100, offset: int = 0) -> List[T]:
        statement = select(self.model).limit(limit).offset(offset)
        return list(self.session.exec(statement).all())

    def create(self, entity: T) -> T:
        self.session.add(entity)
        return entity

    def update(self, entity: T) -> T:
        self.session.add(entity)
        return entity

    def delete(self, id: int) -> bool:
        entity = self.get_by_id(id)
        if entity:
            self.session.delete(entity)
            return True
        return False

    def find_one(self, **filters) -> Optional[T]:
        statement = self._filtered(select(self.model), filters)
        return self.session.exec(statement).first()

    def find_all(self, **filters) -> List[T]:
        statement = self._filtered(select(self.model), filters)
        return list(self.session.exec(statement).all())

    def count(self, **filters) -> int:
        statement = self._filtered(select(func.count()).select_from(self.model), filters)
        return self.session.exec(statement).one()
