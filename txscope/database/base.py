from abc import ABC, abstractmethod

class BaseDatabaseDriver(ABC):
    @abstractmethod
    async def connect(self):
        pass

    @abstractmethod
    async def disconnect(self):
        pass

    @abstractmethod
    def supplier(self):
        """Return the resource supplier handing out this driver's sessions."""
        pass


class BaseSyncDatabaseDriver(ABC):
    """Blocking counterpart for drivers used by thread-per-scope callers."""

    @abstractmethod
    def connect(self):
        pass

    @abstractmethod
    def disconnect(self):
        pass

    @abstractmethod
    def supplier(self):
        """Return the resource supplier handing out this driver's sessions."""
        pass
