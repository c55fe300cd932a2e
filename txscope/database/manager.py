from .sql_driver import SQLDriver, SyncSQLDriver

class DatabaseManager:
    _instance = None

    def __init__(self, settings):
        self.sql = SQLDriver(settings.DATABASE_URL)
        self._sync_url = settings.SYNC_DATABASE_URL
        self._sync_sql = None

    @property
    def sync_sql(self) -> SyncSQLDriver:
        # Built on first use so async-only deployments never load the blocking driver
        if self._sync_sql is None:
            self._sync_sql = SyncSQLDriver(self._sync_url)
        return self._sync_sql

    @classmethod
    def get_instance(cls, settings=None):
        if cls._instance is None:
            if settings is None:
                from txscope.config import settings as app_settings
                settings = app_settings
            cls._instance = cls(settings)
        return cls._instance

    @classmethod
    async def shutdown(cls):
        """Dispose engines and forget the instance."""
        if cls._instance is None:
            return
        await cls._instance.sql.disconnect()
        if cls._instance._sync_sql is not None:
            cls._instance._sync_sql.disconnect()
        cls._instance = None
