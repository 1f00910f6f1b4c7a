import pytest

from conftest import make_settings
from poolstats.core.config import DatabaseBackend
from poolstats.db.database import Store


class TestSettings:

    def test_sqlite_backend_url(self, tmp_path):
        settings = make_settings(tmp_path, SQLITE_PATH="/var/lib/poolstats/stats.db")
        assert settings.database_url == "sqlite+aiosqlite:////var/lib/poolstats/stats.db"

    def test_postgres_backend_url(self, tmp_path):
        settings = make_settings(
            tmp_path,
            DATABASE_BACKEND=DatabaseBackend.POSTGRES,
            DATABASE_URL="postgresql+asyncpg://stats:stats@db:5432/stats",
        )
        assert settings.database_url == "postgresql+asyncpg://stats:stats@db:5432/stats"

    def test_backend_parsed_from_string(self, tmp_path):
        settings = make_settings(tmp_path, DATABASE_BACKEND="postgres")
        assert settings.DATABASE_BACKEND is DatabaseBackend.POSTGRES

    def test_task_timeout_disabled_with_zero(self, tmp_path):
        assert make_settings(tmp_path, TASK_TIMEOUT_SECONDS=0).task_timeout is None
        assert make_settings(tmp_path, TASK_TIMEOUT_SECONDS=30).task_timeout == 30


class TestStore:

    @pytest.mark.asyncio
    async def test_closed_store_refuses_sessions(self, settings):
        store = Store.from_settings(settings)
        await store.close()

        assert store.closed
        with pytest.raises(RuntimeError):
            store.session()

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, settings):
        store = Store.from_settings(settings)
        await store.close()
        await store.close()
        assert store.closed
