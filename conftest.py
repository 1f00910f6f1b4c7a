import os
import tempfile

# Keep log files out of the package directory during tests
os.environ.setdefault("POOLSTATS_LOG_DIR", tempfile.mkdtemp(prefix="poolstats-logs-"))

import pytest
import pytest_asyncio
from sqlalchemy import func, select

from poolstats.core.config import DatabaseBackend, Settings
from poolstats.db.database import Store


def make_settings(tmp_path, **overrides) -> Settings:
    values = dict(
        DATABASE_BACKEND=DatabaseBackend.SQLITE,
        SQLITE_PATH=str(tmp_path / "stats.db"),
        STATS_API_BASE_URL="https://stats.test/api",
        FETCH_RETRY_DELAY_MS=0,
        TASK_TIMEOUT_SECONDS=5,
        INSERT_BATCH_SIZE=2,
        CRON_SECRET=None,
    )
    values.update(overrides)
    return Settings(**values)


async def count_rows(store: Store, model, *criteria) -> int:
    async with store.session() as session:
        query = select(func.count()).select_from(model)
        if criteria:
            query = query.where(*criteria)
        result = await session.execute(query)
        return result.scalar_one()


async def fetch_all(store: Store, model):
    async with store.session() as session:
        result = await session.execute(select(model).order_by(model.id))
        return list(result.scalars().all())


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest_asyncio.fixture
async def store(settings):
    store = Store.from_settings(settings)
    await store.init_models()
    yield store
    await store.close()
