from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from poolstats.core.config import Settings


class Store:
    """Database handle shared by every task within one process.

    Built once at startup from the resolved backend URL and passed into the
    collectors explicitly. Closing disposes the engine; a closed store refuses
    to hand out new sessions instead of reconnecting behind the caller's back.
    """

    def __init__(self, database_url: str, echo: bool = False):
        self.database_url = database_url
        self.engine = create_async_engine(
            database_url,
            echo=echo,
            future=True,
            poolclass=NullPool,
        )
        self.session_factory = async_sessionmaker(
            self.engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )
        self._closed = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "Store":
        return cls(settings.database_url, echo=settings.DEBUG)

    @property
    def closed(self) -> bool:
        return self._closed

    def session(self) -> AsyncSession:
        if self._closed:
            raise RuntimeError("Store is closed")
        return self.session_factory()

    async def init_models(self) -> None:
        """Create tables that do not exist yet"""
        # Import here so every model is registered on the metadata
        from poolstats.db.models import Base

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self.engine.dispose()


# Dependency for FastAPI
async def get_async_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    store: Store = request.app.state.store
    async with store.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
