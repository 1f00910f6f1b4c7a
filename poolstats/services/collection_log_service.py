from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from poolstats.db.database import Store
from poolstats.logs import debug_logger
from poolstats.models.collection_log import CollectionLog, CollectionStatus, TaskType


class CollectionLogService:
    """Append-only outcome records of collection tasks"""

    @staticmethod
    async def write(
        store: Store,
        task_type: TaskType,
        status: CollectionStatus,
        records_count: Optional[int] = None,
        error_message: Optional[str] = None,
        execution_time_ms: int = 0,
    ) -> CollectionLog:
        """Append one row in a session of its own, independent of the task's transaction"""
        entry = CollectionLog(
            task_type=TaskType(task_type).value,
            status=CollectionStatus(status).value,
            records_count=records_count,
            error_message=error_message,
            execution_time_ms=execution_time_ms,
        )
        async with store.session() as session:
            session.add(entry)
            await session.commit()
        debug_logger.debug(f"Collection log written: {entry.task_type} {entry.status} ({execution_time_ms} ms)")
        return entry

    @staticmethod
    async def get_recent(
        db: AsyncSession,
        limit: int = 50,
        task_type: Optional[TaskType] = None,
    ) -> List[CollectionLog]:
        query = select(CollectionLog)
        if task_type is not None:
            query = query.where(CollectionLog.task_type == TaskType(task_type).value)
        query = query.order_by(CollectionLog.recorded_at.desc(), CollectionLog.id.desc()).limit(limit)
        result = await db.execute(query)
        return list(result.scalars().all())
