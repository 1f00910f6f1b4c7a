import asyncio
import time
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional

from sqlalchemy import insert
from sqlalchemy.exc import SQLAlchemyError

from poolstats.core.config import Settings, get_settings
from poolstats.core.exceptions import PersistenceError
from poolstats.db.base import utcnow
from poolstats.db.database import Store
from poolstats.logs import collector_logger, debug_logger
from poolstats.models.collection_log import CollectionStatus, TaskType
from poolstats.models.system_stats import SystemStatDetail, SystemStatSummary
from poolstats.models.user_stats import UserStatDetail, UserStatSummary
from poolstats.models.vehicle_stats import VehicleStatDetail, VehicleStatSummary
from poolstats.schemas.collection import DailyCollectionResult, TaskResult
from poolstats.services.collection_log_service import CollectionLogService
from poolstats.services.fetcher import CAR_STATS, HOURLY_STATS, USER_STATS, endpoint_urls, fetch_json
from poolstats.services.transformers import (
    compute_data_date,
    require_field,
    to_system_detail,
    to_system_summary,
    to_user_detail,
    to_user_summary,
    to_vehicle_detail,
    to_vehicle_summary,
)

TASK_LABELS = {
    TaskType.USER: "User stats",
    TaskType.VEHICLE_DETAIL: "Vehicle detail",
    TaskType.VEHICLE_SUMMARY: "Vehicle summary",
    TaskType.SYSTEM: "System stats",
}


def _elapsed_ms(start_time: float) -> int:
    return int((time.perf_counter() - start_time) * 1000)


def _error_message(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


def _as_utc_naive(now: Optional[datetime]) -> datetime:
    if now is None:
        return utcnow()
    if now.tzinfo is None:
        return now
    return now.astimezone(timezone.utc).replace(tzinfo=None)


class CollectorService:
    """Scheduled collection of upstream stats into the database.

    Every task fetches one upstream endpoint, maps the payload to rows, writes
    them and appends exactly one collection log row, whatever the outcome.
    Task failures are logged and re-raised; only ``collect_daily`` turns them
    into a list of error strings.
    """

    @staticmethod
    async def _fetch(settings: Settings, endpoint: str) -> Any:
        return await fetch_json(
            endpoint_urls(settings)[endpoint],
            max_retries=settings.FETCH_MAX_RETRIES,
            retry_delay_ms=settings.FETCH_RETRY_DELAY_MS,
            timeout=settings.FETCH_TIMEOUT_SECONDS,
        )

    @staticmethod
    async def _persist(
        store: Store,
        batch_size: int,
        detail_model=None,
        detail_rows: Optional[List[Dict[str, Any]]] = None,
        summary_model=None,
        summary_row: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Write detail rows in batches plus the summary row, all in one transaction"""
        detail_rows = detail_rows or []
        try:
            async with store.session() as session:
                async with session.begin():
                    for start in range(0, len(detail_rows), batch_size):
                        batch = detail_rows[start:start + batch_size]
                        await session.execute(insert(detail_model), batch)
                        debug_logger.debug(
                            f"Inserted {detail_model.__tablename__} rows "
                            f"{start + 1}-{start + len(batch)} / {len(detail_rows)}"
                        )
                    if summary_row is not None:
                        await session.execute(insert(summary_model), [summary_row])
        except SQLAlchemyError as exc:
            tables = [model.__tablename__ for model in (detail_model, summary_model) if model is not None]
            raise PersistenceError(f"Failed to write {', '.join(tables)}: {exc}") from exc

    @staticmethod
    async def _run_task(
        store: Store,
        task_type: TaskType,
        job: Callable[[], Awaitable[int]],
        settings: Settings,
    ) -> TaskResult:
        label = TASK_LABELS[task_type]
        start_time = time.perf_counter()
        collector_logger.info(f"{label} collection started")

        try:
            records_count = await asyncio.wait_for(job(), timeout=settings.task_timeout)
        except (Exception, asyncio.CancelledError) as exc:
            elapsed = _elapsed_ms(start_time)
            message = _error_message(exc)
            collector_logger.error(f"{label} collection failed after {elapsed} ms: {message}")
            try:
                # Shielded so a cancelled task still leaves its error row
                await asyncio.shield(CollectionLogService.write(
                    store,
                    task_type,
                    CollectionStatus.ERROR,
                    error_message=message,
                    execution_time_ms=elapsed,
                ))
            except Exception:
                # The store itself may be what failed; the file log is all that is left
                debug_logger.log_exception(f"Could not record failure of {label} collection")
            raise

        elapsed = _elapsed_ms(start_time)
        await CollectionLogService.write(
            store,
            task_type,
            CollectionStatus.SUCCESS,
            records_count=records_count,
            execution_time_ms=elapsed,
        )
        collector_logger.info(f"{label} collection succeeded: {records_count} records in {elapsed} ms")
        return TaskResult(success=True, records_count=records_count)

    @staticmethod
    async def collect_user_stats(
        store: Store,
        settings: Optional[Settings] = None,
        now: Optional[datetime] = None,
    ) -> TaskResult:
        """Per-user counts of the previous day plus their totals"""
        settings = settings or get_settings()
        data_date = compute_data_date(now, tz=settings.data_timezone)

        async def job() -> int:
            payload = await CollectorService._fetch(settings, USER_STATS)
            details = [to_user_detail(item, data_date) for item in require_field(payload, "allUsers", list)]
            summary = to_user_summary(require_field(payload, "summary", dict), data_date)
            await CollectorService._persist(
                store,
                settings.INSERT_BATCH_SIZE,
                UserStatDetail, details,
                UserStatSummary, summary,
            )
            return len(details)

        return await CollectorService._run_task(store, TaskType.USER, job, settings)

    @staticmethod
    async def collect_vehicle_detail(
        store: Store,
        settings: Optional[Settings] = None,
        now: Optional[datetime] = None,
    ) -> TaskResult:
        """Intraday snapshot of every vehicle, stamped with the fetch time"""
        settings = settings or get_settings()

        async def job() -> int:
            payload = await CollectorService._fetch(settings, CAR_STATS)
            fetched_at = _as_utc_naive(now)
            details = [to_vehicle_detail(item, fetched_at) for item in require_field(payload, "cars", list)]
            await CollectorService._persist(store, settings.INSERT_BATCH_SIZE, VehicleStatDetail, details)
            return len(details)

        return await CollectorService._run_task(store, TaskType.VEHICLE_DETAIL, job, settings)

    @staticmethod
    async def collect_vehicle_summary(
        store: Store,
        settings: Optional[Settings] = None,
        now: Optional[datetime] = None,
    ) -> TaskResult:
        """Vehicle totals of the previous day; the per-vehicle list is ignored"""
        settings = settings or get_settings()
        data_date = compute_data_date(now, tz=settings.data_timezone)

        async def job() -> int:
            payload = await CollectorService._fetch(settings, CAR_STATS)
            summary = to_vehicle_summary(require_field(payload, "summary", dict), data_date)
            await CollectorService._persist(
                store,
                settings.INSERT_BATCH_SIZE,
                summary_model=VehicleStatSummary,
                summary_row=summary,
            )
            return 1

        return await CollectorService._run_task(store, TaskType.VEHICLE_SUMMARY, job, settings)

    @staticmethod
    async def collect_system_stats(
        store: Store,
        settings: Optional[Settings] = None,
        now: Optional[datetime] = None,
    ) -> TaskResult:
        """Hourly request volume of the previous day plus today/yesterday totals"""
        settings = settings or get_settings()
        data_date = compute_data_date(now, tz=settings.data_timezone)

        async def job() -> int:
            payload = await CollectorService._fetch(settings, HOURLY_STATS)
            details = [to_system_detail(item, data_date) for item in require_field(payload, "yesterday", list)]
            summary = to_system_summary(require_field(payload, "summary", dict), data_date)
            await CollectorService._persist(
                store,
                settings.INSERT_BATCH_SIZE,
                SystemStatDetail, details,
                SystemStatSummary, summary,
            )
            return len(details)

        return await CollectorService._run_task(store, TaskType.SYSTEM, job, settings)

    @staticmethod
    async def collect_daily(
        store: Store,
        settings: Optional[Settings] = None,
        now: Optional[datetime] = None,
    ) -> DailyCollectionResult:
        """Run the daily tasks one after another, collecting failures instead of raising"""
        settings = settings or get_settings()
        result = DailyCollectionResult()
        collector_logger.info("Daily collection started")

        steps = (
            ("user", TaskType.USER, CollectorService.collect_user_stats),
            ("vehicle_summary", TaskType.VEHICLE_SUMMARY, CollectorService.collect_vehicle_summary),
            ("system", TaskType.SYSTEM, CollectorService.collect_system_stats),
        )
        for field, task_type, collect in steps:
            try:
                setattr(result, field, await collect(store, settings, now))
            except Exception as exc:
                result.errors.append(f"{TASK_LABELS[task_type]} collection failed: {_error_message(exc)}")

        if not result.errors:
            collector_logger.info(
                f"Daily collection finished: {result.success_count}/{result.total_tasks} succeeded"
            )
        else:
            collector_logger.warning(
                f"Daily collection partially failed: {result.success_count}/{result.total_tasks} succeeded, "
                f"{len(result.errors)} errors"
            )
            for error in result.errors:
                collector_logger.error(f"  - {error}")
        return result
