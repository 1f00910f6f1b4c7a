import time
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from poolstats.api.dependencies.store import get_store, verify_cron_secret
from poolstats.core.config import Settings, get_settings
from poolstats.db.database import Store, get_async_session
from poolstats.logs.server_log import api_logger
from poolstats.models.collection_log import TaskType
from poolstats.schemas.collection import CollectionLogResponse, ScheduledEventRequest, TriggerRequest
from poolstats.services.collection_log_service import CollectionLogService
from poolstats.worker.cron_handler import TRIGGER_TYPES, handle_cron, outcome_to_dict, run_collection

# Create router
router = APIRouter(prefix="/collection", tags=["collection"])


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _error_response(status_code: int, error: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error, **extra},
    )


async def _read_trigger(request: Request) -> TriggerRequest:
    """Parse the trigger body leniently; anything unusable yields an empty request"""
    try:
        payload = await request.json()
    except ValueError:
        return TriggerRequest()
    if not isinstance(payload, dict):
        return TriggerRequest()
    return TriggerRequest.model_validate(payload)


@router.post("/trigger", dependencies=[Depends(verify_cron_secret)])
async def trigger_collection(
    body: TriggerRequest = Depends(_read_trigger),
    store: Store = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """
    Run a collection synchronously. A daily batch with failed tasks still
    answers 200; the failures are listed in ``result.errors``.
    """
    if not isinstance(body.type, str) or body.type not in TRIGGER_TYPES:
        return _error_response(
            status.HTTP_400_BAD_REQUEST,
            f"Invalid trigger type: {body.type}. Expected one of: {', '.join(TRIGGER_TYPES)}",
        )

    start_time = time.perf_counter()
    api_logger.info(f"Manual collection triggered: {body.type}")
    try:
        outcome = await run_collection(body.type, store, settings)
    except Exception as e:
        execution_time = int((time.perf_counter() - start_time) * 1000)
        api_logger.error(f"Manual collection failed ({body.type}, {execution_time} ms): {e}")
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            str(e) or type(e).__name__,
            executionTime=execution_time,
            timestamp=_timestamp(),
        )

    return {
        "success": True,
        "result": outcome_to_dict(outcome),
        "triggerType": body.type,
        "executionTime": int((time.perf_counter() - start_time) * 1000),
        "timestamp": _timestamp(),
    }


@router.post("/scheduled", dependencies=[Depends(verify_cron_secret)])
async def scheduled_collection(
    event: ScheduledEventRequest,
    store: Store = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """
    Scheduled invocation forwarded by the hosting platform
    """
    try:
        outcome = await handle_cron(event.cron, store, settings)
    except Exception as e:
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e) or type(e).__name__, cron=event.cron)

    if outcome is None:
        return _error_response(status.HTTP_400_BAD_REQUEST, f"Unknown cron schedule: {event.cron}", cron=event.cron)

    return {
        "success": True,
        "result": outcome_to_dict(outcome),
        "cron": event.cron,
        "timestamp": _timestamp(),
    }


@router.get("/logs", response_model=List[CollectionLogResponse])
async def get_collection_logs(
    limit: int = Query(50, ge=1, le=500),
    task_type: Optional[TaskType] = None,
    db: AsyncSession = Depends(get_async_session),
):
    """
    Newest collection log rows, optionally for one task type
    """
    return await CollectionLogService.get_recent(db, limit=limit, task_type=task_type)
