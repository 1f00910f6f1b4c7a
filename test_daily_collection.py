import pytest
from unittest.mock import AsyncMock, patch

from conftest import count_rows, fetch_all
from test_collector_service import CAR_PAYLOAD, FETCH, HOURLY_PAYLOAD, NOW, USER_PAYLOAD, fetch_failure
from poolstats.models import (
    CollectionLog,
    SystemStatSummary,
    UserStatDetail,
    VehicleStatDetail,
    VehicleStatSummary,
)
from poolstats.schemas.collection import TaskResult
from poolstats.services.collector_service import CollectorService


def upstream(fail_user: bool = False, fail_system: bool = False):
    """fetch_json replacement answering by endpoint"""
    async def fake_fetch(url, **kwargs):
        if "/stats?" in url:
            if fail_user:
                raise fetch_failure()
            return USER_PAYLOAD
        if url.endswith("/car-stats"):
            return CAR_PAYLOAD
        if url.endswith("/hourly-stats"):
            if fail_system:
                raise fetch_failure()
            return HOURLY_PAYLOAD
        raise AssertionError(f"unexpected url {url}")

    return fake_fetch


class TestDailyCollection:

    @pytest.mark.asyncio
    async def test_all_tasks_succeed(self, store, settings):
        with patch(FETCH, upstream()):
            result = await CollectorService.collect_daily(store, settings, now=NOW)

        assert result.errors == []
        assert result.success_count == 3
        assert result.user.records_count == 1
        assert result.vehicle_summary.records_count == 1
        assert result.system.records_count == 3

        logs = await fetch_all(store, CollectionLog)
        assert [log.task_type for log in logs] == ["user", "vehicle_summary", "system"]
        assert {log.status for log in logs} == {"success"}
        # Vehicle detail is not part of the daily batch
        assert await count_rows(store, VehicleStatDetail) == 0

    @pytest.mark.asyncio
    async def test_user_failure_does_not_stop_other_tasks(self, store, settings):
        with patch(FETCH, upstream(fail_user=True)):
            result = await CollectorService.collect_daily(store, settings, now=NOW)

        assert result.user is None
        assert result.vehicle_summary == TaskResult(success=True, records_count=1)
        assert result.system == TaskResult(success=True, records_count=3)
        assert len(result.errors) == 1
        assert result.errors[0].startswith("User stats collection failed")
        assert result.success_count == 2

        assert await count_rows(store, UserStatDetail) == 0
        assert await count_rows(store, VehicleStatSummary) == 1
        assert await count_rows(store, SystemStatSummary) == 1

        logs = await fetch_all(store, CollectionLog)
        assert [(log.task_type, log.status) for log in logs] == [
            ("user", "error"),
            ("vehicle_summary", "success"),
            ("system", "success"),
        ]

    @pytest.mark.asyncio
    async def test_multiple_failures_are_all_reported(self, store, settings):
        with patch(FETCH, upstream(fail_user=True, fail_system=True)):
            result = await CollectorService.collect_daily(store, settings, now=NOW)

        assert result.success_count == 1
        assert len(result.errors) == 2
        assert result.errors[1].startswith("System stats collection failed")

    @pytest.mark.asyncio
    async def test_tasks_run_in_fixed_order(self, store, settings):
        calls = []

        def recorder(name):
            async def collect(*args, **kwargs):
                calls.append(name)
                return TaskResult(records_count=0)
            return collect

        with patch.object(CollectorService, "collect_user_stats", recorder("user")), \
                patch.object(CollectorService, "collect_vehicle_summary", recorder("vehicle_summary")), \
                patch.object(CollectorService, "collect_system_stats", recorder("system")):
            await CollectorService.collect_daily(store, settings)

        assert calls == ["user", "vehicle_summary", "system"]

    @pytest.mark.asyncio
    async def test_response_shape(self, store, settings):
        with patch.object(CollectorService, "collect_user_stats", AsyncMock(side_effect=RuntimeError("boom"))), \
                patch.object(CollectorService, "collect_vehicle_summary", AsyncMock(return_value=TaskResult(records_count=1))), \
                patch.object(CollectorService, "collect_system_stats", AsyncMock(return_value=TaskResult(records_count=24))):
            result = await CollectorService.collect_daily(store, settings)

        assert result.to_response() == {
            "user": None,
            "vehicleSummary": {"success": True, "recordsCount": 1},
            "system": {"success": True, "recordsCount": 24},
            "errors": ["User stats collection failed: boom"],
            "totalTasks": 3,
            "successCount": 2,
        }
