import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from poolstats.core.exceptions import FetchError
from poolstats.db.database import Store
from poolstats.schemas.collection import DailyCollectionResult, TaskResult
from poolstats.services.collector_service import CollectorService
from poolstats.worker import cron_handler
from poolstats.worker.cron_handler import handle_cron, main, run_collection


class TestHandleCron:
    """Dispatch of scheduled invocations"""

    def setup_method(self):
        self.store = MagicMock(spec=Store)

    @pytest.mark.asyncio
    async def test_daily_schedule_runs_daily_batch(self, settings):
        daily = DailyCollectionResult(errors=["User stats collection failed: boom"])

        with patch.object(CollectorService, "collect_daily", AsyncMock(return_value=daily)) as collect_daily, \
                patch.object(CollectorService, "collect_vehicle_detail", AsyncMock()) as collect_detail:
            result = await handle_cron(settings.DAILY_CRON, self.store, settings)

        assert result is daily
        collect_daily.assert_awaited_once_with(self.store, settings)
        collect_detail.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_half_hourly_schedule_runs_vehicle_detail(self, settings):
        detail = TaskResult(records_count=12)

        with patch.object(CollectorService, "collect_vehicle_detail", AsyncMock(return_value=detail)) as collect_detail:
            result = await handle_cron("*/30 * * * *", self.store, settings)

        assert result is detail
        collect_detail.assert_awaited_once_with(self.store, settings)

    @pytest.mark.asyncio
    async def test_vehicle_detail_errors_propagate(self, settings):
        error = FetchError("https://stats.test/api/car-stats", 4, ConnectionError("down"))

        with patch.object(CollectorService, "collect_vehicle_detail", AsyncMock(side_effect=error)):
            with pytest.raises(FetchError):
                await handle_cron(settings.VEHICLE_DETAIL_CRON, self.store, settings)

    @pytest.mark.asyncio
    async def test_unknown_schedule_is_ignored(self, settings):
        with patch.object(CollectorService, "collect_daily", AsyncMock()) as collect_daily:
            result = await handle_cron("0 12 * * 1", self.store, settings)

        assert result is None
        collect_daily.assert_not_awaited()


class TestRunCollection:

    def setup_method(self):
        self.store = MagicMock(spec=Store)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("kind, method", [
        ("daily", "collect_daily"),
        ("user", "collect_user_stats"),
        ("vehicle_detail", "collect_vehicle_detail"),
        ("vehicle_summary", "collect_vehicle_summary"),
        ("system", "collect_system_stats"),
    ])
    async def test_dispatch(self, settings, kind, method):
        with patch.object(CollectorService, method, AsyncMock(return_value=TaskResult(records_count=1))) as collect:
            await run_collection(kind, self.store, settings)

        collect.assert_awaited_once_with(self.store, settings)

    @pytest.mark.asyncio
    async def test_unknown_kind(self, settings):
        with pytest.raises(ValueError):
            await run_collection("weekly", self.store, settings)


class TestMain:

    def test_success_exit_code(self, capsys):
        with patch.object(cron_handler, "_run", AsyncMock(return_value=TaskResult(records_count=5))):
            assert main(["system"]) == 0

        assert '"recordsCount": 5' in capsys.readouterr().out

    def test_partial_daily_failure_exit_code(self):
        daily = DailyCollectionResult(errors=["System stats collection failed: boom"])

        with patch.object(cron_handler, "_run", AsyncMock(return_value=daily)):
            assert main(["daily"]) == 1

    def test_task_failure_exit_code(self):
        with patch.object(cron_handler, "_run", AsyncMock(side_effect=RuntimeError("boom"))):
            assert main(["user"]) == 1

    def test_unknown_cron_exit_code(self):
        with patch.object(cron_handler, "_run", AsyncMock(return_value=None)):
            assert main(["--cron", "1 2 3 4 5"]) == 2
