"""Entry points used by the hosting scheduler.

The scheduler sends a schedule identifier (the cron expression it fired on);
``handle_cron`` maps it to the daily batch or the vehicle detail snapshot.
``main`` is the same dispatch from the command line::

    poolstats-collect daily
    poolstats-collect --cron "*/30 * * * *"
"""
import argparse
import asyncio
import json
import sys
from typing import Optional, Union

from poolstats.core.config import Settings, get_settings
from poolstats.db.database import Store
from poolstats.logs import collector_logger
from poolstats.schemas.collection import DailyCollectionResult, TaskResult
from poolstats.services.collector_service import CollectorService

CollectionOutcome = Union[DailyCollectionResult, TaskResult]

TRIGGER_TYPES = ("daily", "user", "vehicle_detail", "vehicle_summary", "system")


async def run_collection(
    kind: str,
    store: Store,
    settings: Optional[Settings] = None,
) -> CollectionOutcome:
    """Run one named collection; single tasks propagate their errors"""
    settings = settings or get_settings()
    if kind == "daily":
        return await CollectorService.collect_daily(store, settings)
    if kind == "user":
        return await CollectorService.collect_user_stats(store, settings)
    if kind == "vehicle_detail":
        return await CollectorService.collect_vehicle_detail(store, settings)
    if kind == "vehicle_summary":
        return await CollectorService.collect_vehicle_summary(store, settings)
    if kind == "system":
        return await CollectorService.collect_system_stats(store, settings)
    raise ValueError(f"Unknown collection type: {kind}")


async def handle_cron(
    cron: str,
    store: Store,
    settings: Optional[Settings] = None,
) -> Optional[CollectionOutcome]:
    settings = settings or get_settings()
    collector_logger.info(f"Cron triggered: {cron}")

    try:
        if cron == settings.DAILY_CRON:
            result = await CollectorService.collect_daily(store, settings)
        elif cron == settings.VEHICLE_DETAIL_CRON:
            result = await CollectorService.collect_vehicle_detail(store, settings)
        else:
            collector_logger.warning(f"Unknown cron schedule: {cron}")
            return None
    except Exception as e:
        collector_logger.error(f"Cron job failed ({cron}): {e}")
        raise

    collector_logger.info(f"Cron job finished ({cron}): {result.model_dump(by_alias=True)}")
    return result


def outcome_to_dict(outcome: CollectionOutcome) -> dict:
    if isinstance(outcome, DailyCollectionResult):
        return outcome.to_response()
    return outcome.model_dump(by_alias=True)


async def _run(args: argparse.Namespace, settings: Settings) -> Optional[CollectionOutcome]:
    store = Store.from_settings(settings)
    try:
        await store.init_models()
        if args.cron:
            return await handle_cron(args.cron, store, settings)
        return await run_collection(args.type, store, settings)
    finally:
        await store.close()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="poolstats-collect", description="Run a stats collection")
    parser.add_argument("type", nargs="?", choices=TRIGGER_TYPES, default="daily")
    parser.add_argument("--cron", help="dispatch on a schedule identifier instead of a type")
    args = parser.parse_args(argv)

    settings = get_settings()
    try:
        outcome = asyncio.run(_run(args, settings))
    except Exception as e:
        collector_logger.error(f"Collection failed: {e}")
        return 1

    if outcome is None:
        return 2
    print(json.dumps(outcome_to_dict(outcome), ensure_ascii=False, indent=2))
    if isinstance(outcome, DailyCollectionResult) and outcome.errors:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
