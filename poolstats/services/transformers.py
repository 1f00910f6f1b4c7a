"""Pure mapping from upstream payload elements to table rows.

Each ``to_*`` function validates one element of an upstream JSON payload and
returns a dict keyed by column name, ready for a bulk insert. Missing or
mistyped required fields raise :class:`TransformError`; unknown fields are
ignored.
"""
import enum
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Type, TypeVar
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ValidationError

from poolstats.core.exceptions import TransformError
from poolstats.schemas.payloads import (
    HourlyStatsItem,
    HourlyStatsTotals,
    UserStatsItem,
    UserStatsTotals,
    VehicleStatsItem,
    VehicleStatsTotals,
)

DEFAULT_DATA_TIMEZONE = ZoneInfo("Asia/Shanghai")

# maxUsers values offered by shared ("social") vehicles
SOCIAL_CAR_MAX_USERS = frozenset({10, 100})

Row = Dict[str, Any]
ModelT = TypeVar("ModelT", bound=BaseModel)


class CarType(str, enum.Enum):
    SOCIAL = "social"
    BLACK = "black"
    UNKNOWN = "unknown"


def classify_car_type(max_users: int) -> str:
    if max_users in SOCIAL_CAR_MAX_USERS:
        return CarType.SOCIAL.value
    return CarType.BLACK.value


def compute_data_date(now: Optional[datetime] = None, tz: ZoneInfo = DEFAULT_DATA_TIMEZONE) -> str:
    """Date the daily upstream figures belong to: the day before ``now`` in ``tz``.

    Naive ``now`` values are taken as already expressed in ``tz``.
    """
    if now is None:
        now = datetime.now(tz)
    elif now.tzinfo is not None:
        now = now.astimezone(tz)
    return (now.date() - timedelta(days=1)).isoformat()


def require_field(payload: Any, key: str, kind: type) -> Any:
    """Top-level payload member, checked for presence and container type"""
    if not isinstance(payload, dict):
        raise TransformError(f"Expected a JSON object, got {type(payload).__name__}")
    if key not in payload:
        raise TransformError(f"Missing required field '{key}'")
    value = payload[key]
    if not isinstance(value, kind):
        raise TransformError(f"Field '{key}' must be {kind.__name__}, got {type(value).__name__}")
    return value


def _parse(model: Type[ModelT], item: Any) -> ModelT:
    try:
        return model.model_validate(item)
    except ValidationError as exc:
        raise TransformError(f"Invalid {model.__name__}: {exc}") from exc


def to_user_detail(item: Any, data_date: str) -> Row:
    user = _parse(UserStatsItem, item)
    return {**user.model_dump(), "data_date": data_date}


def to_user_summary(summary: Any, data_date: str) -> Row:
    totals = _parse(UserStatsTotals, summary)
    return {**totals.model_dump(), "data_date": data_date}


def to_vehicle_detail(item: Any, recorded_at: datetime) -> Row:
    car = _parse(VehicleStatsItem, item)
    return {
        **car.model_dump(),
        "car_type": classify_car_type(car.max_users),
        "recorded_at": recorded_at,
    }


def to_vehicle_summary(summary: Any, data_date: str) -> Row:
    totals = _parse(VehicleStatsTotals, summary)
    return {**totals.model_dump(), "data_date": data_date}


def to_system_detail(item: Any, data_date: str) -> Row:
    hour = _parse(HourlyStatsItem, item)
    return {
        "hour_timestamp": hour.hour,
        "request_count": hour.count,
        "unique_users": hour.unique_users,
        "data_date": data_date,
    }


def to_system_summary(summary: Any, data_date: str) -> Row:
    totals = _parse(HourlyStatsTotals, summary)
    return {**totals.model_dump(), "data_date": data_date}
