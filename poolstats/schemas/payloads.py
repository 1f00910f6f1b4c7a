from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UpstreamModel(BaseModel):
    """Element of an upstream stats payload.

    Unknown fields are ignored. Primitive types are strict, so a count sent as
    a string or a flag sent as 0/1 is rejected rather than coerced.
    """

    model_config = ConfigDict(extra="ignore", strict=True)


# --- /stats ---

class UserStatsItem(UpstreamModel):
    user_id: str = Field(alias="userId")
    display_name: Optional[str] = Field(default=None, alias="displayName")
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    count_1hour: int = Field(alias="count1Hour")
    count_24hour: int = Field(alias="count24Hour")
    rank_1hour: int = Field(alias="rank1Hour")
    rank_24hour: int = Field(alias="rank24Hour")


class UserStatsTotals(UpstreamModel):
    total_users_1hour: int = Field(alias="totalUsers1Hour")
    total_users_24hour: int = Field(alias="totalUsers24Hour")
    total_count_1hour: int = Field(alias="totalCount1Hour")
    total_count_24hour: int = Field(alias="totalCount24Hour")


# --- /car-stats ---

class VehicleStatsItem(UpstreamModel):
    car_id: str = Field(alias="carId")
    user_email: Optional[str] = Field(default=None, alias="userEmail")
    target_url: Optional[str] = Field(default=None, alias="targetUrl")
    current_users: int = Field(alias="currentUsers")
    max_users: int = Field(alias="maxUsers", ge=0)
    count_1hour: int = Field(alias="count1Hour")
    count_24hour: int = Field(alias="count24Hour")
    is_active: bool = Field(alias="isActive")


class VehicleStatsTotals(UpstreamModel):
    total_cars: int = Field(alias="totalCars")
    active_cars: int = Field(alias="activeCars")
    total_users: int = Field(alias="totalUsers")
    total_count_1hour: int = Field(alias="totalCount1Hour")
    total_count_24hour: int = Field(alias="totalCount24Hour")


# --- /hourly-stats ---

class HourlyStatsItem(UpstreamModel):
    hour: str
    count: int
    unique_users: int = Field(alias="uniqueUsers")


class HourlyStatsTotals(UpstreamModel):
    today_total: int = Field(alias="todayTotal")
    yesterday_total: int = Field(alias="yesterdayTotal")
    today_users: int = Field(alias="todayUsers")
    yesterday_users: int = Field(alias="yesterdayUsers")
