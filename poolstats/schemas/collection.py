from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Serialized with camelCase keys, accepts either spelling on input"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TaskResult(CamelModel):
    """Outcome of one successful collection task"""
    success: bool = True
    records_count: int


class DailyCollectionResult(CamelModel):
    """Best-effort daily batch outcome; failed tasks leave their field unset"""
    user: Optional[TaskResult] = None
    vehicle_summary: Optional[TaskResult] = None
    system: Optional[TaskResult] = None
    errors: List[str] = Field(default_factory=list)
    total_tasks: int = 3

    @property
    def success_count(self) -> int:
        return sum(1 for result in (self.user, self.vehicle_summary, self.system) if result is not None)

    def to_response(self) -> dict:
        data = self.model_dump(by_alias=True)
        data["successCount"] = self.success_count
        return data


class TriggerRequest(BaseModel):
    """Manual trigger body; the type is checked by the endpoint to answer 400"""
    type: Any = None


class ScheduledEventRequest(CamelModel):
    """Scheduled invocation as delivered by the hosting platform"""
    cron: str
    scheduled_time: Optional[int] = None


class CollectionLogResponse(CamelModel):
    id: int
    task_type: str
    status: str
    records_count: Optional[int] = None
    error_message: Optional[str] = None
    execution_time_ms: int
    recorded_at: datetime

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)
