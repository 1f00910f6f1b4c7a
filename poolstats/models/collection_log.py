import enum

from sqlalchemy import Column, DateTime, Index, Integer, String, Text

from poolstats.db.base import Base, utcnow


class TaskType(str, enum.Enum):
    USER = "user"
    VEHICLE_DETAIL = "vehicle_detail"
    VEHICLE_SUMMARY = "vehicle_summary"
    SYSTEM = "system"


class CollectionStatus(str, enum.Enum):
    SUCCESS = "success"
    ERROR = "error"


class CollectionLog(Base):
    """Append-only record of one collection task execution"""

    __tablename__ = "collection_logs"

    id = Column(Integer, primary_key=True, index=True)
    task_type = Column(String(32), nullable=False)
    status = Column(String(16), nullable=False)
    records_count = Column(Integer, nullable=True)
    error_message = Column(Text, nullable=True)
    execution_time_ms = Column(Integer, nullable=False, default=0)
    recorded_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        Index("idx_collection_logs_task_recorded", "task_type", "recorded_at"),
    )
