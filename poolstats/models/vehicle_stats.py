from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String

from poolstats.db.base import Base, utcnow


class VehicleStatDetail(Base):
    """State of one vehicle at fetch time, sampled intraday"""

    __tablename__ = "vehicle_stats_detail"

    id = Column(Integer, primary_key=True, index=True)
    car_id = Column(String, nullable=False)
    user_email = Column(String, nullable=True)
    target_url = Column(String, nullable=True)
    current_users = Column(Integer, nullable=False)
    max_users = Column(Integer, nullable=False)
    count_1hour = Column(Integer, nullable=False)
    count_24hour = Column(Integer, nullable=False)
    is_active = Column(Boolean, nullable=False)
    # Classified once at insert, see classify_car_type
    car_type = Column(String(16), nullable=False)
    recorded_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        Index("idx_vehicle_detail_recorded", "car_id", "recorded_at"),
        Index("idx_vehicle_detail_type", "car_type", "recorded_at"),
    )


class VehicleStatSummary(Base):
    """Aggregate vehicle metrics for a data date"""

    __tablename__ = "vehicle_stats_summary"

    id = Column(Integer, primary_key=True, index=True)
    total_cars = Column(Integer, nullable=False)
    active_cars = Column(Integer, nullable=False)
    total_users = Column(Integer, nullable=False)
    total_count_1hour = Column(Integer, nullable=False)
    total_count_24hour = Column(Integer, nullable=False)
    data_date = Column(String(10), nullable=False, index=True)
    recorded_at = Column(DateTime, default=utcnow, nullable=False)
