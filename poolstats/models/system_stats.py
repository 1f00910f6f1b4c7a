from sqlalchemy import Column, DateTime, Index, Integer, String

from poolstats.db.base import Base, utcnow


class SystemStatDetail(Base):
    """Request volume of one hour bucket"""

    __tablename__ = "system_stats_detail"

    id = Column(Integer, primary_key=True, index=True)
    hour_timestamp = Column(String, nullable=False)
    request_count = Column(Integer, nullable=False)
    unique_users = Column(Integer, nullable=False)
    data_date = Column(String(10), nullable=False, index=True)
    recorded_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        Index("idx_system_detail_hour_date", "hour_timestamp", "data_date"),
    )


class SystemStatSummary(Base):
    """Today/yesterday totals as reported on the data date"""

    __tablename__ = "system_stats_summary"

    id = Column(Integer, primary_key=True, index=True)
    today_total = Column(Integer, nullable=False)
    yesterday_total = Column(Integer, nullable=False)
    today_users = Column(Integer, nullable=False)
    yesterday_users = Column(Integer, nullable=False)
    data_date = Column(String(10), nullable=False, index=True)
    recorded_at = Column(DateTime, default=utcnow, nullable=False)
