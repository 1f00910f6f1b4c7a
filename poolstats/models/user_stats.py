from sqlalchemy import Column, DateTime, Index, Integer, String

from poolstats.db.base import Base, utcnow


class UserStatDetail(Base):
    """One user's request counts for a data date"""

    __tablename__ = "user_stats_detail"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False)
    display_name = Column(String, nullable=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    count_1hour = Column(Integer, nullable=False)
    count_24hour = Column(Integer, nullable=False)
    rank_1hour = Column(Integer, nullable=False)
    rank_24hour = Column(Integer, nullable=False)
    data_date = Column(String(10), nullable=False, index=True)
    recorded_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        Index("idx_user_date", "user_id", "data_date"),
    )


class UserStatSummary(Base):
    """Aggregate user metrics for a data date"""

    __tablename__ = "user_stats_summary"

    id = Column(Integer, primary_key=True, index=True)
    total_users_1hour = Column(Integer, nullable=False)
    total_users_24hour = Column(Integer, nullable=False)
    total_count_1hour = Column(Integer, nullable=False)
    total_count_24hour = Column(Integer, nullable=False)
    data_date = Column(String(10), nullable=False, index=True)
    recorded_at = Column(DateTime, default=utcnow, nullable=False)
