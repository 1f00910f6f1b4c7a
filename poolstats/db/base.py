from datetime import datetime, timezone

from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in every recorded_at column"""
    return datetime.now(timezone.utc).replace(tzinfo=None)
