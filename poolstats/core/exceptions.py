from typing import Optional


class CollectionError(Exception):
    """Base error for the data collection pipeline"""


class FetchError(CollectionError):
    """Upstream stats API unreachable or non-2xx after all attempts"""

    def __init__(self, url: str, attempts: int, cause: Optional[BaseException] = None):
        self.url = url
        self.attempts = attempts
        self.cause = cause
        reason = str(cause) if cause is not None else "unknown error"
        super().__init__(f"Request to {url} failed after {attempts} attempts: {reason}")


class TransformError(CollectionError):
    """Fetched payload is missing a required field or has a wrong type"""


class PersistenceError(CollectionError):
    """Writing collected rows to the database failed"""
