from poolstats.core.config import DatabaseBackend, Settings, get_settings
from poolstats.core.exceptions import (
    CollectionError,
    FetchError,
    PersistenceError,
    TransformError,
)
