from poolstats.db.base import Base
from poolstats.db.database import Store, get_async_session
