from poolstats.logs.server_log import api_logger, collector_logger
from poolstats.logs.debug_log import debug_logger
