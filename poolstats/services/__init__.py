from poolstats.services.collection_log_service import CollectionLogService
from poolstats.services.collector_service import CollectorService
