# Import all models here so they are registered on Base.metadata
from poolstats.db.base import Base
from poolstats.models.user_stats import UserStatDetail, UserStatSummary
from poolstats.models.vehicle_stats import VehicleStatDetail, VehicleStatSummary
from poolstats.models.system_stats import SystemStatDetail, SystemStatSummary
from poolstats.models.collection_log import CollectionLog
