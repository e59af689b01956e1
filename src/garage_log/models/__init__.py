# garage_log - Data models
from garage_log.models.vehicle import Vehicle
from garage_log.models.data_records import (
    BackupBundle,
    RefillEvent,
    TripPoint,
    TripRecord,
)

__all__ = [
    "Vehicle",
    "RefillEvent",
    "TripPoint",
    "TripRecord",
    "BackupBundle",
]
