# Schemas package
from .catalog import CategoryResponse, MapStyleResponse
from .geocoding import GeocodeResponse
from .health import HealthResponse
from .locations import LocationCreate, LocationResponse, LocationUpdate
from .photos import PhotoUploadResponse
from .stats import RecentLocation, StatsResponse

__all__ = [
    "CategoryResponse",
    "GeocodeResponse",
    "HealthResponse",
    "LocationCreate",
    "LocationResponse",
    "LocationUpdate",
    "MapStyleResponse",
    "PhotoUploadResponse",
    "RecentLocation",
    "StatsResponse",
]
