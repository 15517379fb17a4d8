"""API route handlers: health and reference data."""
from fastapi import APIRouter

from map_core.categories import CATEGORIES, DEFAULT_MAP_STYLE, MAP_STYLES
from schemas.catalog import CategoryResponse, MapStyleResponse
from schemas.health import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse()


@router.get("/categories", response_model=list[CategoryResponse])
def list_categories() -> list[CategoryResponse]:
    """Category tags with display name, icon and marker colour."""
    return [CategoryResponse(id=c.id, name=c.name, icon=c.icon, color=c.color) for c in CATEGORIES]


@router.get("/map-styles", response_model=list[MapStyleResponse])
def list_map_styles() -> list[MapStyleResponse]:
    """Base map styles the map can switch between."""
    return [
        MapStyleResponse(id=s.id, name=s.name, icon=s.icon, default=s.id == DEFAULT_MAP_STYLE)
        for s in MAP_STYLES
    ]
