"""Geocoding proxy so the Mapbox token stays on the server."""
from collections.abc import AsyncGenerator

from fastapi import APIRouter, Depends, HTTPException, Query, status

from api.identity import CurrentUser, get_current_user
from map_core.geocoding import GeocodeResult, Geocoder, MapboxGeocoder
from schemas.geocoding import GeocodeResponse
from utils import config

router = APIRouter(prefix="/geocode", tags=["geocoding"])


async def get_geocoder() -> AsyncGenerator[Geocoder, None]:
    """FastAPI dependency: a Mapbox geocoder for the request, closed afterwards."""
    geocoder = MapboxGeocoder(config.MAPBOX_ACCESS_TOKEN, config.MAPBOX_GEOCODING_URL)
    try:
        yield geocoder
    finally:
        await geocoder.aclose()


def _to_response(result: GeocodeResult | None) -> GeocodeResponse:
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No matching place")
    return GeocodeResponse(
        place_name=result.place_name,
        latitude=result.latitude,
        longitude=result.longitude,
    )


@router.get("/forward", response_model=GeocodeResponse)
async def forward(
    q: str = Query(..., min_length=1),
    user: CurrentUser = Depends(get_current_user),
    geocoder: Geocoder = Depends(get_geocoder),
) -> GeocodeResponse:
    """First place matching a free-text query."""
    return _to_response(await geocoder.forward(q))


@router.get("/reverse", response_model=GeocodeResponse)
async def reverse(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    user: CurrentUser = Depends(get_current_user),
    geocoder: Geocoder = Depends(get_geocoder),
) -> GeocodeResponse:
    """Place name at a point."""
    return _to_response(await geocoder.reverse(lat, lng))
