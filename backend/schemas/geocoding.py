"""Geocoding proxy response schema."""
from pydantic import BaseModel


class GeocodeResponse(BaseModel):
    place_name: str
    latitude: float
    longitude: float
