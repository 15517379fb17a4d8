"""Dashboard statistics schema."""
from datetime import date
from typing import Optional

from pydantic import BaseModel


class RecentLocation(BaseModel):
    """One of the newest visits listed on the dashboard."""

    id: str
    name: str
    category: str
    visited_date: Optional[date] = None


class StatsResponse(BaseModel):
    """Response for GET /stats."""

    location_count: int
    photo_count: int
    locations_with_photos: int
    country_count: int
    recent_visit_count: int
    latest_place: Optional[str] = None
    last_visit_date: Optional[date] = None
    recent_locations: list[RecentLocation] = []
    share_text: str
    share_links: dict[str, str] = {}
