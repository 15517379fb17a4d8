"""Dashboard statistics route."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from api.identity import CurrentUser, get_current_user
from api.locations import location_to_core
from db import get_db
from map_core.categories import display_category
from map_core.stats import compute_stats, share_links, share_text
from repositories.location_repository import list_locations as repo_list_locations
from schemas.stats import RecentLocation, StatsResponse
from utils import config

router = APIRouter(tags=["stats"])


@router.get("/stats", response_model=StatsResponse)
def get_stats(
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> StatsResponse:
    """Counts for the user's dashboard, the three newest visits and share links."""
    locations = [location_to_core(loc) for loc in repo_list_locations(db, user.id)]
    stats = compute_stats(locations)
    return StatsResponse(
        location_count=stats.location_count,
        photo_count=stats.photo_count,
        locations_with_photos=stats.locations_with_photos,
        country_count=stats.country_count,
        recent_visit_count=stats.recent_visit_count,
        latest_place=stats.latest_place,
        last_visit_date=stats.last_visit_date,
        recent_locations=[
            RecentLocation(
                id=loc.id,
                name=loc.name,
                category=display_category(loc.category),
                visited_date=loc.visited_date,
            )
            for loc in stats.recent_locations
        ],
        share_text=share_text(locations),
        share_links=share_links(locations, f"{config.PUBLIC_BASE_URL}/"),
    )
