"""Journey statistics shown on the dashboard and in exports."""
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional
from urllib.parse import quote

from map_core.location import Location, country_of, short_name, sort_by_visited_date

RECENT_VISIT_DAYS = 30
RECENT_LOCATION_COUNT = 3


@dataclass(frozen=True)
class JourneyStats:
    location_count: int
    photo_count: int
    locations_with_photos: int
    country_count: int
    recent_visit_count: int
    latest_place: Optional[str]
    last_visit_date: Optional[date]
    # Newest visits first, at most RECENT_LOCATION_COUNT.
    recent_locations: tuple[Location, ...] = ()


def count_countries(locations: Iterable[Location]) -> int:
    """Distinct countries, taken from the last comma-separated part of each name."""
    return len({country_of(loc.name) for loc in locations})


def compute_stats(locations: Iterable[Location], today: Optional[date] = None) -> JourneyStats:
    ordered = sort_by_visited_date(locations)
    cutoff = (today or date.today()) - timedelta(days=RECENT_VISIT_DAYS)
    newest = ordered[0] if ordered else None
    return JourneyStats(
        location_count=len(ordered),
        photo_count=sum(len(loc.photo_urls) for loc in ordered),
        locations_with_photos=sum(1 for loc in ordered if loc.photo_urls),
        country_count=count_countries(ordered),
        recent_visit_count=sum(
            1 for loc in ordered if loc.visited_date is not None and loc.visited_date > cutoff
        ),
        latest_place=short_name(newest.name) if newest else None,
        last_visit_date=newest.visited_date if newest else None,
        recent_locations=tuple(ordered[:RECENT_LOCATION_COUNT]),
    )


def share_text(locations: Iterable[Location]) -> str:
    """Text posted alongside a shared map image."""
    items = list(locations)
    return (
        f"Check out my travel map! I've visited {len(items)} locations "
        f"across {count_countries(items)} countries 🌍✈️"
    )


def _encode_component(value: str) -> str:
    # Same escaping as JavaScript's encodeURIComponent.
    return quote(value, safe="!*'()")


def share_links(locations: Iterable[Location], page_url: str) -> dict[str, str]:
    """Twitter and Facebook share URLs for the map page."""
    return {
        "twitter": f"https://twitter.com/intent/tweet?text={_encode_component(share_text(locations))}",
        "facebook": f"https://www.facebook.com/sharer/sharer.php?u={_encode_component(page_url)}",
    }
