"""Client-side location record and session identity."""
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, Optional

from map_core.categories import DEFAULT_CATEGORY


@dataclass(frozen=True)
class UserSession:
    """Current user as provided by the identity collaborator."""

    user_id: str
    email: str = ""


@dataclass
class Location:
    """A pinned memory as cached by the client. Owned and assigned ids by the service."""

    id: str
    owner_id: str
    name: str
    latitude: float
    longitude: float
    category: str = DEFAULT_CATEGORY
    visited_date: Optional[date] = None
    notes: Optional[str] = None
    album_link: Optional[str] = None
    photo_urls: list[str] = field(default_factory=list)

    @property
    def coordinates(self) -> tuple[float, float]:
        return (self.latitude, self.longitude)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Location":
        """Build from a LocationResponse JSON object."""
        raw_date = data.get("visited_date")
        return cls(
            id=data["id"],
            owner_id=data["owner_id"],
            name=data["name"],
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
            category=data.get("category") or DEFAULT_CATEGORY,
            visited_date=date.fromisoformat(raw_date) if raw_date else None,
            notes=data.get("notes"),
            album_link=data.get("album_link"),
            photo_urls=list(data.get("photo_urls") or []),
        )


def sort_by_visited_date(locations: Iterable[Location]) -> list[Location]:
    """Newest visit first; undated records last, keeping their incoming order."""
    items = list(locations)
    dated = [loc for loc in items if loc.visited_date is not None]
    undated = [loc for loc in items if loc.visited_date is None]
    dated.sort(key=lambda loc: loc.visited_date, reverse=True)
    return dated + undated


def country_of(name: str) -> str:
    """Country part of a place name: the text after the last comma."""
    return name.split(",")[-1].strip()


def short_name(name: str) -> str:
    """Place part of a name: the text before the first comma."""
    return name.split(",")[0].strip()
