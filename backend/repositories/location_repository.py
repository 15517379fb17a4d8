"""Location repository: owner-scoped list, get, create, update, delete."""
from datetime import date
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from models.location import Location

# Fields a PATCH may change; coordinates and owner are fixed at creation.
MUTABLE_FIELDS = ("name", "category", "visited_date", "notes", "album_link", "photo_urls")


def list_locations(session: Session, owner_id: str) -> list[Location]:
    """Return the owner's locations, newest visit first, undated last."""
    result = session.execute(
        select(Location)
        .where(Location.owner_id == owner_id)
        .order_by(Location.visited_date.desc().nulls_last(), Location.created_at)
    )
    return list(result.scalars().all())


def get_location(session: Session, owner_id: str, location_id: str) -> Optional[Location]:
    """Return the owner's location by id, or None (also for another owner's record)."""
    loc = session.get(Location, location_id)
    if loc is None or loc.owner_id != owner_id:
        return None
    return loc


def create_location(
    session: Session,
    *,
    owner_id: str,
    name: str,
    latitude: float,
    longitude: float,
    category: str = "general",
    visited_date: Optional[date] = None,
    notes: Optional[str] = None,
    album_link: Optional[str] = None,
    photo_urls: Optional[list[str]] = None,
) -> Location:
    """Create a location, commit, and return it."""
    loc = Location(
        owner_id=owner_id,
        name=name,
        latitude=latitude,
        longitude=longitude,
        category=category,
        visited_date=visited_date,
        notes=notes,
        album_link=album_link,
        photo_urls=list(photo_urls or []),
    )
    session.add(loc)
    session.commit()
    session.refresh(loc)
    return loc


def update_location(
    session: Session, owner_id: str, location_id: str, fields: dict[str, Any]
) -> Optional[Location]:
    """Apply mutable fields to the owner's location. Returns None if not found."""
    loc = get_location(session, owner_id, location_id)
    if loc is None:
        return None
    for key, value in fields.items():
        if key not in MUTABLE_FIELDS:
            continue
        if key == "photo_urls":
            value = list(value or [])
        setattr(loc, key, value)
    session.commit()
    session.refresh(loc)
    return loc


def delete_location(session: Session, owner_id: str, location_id: str) -> bool:
    """Delete the owner's location by id. Returns True if deleted, False if not found."""
    loc = get_location(session, owner_id, location_id)
    if loc is None:
        return False
    session.delete(loc)
    session.commit()
    return True
