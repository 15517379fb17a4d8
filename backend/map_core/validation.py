"""Validate location form input before anything is sent to the service."""
from datetime import date
from typing import Any, Optional

from map_core.categories import CATEGORY_IDS, DEFAULT_CATEGORY


def _get_str(value: Any) -> str | None:
    """Stripped string; empty string treated as missing."""
    if value is None:
        return None
    s = str(value).strip()
    return s if s else None


def _parse_date(value: Any) -> tuple[bool, date | None]:
    """Parse an ISO calendar date. Returns (ok, parsed); missing is ok with None."""
    if isinstance(value, date):
        return True, value
    s = _get_str(value)
    if s is None:
        return True, None
    try:
        return True, date.fromisoformat(s)
    except ValueError:
        return False, None


def validate_coordinates(latitude: Any, longitude: Any) -> str:
    """Return an error message, or empty string if the pair is a valid point."""
    try:
        lat = float(latitude)
        lng = float(longitude)
    except (TypeError, ValueError):
        return "coordinates must be numeric"
    if not -90.0 <= lat <= 90.0:
        return "latitude must be between -90 and 90"
    if not -180.0 <= lng <= 180.0:
        return "longitude must be between -180 and 180"
    return ""


def validate_location_input(
    *,
    name: Any,
    category: Any = None,
    visited_date: Any = None,
    notes: Any = None,
    album_link: Any = None,
    coordinates: Optional[tuple[float, float]] = None,
    require_coordinates: bool = False,
) -> tuple[bool, dict[str, Any] | None, str]:
    """
    Validate location fields. Returns (ok, normalized_dict, error_message).
    normalized_dict has name, category, visited_date (date or None), notes, album_link,
    and latitude/longitude when coordinates were given.
    """
    clean_name = _get_str(name)
    if not clean_name:
        return False, None, "name is required"

    clean_category = _get_str(category) or DEFAULT_CATEGORY
    if clean_category not in CATEGORY_IDS:
        return False, None, f"unknown category '{clean_category}'"

    ok, parsed_date = _parse_date(visited_date)
    if not ok:
        return False, None, "visited_date must be a date (YYYY-MM-DD)"

    normalized: dict[str, Any] = {
        "name": clean_name,
        "category": clean_category,
        "visited_date": parsed_date,
        # Notes keep their formatting; only a blank value becomes None.
        "notes": str(notes) if _get_str(notes) else None,
        "album_link": _get_str(album_link),
    }

    if coordinates is None:
        if require_coordinates:
            return False, None, "choose a point on the map first"
        return True, normalized, ""

    err = validate_coordinates(*coordinates)
    if err:
        return False, None, err
    normalized["latitude"] = float(coordinates[0])
    normalized["longitude"] = float(coordinates[1])
    return True, normalized, ""
