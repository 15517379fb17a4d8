"""Location categories and map styles shared by the API and the map workflow."""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Category:
    """A category tag with its display name, icon and marker colour."""

    id: str
    name: str
    icon: str
    color: str


DEFAULT_CATEGORY = "general"

CATEGORIES: tuple[Category, ...] = (
    Category("general", "General", "📍", "#6b7280"),
    Category("historical", "Historical", "🏛️", "#f59e0b"),
    Category("food", "Food & Dining", "🍽️", "#ef4444"),
    Category("nature", "Nature", "🏞️", "#10b981"),
    Category("beach", "Beach", "🏖️", "#3b82f6"),
    Category("urban", "Urban", "🏙️", "#8b5cf6"),
    Category("entertainment", "Entertainment", "🎭", "#ec4899"),
    Category("shopping", "Shopping", "🛍️", "#6366f1"),
    Category("accommodation", "Hotels", "🏨", "#059669"),
    Category("photo", "Photo Spot", "📸", "#f59e0b"),
)

CATEGORY_IDS: frozenset[str] = frozenset(c.id for c in CATEGORIES)

_BY_ID: dict[str, Category] = {c.id: c for c in CATEGORIES}


def category_info(tag: Optional[str]) -> Category:
    """Return the category for tag; unknown or missing tags display as general."""
    return _BY_ID.get(tag or "", _BY_ID[DEFAULT_CATEGORY])


def display_category(tag: Optional[str]) -> str:
    """Tag a record is shown (and filtered) under."""
    return category_info(tag).id


@dataclass(frozen=True)
class MapStyle:
    id: str
    name: str
    icon: str


DEFAULT_MAP_STYLE = "outdoors-v12"

MAP_STYLES: tuple[MapStyle, ...] = (
    MapStyle("outdoors-v12", "Outdoors", "🏔️"),
    MapStyle("streets-v12", "Streets", "🏙️"),
    MapStyle("satellite-v9", "Satellite", "🛰️"),
    MapStyle("light-v11", "Light", "☀️"),
    MapStyle("dark-v11", "Dark", "🌙"),
)

MAP_STYLE_IDS: frozenset[str] = frozenset(s.id for s in MAP_STYLES)
