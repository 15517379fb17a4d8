"""Client-side category filter over the location store."""
from typing import Callable, Iterable

from map_core.categories import CATEGORY_IDS, display_category
from map_core.location import Location

Listener = Callable[[], None]


class CategoryFilter:
    """Active category set; all tags active by default. Never calls the service."""

    def __init__(self) -> None:
        self._active: set[str] = set(CATEGORY_IDS)
        self._listeners: list[Listener] = []

    @property
    def active(self) -> frozenset[str]:
        return frozenset(self._active)

    def is_active(self, tag: str) -> bool:
        return tag in self._active

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def toggle(self, tag: str) -> None:
        """Flip membership of tag. Unknown tags raise ValueError."""
        if tag not in CATEGORY_IDS:
            raise ValueError(f"unknown category '{tag}'")
        if tag in self._active:
            self._active.remove(tag)
        else:
            self._active.add(tag)
        self._changed()

    def show_all(self) -> None:
        self._active = set(CATEGORY_IDS)
        self._changed()

    def show_only(self, tags: Iterable[str]) -> None:
        """Make exactly tags active. Unknown tags raise ValueError and leave the set unchanged."""
        wanted = set(tags)
        unknown = sorted(wanted - CATEGORY_IDS)
        if unknown:
            raise ValueError(f"unknown category '{unknown[0]}'")
        self._active = wanted
        self._changed()

    def apply(self, locations: Iterable[Location]) -> list[Location]:
        """Locations whose display category is active, order preserved."""
        return [loc for loc in locations if display_category(loc.category) in self._active]

    def _changed(self) -> None:
        for listener in list(self._listeners):
            listener()
