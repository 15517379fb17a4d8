"""
Map surface: keeps one marker per visible location on the widget and turns map,
marker and search interactions into form/panel transitions.

Markers are rebuilt from scratch on every store or filter change rather than
diffed by id; location counts are personal-log sized.
"""
from __future__ import annotations

import logging
from typing import Optional

from map_core.categories import DEFAULT_MAP_STYLE, MAP_STYLE_IDS, category_info
from map_core.category_filter import CategoryFilter
from map_core.detail_panel import DetailPanel
from map_core.export import ExportOptions, render_map_image
from map_core.form import LocationForm
from map_core.geocoding import GeocodeResult, Geocoder
from map_core.location import Location
from map_core.store import LocationStore
from map_core.widget import MapWidget, MarkerHandle

LOG = logging.getLogger(__name__)

SEARCH_ZOOM = 12.0
SINGLE_LOCATION_ZOOM = 10.0
# Fraction of the span added on each side when fitting the viewport.
FIT_PADDING = 0.1

TRANSIENT_COLOR = "#f97316"


class MapSurface:
    """Owns the widget reference and the marker bookkeeping for it."""

    def __init__(
        self,
        widget: MapWidget,
        store: LocationStore,
        category_filter: CategoryFilter,
        form: LocationForm,
        panel: DetailPanel,
        geocoder: Geocoder,
    ) -> None:
        self.widget = widget
        self._store = store
        self._filter = category_filter
        self._form = form
        self._panel = panel
        self._geocoder = geocoder
        self._markers: dict[str, MarkerHandle] = {}
        self._transient: Optional[MarkerHandle] = None
        self.style = DEFAULT_MAP_STYLE
        store.add_listener(self.render)
        category_filter.add_listener(self.render)

    def visible_locations(self) -> list[Location]:
        return self._filter.apply(self._store.locations)

    @property
    def marker_count(self) -> int:
        return len(self._markers)

    @property
    def has_transient_marker(self) -> bool:
        return self._transient is not None

    # --- reconciliation ---

    def render(self) -> int:
        """Tear down every saved marker and add one per visible location. Returns the count."""
        for location_id, handle in self._markers.items():
            try:
                self.widget.remove_marker(handle)
            except Exception:
                LOG.exception("Map widget failed to remove marker for %s", location_id)
        self._markers = {}
        for loc in self.visible_locations():
            try:
                handle = self.widget.add_marker(
                    loc.latitude,
                    loc.longitude,
                    color=category_info(loc.category).color,
                    label=loc.name,
                    on_click=self._marker_click_handler(loc.id),
                )
            except Exception:
                LOG.exception("Map widget failed to add marker for %s", loc.id)
                continue
            self._markers[loc.id] = handle
        return len(self._markers)

    def _marker_click_handler(self, location_id: str):
        # Only the id is captured; the record is looked up at click time.
        return lambda: self.handle_marker_click(location_id)

    # --- interactions ---

    def handle_marker_click(self, location_id: str) -> bool:
        """Open the detail panel with the store's current copy of the location."""
        return self._panel.open(location_id)

    async def handle_map_click(self, latitude: float, longitude: float) -> None:
        """Open the form at the clicked point, then try to name it via reverse geocoding."""
        self._clear_transient()
        point = (latitude, longitude)
        self._form.open_create(point)
        try:
            result = await self._geocoder.reverse(latitude, longitude)
        except Exception:
            LOG.exception("Reverse geocoding failed at %s,%s", latitude, longitude)
            return
        if result is not None:
            self._form.suggest_name(result.place_name, point)

    async def search(self, query: str) -> bool:
        """Fly to the first match for query and drop a transient marker there."""
        if not query or not query.strip():
            return False
        try:
            result = await self._geocoder.forward(query)
        except Exception:
            LOG.exception("Search failed for %r", query)
            return False
        if result is None:
            LOG.info("Search found nothing for %r", query)
            return False
        self._clear_transient()
        try:
            self._transient = self.widget.add_marker(
                result.latitude,
                result.longitude,
                color=TRANSIENT_COLOR,
                label=result.place_name,
                on_click=lambda: self._open_from_search(result),
                transient=True,
            )
            self.widget.fly_to(result.latitude, result.longitude, SEARCH_ZOOM)
        except Exception:
            LOG.exception("Map widget failed to show search result %r", result.place_name)
            return False
        return True

    def _open_from_search(self, result: GeocodeResult) -> None:
        self._clear_transient()
        self._form.open_create((result.latitude, result.longitude), name=result.place_name)

    def _clear_transient(self) -> None:
        if self._transient is None:
            return
        handle, self._transient = self._transient, None
        try:
            self.widget.remove_marker(handle)
        except Exception:
            LOG.exception("Map widget failed to remove search marker")

    # --- viewport and style ---

    def set_style(self, style_id: str) -> None:
        """Switch base map style and put the markers back on it."""
        if style_id not in MAP_STYLE_IDS:
            raise ValueError(f"unknown map style '{style_id}'")
        try:
            self.widget.set_style(style_id)
        except Exception:
            LOG.exception("Map widget failed to switch style to %s", style_id)
            return
        self.style = style_id
        self.render()

    def fit_to_locations(self) -> bool:
        """Move the viewport to cover every visible location."""
        visible = self.visible_locations()
        if not visible:
            return False
        lats = [loc.latitude for loc in visible]
        lngs = [loc.longitude for loc in visible]
        south, north = min(lats), max(lats)
        west, east = min(lngs), max(lngs)
        try:
            if south == north and west == east:
                self.widget.fly_to(south, west, SINGLE_LOCATION_ZOOM)
                return True
            lat_pad = (north - south) * FIT_PADDING
            lng_pad = (east - west) * FIT_PADDING
            self.widget.fit_bounds(
                max(south - lat_pad, -90.0),
                max(west - lng_pad, -180.0),
                min(north + lat_pad, 90.0),
                min(east + lng_pad, 180.0),
            )
        except Exception:
            LOG.exception("Map widget failed to fit viewport")
            return False
        return True

    def export_image(self, options: ExportOptions, owner_email: str = "") -> bytes:
        """Render the visible locations to an image."""
        return render_map_image(self.visible_locations(), options, owner_email)
