"""Map widget contract and an in-process implementation."""
import itertools
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol

from map_core.categories import DEFAULT_MAP_STYLE

MarkerHandle = int
ClickHandler = Callable[[], Any]

# Initial viewport: New York at world zoom.
DEFAULT_CENTER = (40.7128, -74.006)
DEFAULT_ZOOM = 2.0


class MapWidget(Protocol):
    """Operations the map surface needs from the rendering widget."""

    def add_marker(
        self,
        latitude: float,
        longitude: float,
        *,
        color: str,
        label: str,
        on_click: ClickHandler,
        transient: bool = False,
    ) -> MarkerHandle:
        ...

    def remove_marker(self, handle: MarkerHandle) -> None:
        ...

    def fly_to(self, latitude: float, longitude: float, zoom: float) -> None:
        ...

    def fit_bounds(self, south: float, west: float, north: float, east: float) -> None:
        ...

    def set_style(self, style_id: str) -> None:
        ...


@dataclass
class Marker:
    handle: MarkerHandle
    latitude: float
    longitude: float
    color: str
    label: str
    on_click: ClickHandler
    transient: bool = False


class HeadlessMapWidget:
    """
    Widget that keeps markers and viewport in memory. Used server-side and to drive
    the workflow without a browser; click_marker() stands in for a user click.
    """

    def __init__(self, style: str = DEFAULT_MAP_STYLE) -> None:
        self.style = style
        self.center: tuple[float, float] = DEFAULT_CENTER
        self.zoom: float = DEFAULT_ZOOM
        self.bounds: Optional[tuple[float, float, float, float]] = None
        self.markers: dict[MarkerHandle, Marker] = {}
        self._handles = itertools.count(1)

    def add_marker(
        self,
        latitude: float,
        longitude: float,
        *,
        color: str,
        label: str,
        on_click: ClickHandler,
        transient: bool = False,
    ) -> MarkerHandle:
        handle = next(self._handles)
        self.markers[handle] = Marker(handle, latitude, longitude, color, label, on_click, transient)
        return handle

    def remove_marker(self, handle: MarkerHandle) -> None:
        self.markers.pop(handle, None)

    def fly_to(self, latitude: float, longitude: float, zoom: float) -> None:
        self.center = (latitude, longitude)
        self.zoom = zoom

    def fit_bounds(self, south: float, west: float, north: float, east: float) -> None:
        self.bounds = (south, west, north, east)
        self.center = ((south + north) / 2, (west + east) / 2)

    def set_style(self, style_id: str) -> None:
        self.style = style_id

    def saved_markers(self) -> list[Marker]:
        """Markers backed by persisted locations."""
        return [m for m in self.markers.values() if not m.transient]

    def transient_markers(self) -> list[Marker]:
        return [m for m in self.markers.values() if m.transient]

    def click_marker(self, handle: MarkerHandle) -> Any:
        """Invoke the marker's click handler. Unknown handles raise KeyError."""
        return self.markers[handle].on_click()
