"""Unit tests: map_core map surface (markers, clicks, search, viewport)."""
from datetime import date

import pytest

from map_core.form import FormMode
from map_core.geocoding import GeocodeResult
from map_core.map_surface import SEARCH_ZOOM, SINGLE_LOCATION_ZOOM
from map_core.workspace import MapWorkspace

pytestmark = pytest.mark.unit


class BrokenWidget:
    """Widget whose every call fails."""

    def add_marker(self, *args, **kwargs):
        raise RuntimeError("widget gone")

    def remove_marker(self, handle):
        raise RuntimeError("widget gone")

    def fly_to(self, *args):
        raise RuntimeError("widget gone")

    def fit_bounds(self, *args):
        raise RuntimeError("widget gone")

    def set_style(self, style_id):
        raise RuntimeError("widget gone")


@pytest.mark.asyncio
async def test_markers_follow_store_and_filter(workspace, widget, ten_locations):
    """One marker per visible location, coloured by category."""
    await workspace.start()
    assert workspace.surface.marker_count == 10
    colors = {m.label: m.color for m in widget.saved_markers()}
    assert colors["Yosemite, USA"] == "#10b981"
    workspace.category_filter.toggle("nature")
    assert workspace.surface.marker_count == 7
    assert len(widget.saved_markers()) == 7


@pytest.mark.asyncio
async def test_marker_click_opens_panel_with_latest_copy(workspace, widget, records):
    """The click handler resolves the id against the current store snapshot."""
    loc = records.seed("Fjord, Norway", 60.0, 7.0)
    await workspace.start()
    [marker] = widget.saved_markers()
    await records.update_location(loc.id, {"notes": "edited elsewhere"})
    await workspace.store.refresh()
    [marker] = widget.saved_markers()
    assert widget.click_marker(marker.handle) is True
    assert workspace.panel.location.notes == "edited elsewhere"


@pytest.mark.asyncio
async def test_map_click_opens_form_and_suggests_name(workspace, geocoder):
    """Map click opens create mode at the point; reverse lookup fills the blank name."""
    geocoder.reverse_result = GeocodeResult("Montmartre, Paris, France", 48.886, 2.343)
    await workspace.surface.handle_map_click(48.886, 2.343)
    assert workspace.form.mode is FormMode.CREATE
    assert workspace.form.coordinates == (48.886, 2.343)
    assert workspace.form.name == "Montmartre, Paris, France"


@pytest.mark.asyncio
async def test_map_click_survives_geocoder_failure(workspace, geocoder):
    """Reverse geocoding errors are logged; the form stays open with a blank name."""
    geocoder.error = RuntimeError("rate limited")
    await workspace.surface.handle_map_click(1.0, 2.0)
    assert workspace.form.is_open
    assert workspace.form.name == ""


@pytest.mark.asyncio
async def test_search_flies_and_drops_transient_marker(workspace, widget):
    """Search flies to the first result and shows exactly one transient marker."""
    assert await workspace.surface.search("Paris") is True
    assert await workspace.surface.search("paris ") is True
    assert widget.center == (48.8566, 2.3522)
    assert widget.zoom == SEARCH_ZOOM
    [marker] = widget.transient_markers()
    assert marker.label == "Paris, France"


@pytest.mark.asyncio
async def test_search_no_result(workspace, widget, geocoder):
    assert await workspace.surface.search("Atlantis") is False
    assert await workspace.surface.search("   ") is False
    geocoder.error = RuntimeError("down")
    assert await workspace.surface.search("Paris") is False
    assert widget.transient_markers() == []


@pytest.mark.asyncio
async def test_transient_marker_survives_rerender(workspace, widget):
    """Store/filter re-renders only rebuild saved markers."""
    await workspace.surface.search("Paris")
    workspace.category_filter.toggle("food")
    assert len(widget.transient_markers()) == 1


@pytest.mark.asyncio
async def test_widget_failures_degrade(user_session, records, blobs, geocoder):
    """A failing widget is logged, never raised."""
    records.seed("A", 1.0, 1.0)
    ws = MapWorkspace(user_session, records, blobs, geocoder, BrokenWidget())
    assert await ws.start() is True
    assert ws.surface.marker_count == 0
    assert await ws.surface.search("Paris") is False
    assert ws.surface.fit_to_locations() is False


@pytest.mark.asyncio
async def test_set_style(workspace, widget, records):
    records.seed("A", 1.0, 1.0)
    await workspace.start()
    workspace.surface.set_style("dark-v11")
    assert widget.style == "dark-v11"
    assert workspace.surface.marker_count == 1
    with pytest.raises(ValueError):
        workspace.surface.set_style("neon")


@pytest.mark.asyncio
async def test_fit_to_locations(workspace, widget, records):
    assert workspace.surface.fit_to_locations() is False
    records.seed("A", 10.0, 20.0, visited_date=date(2020, 1, 1))
    await workspace.start()
    assert workspace.surface.fit_to_locations() is True
    assert widget.center == (10.0, 20.0)
    assert widget.zoom == SINGLE_LOCATION_ZOOM
    records.seed("B", 20.0, 40.0)
    await workspace.start()
    workspace.surface.fit_to_locations()
    assert widget.bounds == pytest.approx((9.0, 18.0, 21.0, 42.0))
