"""
MapWorkspace: composition root for one user session and one map widget.

Wires a single store, filter, form, panel and surface together so that every
mutation flows through the store refresh and back into the markers.
"""
import logging
from datetime import date
from typing import Optional

from map_core.category_filter import CategoryFilter
from map_core.detail_panel import DetailPanel
from map_core.export import ExportOptions
from map_core.form import LocationForm
from map_core.geocoding import Geocoder
from map_core.location import UserSession
from map_core.map_surface import MapSurface
from map_core.remote import BlobClient, RecordClient
from map_core.stats import JourneyStats, compute_stats
from map_core.store import LocationStore
from map_core.widget import HeadlessMapWidget, MapWidget

LOG = logging.getLogger(__name__)


class MapWorkspace:
    def __init__(
        self,
        session: UserSession,
        records: RecordClient,
        blobs: BlobClient,
        geocoder: Geocoder,
        widget: Optional[MapWidget] = None,
    ) -> None:
        self.session = session
        self.store = LocationStore(records)
        self.category_filter = CategoryFilter()
        self.form = LocationForm(session, records, blobs, self.store)
        self.panel = DetailPanel(self.store, records, self.form)
        self.surface = MapSurface(
            widget if widget is not None else HeadlessMapWidget(),
            self.store,
            self.category_filter,
            self.form,
            self.panel,
            geocoder,
        )

    @classmethod
    def from_client(cls, client, widget: Optional[MapWidget] = None) -> "MapWorkspace":
        """Build from one client that provides records, blobs and geocoding (e.g. ApiClient)."""
        return cls(client.session, client, client, client, widget)

    @property
    def widget(self) -> MapWidget:
        return self.surface.widget

    async def start(self) -> bool:
        """Initial load. Markers are drawn by the store listener on success."""
        ok = await self.store.refresh()
        if ok:
            LOG.info("Workspace for %s loaded %d locations", self.session.user_id, len(self.store))
        return ok

    def stats(self, today: Optional[date] = None) -> JourneyStats:
        """Statistics over all of the user's locations, ignoring the category filter."""
        return compute_stats(self.store.locations, today)

    def export_image(self, options: Optional[ExportOptions] = None) -> bytes:
        """Export the currently visible locations."""
        return self.surface.export_image(options or ExportOptions(), self.session.email)
