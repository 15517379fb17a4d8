"""In-memory location store: the client's copy of the current user's locations."""
import logging
from typing import Callable, Optional

from map_core.location import Location, sort_by_visited_date
from map_core.remote import RecordClient

LOG = logging.getLogger(__name__)

Listener = Callable[[], None]


class LocationStore:
    """
    Holds the user's locations ordered by visited_date (newest first, undated last).
    Only refresh() replaces the list; there are no optimistic patches.
    """

    def __init__(self, records: RecordClient) -> None:
        self._records = records
        self._locations: list[Location] = []
        self._listeners: list[Listener] = []
        self.last_error: str = ""

    @property
    def locations(self) -> list[Location]:
        """Snapshot of the held list."""
        return list(self._locations)

    def __len__(self) -> int:
        return len(self._locations)

    def get_by_id(self, location_id: str) -> Optional[Location]:
        """Location from the latest snapshot or None."""
        for loc in self._locations:
            if loc.id == location_id:
                return loc
        return None

    def add_listener(self, listener: Listener) -> None:
        """Call listener after every successful refresh."""
        self._listeners.append(listener)

    async def refresh(self) -> bool:
        """
        Fetch all locations and replace the list wholesale. On failure keep the
        previous list, set last_error and return False.
        """
        try:
            fetched = await self._records.list_locations()
        except Exception as e:
            self.last_error = str(e) or type(e).__name__
            LOG.warning("Location refresh failed, keeping %d cached: %s", len(self._locations), self.last_error)
            return False
        self._locations = sort_by_visited_date(fetched)
        self.last_error = ""
        LOG.debug("Location store refreshed: %d locations", len(self._locations))
        for listener in list(self._listeners):
            listener()
        return True

    async def notify_changed(self) -> bool:
        """Called after a successful create/update/delete."""
        return await self.refresh()
