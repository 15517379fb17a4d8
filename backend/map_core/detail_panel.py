"""Read-only detail panel for one location, with photo carousel, edit and delete."""
import logging
from typing import Iterator, Optional

from map_core.form import LocationForm
from map_core.location import Location
from map_core.remote import RecordClient
from map_core.store import LocationStore

LOG = logging.getLogger(__name__)


class PhotoCarousel:
    """Finite, manually navigated photo sequence. Wraps at both ends; never auto-advances."""

    def __init__(self, urls: list[str]) -> None:
        self._urls = list(urls)
        self.index = 0

    def __len__(self) -> int:
        return len(self._urls)

    def __iter__(self) -> Iterator[str]:
        return iter(self._urls)

    @property
    def current(self) -> Optional[str]:
        return self._urls[self.index] if self._urls else None

    def next(self) -> Optional[str]:
        if self._urls:
            self.index = (self.index + 1) % len(self._urls)
        return self.current

    def previous(self) -> Optional[str]:
        if self._urls:
            self.index = len(self._urls) - 1 if self.index == 0 else self.index - 1
        return self.current

    def go_to(self, index: int) -> Optional[str]:
        if not 0 <= index < len(self._urls):
            raise IndexError(f"photo index {index} out of range")
        self.index = index
        return self.current

    def reset(self) -> None:
        self.index = 0


class DetailPanel:
    """Shows the latest store copy of one location. Delete needs request then confirm."""

    def __init__(self, store: LocationStore, records: RecordClient, form: LocationForm) -> None:
        self._store = store
        self._records = records
        self._form = form
        self.location: Optional[Location] = None
        self.carousel = PhotoCarousel([])
        self.confirming_delete = False
        self.deleting = False
        self.error = ""
        store.add_listener(self._on_store_changed)

    @property
    def is_open(self) -> bool:
        return self.location is not None

    def open(self, location_id: str) -> bool:
        """Open for a location from the latest store snapshot."""
        location = self._store.get_by_id(location_id)
        if location is None:
            LOG.info("Detail panel: location %s no longer in store", location_id)
            return False
        self._show(location)
        return True

    def _show(self, location: Location) -> None:
        self.location = location
        self.carousel = PhotoCarousel(location.photo_urls)
        self.confirming_delete = False
        self.error = ""

    def close(self) -> None:
        self.location = None
        self.carousel = PhotoCarousel([])
        self.confirming_delete = False
        self.error = ""

    def _on_store_changed(self) -> None:
        """Follow the refreshed record; close if it is gone."""
        if self.location is None:
            return
        latest = self._store.get_by_id(self.location.id)
        if latest is None:
            self.close()
        elif latest != self.location:
            self.location = latest
            self.carousel = PhotoCarousel(latest.photo_urls)

    def edit(self) -> bool:
        """Hand the record to the form in edit mode and close the panel."""
        if self.location is None:
            return False
        self._form.open_edit(self.location)
        self.close()
        return True

    def request_delete(self) -> None:
        if self.location is not None:
            self.confirming_delete = True

    def cancel_delete(self) -> None:
        self.confirming_delete = False

    async def confirm_delete(self) -> bool:
        """Delete after confirmation. On failure the panel stays open showing the error."""
        if self.location is None or not self.confirming_delete or self.deleting:
            return False
        location_id = self.location.id
        self.deleting = True
        self.error = ""
        try:
            await self._records.delete_location(location_id)
        except Exception as e:
            self.error = str(e) or type(e).__name__
            self.confirming_delete = False
            LOG.warning("Delete of location %s failed: %s", location_id, self.error)
            return False
        finally:
            self.deleting = False
        LOG.info("Location %s deleted", location_id)
        self.close()
        await self._store.notify_changed()
        return True
