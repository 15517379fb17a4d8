"""
Location form: create/edit state, client-side validation and the submit protocol.

Submit uploads new photos concurrently (all-or-nothing), composes photo_urls,
inserts or updates the record, then closes and asks the store to refresh. Any
failure keeps the form open with the error text and the user's input intact.
"""
from __future__ import annotations

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional

from map_core.categories import DEFAULT_CATEGORY, display_category
from map_core.location import Location, UserSession
from map_core.remote import BlobClient, RecordClient
from map_core.store import LocationStore
from map_core.validation import validate_location_input

LOG = logging.getLogger(__name__)


class FormMode(str, Enum):
    CLOSED = "closed"
    CREATE = "create"
    EDIT = "edit"


@dataclass
class PhotoFile:
    """A photo picked by the user, not yet uploaded."""

    filename: str
    content: bytes
    content_type: str = "image/jpeg"


def photo_storage_path(user_id: str, filename: str, now_ms: Optional[int] = None) -> str:
    """Storage path under the user's prefix with a collision-resistant name, keeping the extension."""
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else "jpg"
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{user_id}/{stamp}-{uuid.uuid4().hex[:8]}.{ext}"


class LocationForm:
    """State machine: closed -> create|edit -> (error -> retry)* -> closed."""

    def __init__(
        self,
        session: UserSession,
        records: RecordClient,
        blobs: BlobClient,
        store: LocationStore,
    ) -> None:
        self.session = session
        self._records = records
        self._blobs = blobs
        self._store = store
        self.mode = FormMode.CLOSED
        # Bumped on every open/close; a save only updates the session it started in.
        self._token = 0
        self._reset()

    def _reset(self) -> None:
        self._token += 1
        self.submitting = False
        self.location_id: Optional[str] = None
        self.coordinates: Optional[tuple[float, float]] = None
        self.name = ""
        self.category = DEFAULT_CATEGORY
        self.visited_date = ""
        self.notes = ""
        self.album_link = ""
        self.new_photos: list[PhotoFile] = []
        self.existing_photo_urls: list[str] = []
        self.error = ""

    @property
    def is_open(self) -> bool:
        return self.mode is not FormMode.CLOSED

    # --- transitions ---

    def open_create(self, coordinates: Optional[tuple[float, float]] = None, name: str = "") -> None:
        """Open empty in create mode, optionally at a point and with a suggested name."""
        self._reset()
        self.mode = FormMode.CREATE
        self.coordinates = coordinates
        self.name = name or ""

    def open_edit(self, location: Location) -> None:
        """Open in edit mode populated from the record."""
        self._reset()
        self.mode = FormMode.EDIT
        self.location_id = location.id
        self.coordinates = location.coordinates
        self.name = location.name
        self.category = display_category(location.category)
        self.visited_date = location.visited_date.isoformat() if location.visited_date else ""
        self.notes = location.notes or ""
        self.album_link = location.album_link or ""
        self.existing_photo_urls = list(location.photo_urls)

    def close(self) -> None:
        """Close and drop all input, including picked files."""
        self._reset()
        self.mode = FormMode.CLOSED

    def suggest_name(self, name: str, coordinates: tuple[float, float]) -> bool:
        """Fill a still-blank name from a late reverse lookup for the same point."""
        if self.mode is not FormMode.CREATE or self.coordinates != coordinates:
            return False
        if self.name.strip() or not name:
            return False
        self.name = name
        return True

    # --- photos ---

    def add_photos(self, files: Iterable[PhotoFile]) -> None:
        self.new_photos.extend(files)

    def remove_new_photo(self, index: int) -> None:
        del self.new_photos[index]

    def remove_existing_photo(self, url: str) -> bool:
        """Drop one existing photo from the working set (edit mode)."""
        if url in self.existing_photo_urls:
            self.existing_photo_urls.remove(url)
            return True
        return False

    # --- submit ---

    def validate(self) -> tuple[bool, dict[str, Any] | None, str]:
        return validate_location_input(
            name=self.name,
            category=self.category,
            visited_date=self.visited_date,
            notes=self.notes,
            album_link=self.album_link,
            coordinates=self.coordinates if self.mode is FormMode.CREATE else None,
            require_coordinates=self.mode is FormMode.CREATE,
        )

    async def _upload_photos(self, photos: list[PhotoFile]) -> list[str]:
        """Upload every photo concurrently; the first failure fails the batch."""
        if not photos:
            return []
        uploads = [
            self._blobs.upload_photo(
                photo_storage_path(self.session.user_id, photo.filename),
                photo.content,
                photo.content_type,
            )
            for photo in photos
        ]
        return list(await asyncio.gather(*uploads))

    async def submit(self) -> bool:
        """
        Run the submit protocol. Returns True when saved.

        If the form is closed or reopened while the save is in flight, the result
        no longer touches the form; the store is still refreshed on success.
        """
        if not self.is_open or self.submitting:
            return False
        self.error = ""
        ok, normalized, err = self.validate()
        if not ok or normalized is None:
            self.error = err
            return False

        # Everything the save needs is taken from this form session up front.
        token = self._token
        mode = self.mode
        location_id = self.location_id
        existing = list(self.existing_photo_urls)
        photos = list(self.new_photos)
        self.submitting = True
        try:
            uploaded = await self._upload_photos(photos)
            if mode is FormMode.CREATE:
                normalized["photo_urls"] = uploaded
                saved = await self._records.insert_location(normalized)
            else:
                normalized["photo_urls"] = existing + uploaded
                saved = await self._records.update_location(location_id, normalized)
        except Exception as e:
            message = str(e) or type(e).__name__
            LOG.warning("Location %s failed: %s", mode.value, message)
            if token == self._token:
                self.error = message
            return False
        finally:
            if token == self._token:
                self.submitting = False

        LOG.info("Location %s saved (%s)", saved.id, mode.value)
        if token == self._token:
            self.close()
        else:
            LOG.debug("Form reopened while saving %s; leaving the new session open", saved.id)
        await self._store.notify_changed()
        return True
