# Set test environment before any application or db imports.
import os
import shutil
import tempfile

os.environ["TESTING"] = "true"
os.environ["TESTING_DATABASE_URL"] = "sqlite:///:memory:"
os.environ["PHOTO_STORAGE_DIR"] = tempfile.mkdtemp(prefix="test_photos_")
os.environ["PUBLIC_BASE_URL"] = "http://testserver"
os.environ.pop("MAPBOX_ACCESS_TOKEN", None)

import asyncio
import uuid
from dataclasses import replace
from datetime import date
from typing import Any, Optional

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from db import SessionLocal, get_db
from main import app
from map_core.geocoding import GeocodeResult
from map_core.location import Location, UserSession
from map_core.remote import ApiClient, RemoteError
from map_core.widget import HeadlessMapWidget
from map_core.workspace import MapWorkspace
from models import Base
from models.location import Location as LocationRow  # noqa: F401 - register with Base
from utils import config

USER_ID = "user-1"
USER_EMAIL = "traveler@example.com"
AUTH_HEADERS = {"X-User-Id": USER_ID, "X-User-Email": USER_EMAIL}


def _get_engine():
    """Engine used by the app (in-memory when TESTING=true)."""
    return SessionLocal.kw["bind"]


@pytest.fixture(scope="session")
def engine():
    """One in-memory engine per test run; create tables once."""
    eng = _get_engine()
    Base.metadata.create_all(eng)
    return eng


@pytest.fixture
def db_session(engine):
    """Function-scoped session; each test runs in a transaction that is rolled back."""
    connection = engine.connect()
    trans = connection.begin()
    session = Session(bind=connection)
    session.begin_nested()
    try:
        yield session
    finally:
        session.close()
        if trans.is_active:
            trans.rollback()
        connection.close()
        # pysqlite may have committed on savepoint release; start the next test empty.
        with engine.begin() as conn:
            for table in reversed(Base.metadata.sorted_tables):
                conn.execute(table.delete())


def _override_get_db(session):
    """Return a generator that yields the given session (for dependency override)."""
    def override():
        yield session
    return override


@pytest.fixture
def client(db_session):
    """API test client signed in as USER_ID; get_db uses the test db_session."""
    app.dependency_overrides[get_db] = _override_get_db(db_session)
    try:
        with TestClient(app) as c:
            c.headers.update(AUTH_HEADERS)
            yield c
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def user_session() -> UserSession:
    return UserSession(user_id=USER_ID, email=USER_EMAIL)


@pytest.fixture
async def api_client(db_session, user_session):
    """Real ApiClient talking to the app in-process over httpx.ASGITransport."""
    app.dependency_overrides[get_db] = _override_get_db(db_session)
    transport = httpx.ASGITransport(app=app)
    try:
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http:
            yield ApiClient(user_session, client=http)
    finally:
        app.dependency_overrides.clear()


# --- in-memory collaborators for the map workflow ---


class FakeRecords:
    """RecordClient keeping one owner's locations in a dict; failures are injected per call."""

    MUTABLE = ("name", "category", "visited_date", "notes", "album_link", "photo_urls")

    def __init__(self, owner_id: str = USER_ID) -> None:
        self.owner_id = owner_id
        self.rows: dict[str, Location] = {}
        self.fail_list: Optional[Exception] = None
        self.fail_insert: Optional[Exception] = None
        self.fail_update: Optional[Exception] = None
        self.fail_delete: Optional[Exception] = None
        self.inserted: list[dict[str, Any]] = []
        self.updated: list[tuple[str, dict[str, Any]]] = []

    def seed(self, name: str, latitude: float = 0.0, longitude: float = 0.0, **fields: Any) -> Location:
        loc = Location(
            id=str(uuid.uuid4()),
            owner_id=self.owner_id,
            name=name,
            latitude=latitude,
            longitude=longitude,
            **fields,
        )
        self.rows[loc.id] = loc
        return loc

    async def list_locations(self) -> list[Location]:
        await asyncio.sleep(0)
        if self.fail_list:
            raise self.fail_list
        return [replace(loc, photo_urls=list(loc.photo_urls)) for loc in self.rows.values()]

    async def insert_location(self, fields: dict[str, Any]) -> Location:
        await asyncio.sleep(0)
        if self.fail_insert:
            raise self.fail_insert
        self.inserted.append(dict(fields))
        return self.seed(
            fields["name"],
            fields["latitude"],
            fields["longitude"],
            category=fields.get("category") or "general",
            visited_date=fields.get("visited_date"),
            notes=fields.get("notes"),
            album_link=fields.get("album_link"),
            photo_urls=list(fields.get("photo_urls") or []),
        )

    async def update_location(self, location_id: str, fields: dict[str, Any]) -> Location:
        await asyncio.sleep(0)
        if self.fail_update:
            raise self.fail_update
        if location_id not in self.rows:
            raise RemoteError("Location not found", status_code=404)
        self.updated.append((location_id, dict(fields)))
        changes = {k: v for k, v in fields.items() if k in self.MUTABLE}
        self.rows[location_id] = replace(self.rows[location_id], **changes)
        return self.rows[location_id]

    async def delete_location(self, location_id: str) -> None:
        await asyncio.sleep(0)
        if self.fail_delete:
            raise self.fail_delete
        if self.rows.pop(location_id, None) is None:
            raise RemoteError("Location not found", status_code=404)


class FakeBlobs:
    """BlobClient storing uploads in memory. fail_at makes the n-th upload (1-based) fail."""

    def __init__(self) -> None:
        self.stored: dict[str, bytes] = {}
        self.attempts = 0
        self.fail_at: Optional[int] = None

    async def upload_photo(self, path: str, content: bytes, content_type: str) -> str:
        self.attempts += 1
        attempt = self.attempts
        await asyncio.sleep(0)
        if attempt == self.fail_at:
            raise RemoteError("Photo storage unavailable", status_code=503)
        self.stored[path] = content
        return f"https://cdn.test/photos/{path}"


class FakeGeocoder:
    """Geocoder answering from fixed tables."""

    def __init__(self) -> None:
        self.places: dict[str, GeocodeResult] = {}
        self.reverse_result: Optional[GeocodeResult] = None
        self.error: Optional[Exception] = None
        self.reverse_calls: list[tuple[float, float]] = []

    async def forward(self, query: str) -> Optional[GeocodeResult]:
        await asyncio.sleep(0)
        if self.error:
            raise self.error
        return self.places.get(query.strip().lower())

    async def reverse(self, latitude: float, longitude: float) -> Optional[GeocodeResult]:
        self.reverse_calls.append((latitude, longitude))
        await asyncio.sleep(0)
        if self.error:
            raise self.error
        return self.reverse_result


@pytest.fixture
def records() -> FakeRecords:
    return FakeRecords()


@pytest.fixture
def blobs() -> FakeBlobs:
    return FakeBlobs()


@pytest.fixture
def geocoder() -> FakeGeocoder:
    g = FakeGeocoder()
    g.places["paris"] = GeocodeResult("Paris, France", 48.8566, 2.3522)
    return g


@pytest.fixture
def widget() -> HeadlessMapWidget:
    return HeadlessMapWidget()


@pytest.fixture
def workspace(user_session, records, blobs, geocoder, widget) -> MapWorkspace:
    return MapWorkspace(user_session, records, blobs, geocoder, widget)


@pytest.fixture
def ten_locations(records) -> list[Location]:
    """Ten dated locations, three of them nature."""
    specs = [
        ("Yosemite, USA", "nature", 37.74, -119.59),
        ("Rome, Italy", "historical", 41.90, 12.49),
        ("Banff, Canada", "nature", 51.18, -115.57),
        ("Tokyo, Japan", "urban", 35.68, 139.69),
        ("Bali, Indonesia", "beach", -8.34, 115.09),
        ("Lyon, France", "food", 45.76, 4.84),
        ("Milford Sound, New Zealand", "nature", -44.67, 167.93),
        ("Las Vegas, USA", "entertainment", 36.17, -115.14),
        ("Dubai, UAE", "shopping", 25.20, 55.27),
        ("Reykjavik, Iceland", "photo", 64.15, -21.94),
    ]
    return [
        records.seed(name, lat, lng, category=cat, visited_date=date(2023, i + 1, 1))
        for i, (name, cat, lat, lng) in enumerate(specs)
    ]


def pytest_sessionfinish(session, exitstatus):
    """Remove the temporary photo storage directory created for this run."""
    shutil.rmtree(config.PHOTO_STORAGE_DIR, ignore_errors=True)
