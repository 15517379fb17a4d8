"""API tests: photo upload-by-path and serving."""
import inspect
import uuid

import pytest

from api import photos
from utils import config

pytestmark = pytest.mark.api


def _path(ext: str = "jpg", owner: str = "user-1") -> str:
    return f"{owner}/1700000000000-{uuid.uuid4().hex[:8]}.{ext}"


def _upload(client, path, content=b"\xff\xd8jpegdata", **kwargs):
    return client.put(
        f"/api/photos/{path}",
        files={"file": (path.rsplit("/", 1)[-1], content, "image/jpeg")},
        **kwargs,
    )


def test_upload_returns_public_url_and_serves_file(client):
    """PUT stores the file; the returned URL serves the same bytes."""
    path = _path()
    r = _upload(client, path)
    assert r.status_code == 201
    data = r.json()
    assert data["path"] == path
    assert data["url"] == f"http://testserver/photos/{path}"
    served = client.get(f"/photos/{path}")
    assert served.status_code == 200
    assert served.content == b"\xff\xd8jpegdata"


def test_upload_outside_own_folder_forbidden(client):
    """Paths must start with the caller's user id."""
    r = _upload(client, _path(owner="user-2"))
    assert r.status_code == 403


@pytest.mark.parametrize("path", ["user-1/../user-2/x.jpg", "user-1//x.jpg", "x.jpg"])
def test_upload_rejects_unsafe_paths(client, path):
    """Traversal, empty segments and unprefixed names are refused."""
    r = _upload(client, path)
    assert r.status_code in (400, 403, 404)


def test_upload_rejects_non_image_extension(client):
    """Only image extensions are accepted."""
    r = _upload(client, _path(ext="exe"))
    assert r.status_code == 400


def test_upload_never_overwrites(client):
    """A second upload to the same path is a 409."""
    path = _path()
    assert _upload(client, path).status_code == 201
    r = _upload(client, path, content=b"other")
    assert r.status_code == 409
    assert client.get(f"/photos/{path}").content == b"\xff\xd8jpegdata"


def test_upload_size_cap(client, monkeypatch):
    """Files over MAX_PHOTO_BYTES are refused with 413."""
    monkeypatch.setattr(config, "MAX_PHOTO_BYTES", 4)
    r = _upload(client, _path(), content=b"12345")
    assert r.status_code == 413


def test_upload_exactly_at_cap_is_stored(client, monkeypatch):
    monkeypatch.setattr(config, "MAX_PHOTO_BYTES", 4)
    r = _upload(client, _path(), content=b"1234")
    assert r.status_code == 201


def test_upload_route_runs_in_threadpool():
    """The handler does blocking disk I/O, so it must not be a coroutine."""
    assert not inspect.iscoroutinefunction(photos.upload_photo)


def test_upload_requires_identity(client):
    """Anonymous uploads are rejected."""
    r = _upload(client, _path(), headers={"X-User-Id": ""})
    assert r.status_code == 401
