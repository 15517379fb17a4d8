"""API tests: map image export."""
import io

import pytest
from PIL import Image

pytestmark = pytest.mark.api


@pytest.fixture
def with_locations(client):
    client.post("/api/locations", json={"name": "Paris, France", "latitude": 48.85, "longitude": 2.35})
    client.post(
        "/api/locations",
        json={"name": "Banff, Canada", "latitude": 51.18, "longitude": -115.57, "category": "nature"},
    )
    return client


def test_export_png(with_locations):
    """Default export is a PNG attachment at the social size."""
    r = with_locations.get("/api/export", params={"quality": "standard"})
    assert r.status_code == 200
    assert r.headers["content-type"] == "image/png"
    assert "attachment" in r.headers["content-disposition"]
    assert r.content.startswith(b"\x89PNG")
    assert Image.open(io.BytesIO(r.content)).size == (1200, 630)


def test_export_jpg_story(with_locations):
    """JPEG export at the story size."""
    r = with_locations.get("/api/export", params={"format": "jpg", "size": "story", "quality": "standard"})
    assert r.status_code == 200
    assert r.headers["content-type"] == "image/jpeg"
    assert Image.open(io.BytesIO(r.content)).size == (1080, 1920)


def test_export_without_locations(client):
    """Nothing to draw is a 400 with the message."""
    r = client.get("/api/export")
    assert r.status_code == 400
    assert r.json()["detail"] == "No locations to export"


def test_export_category_selection_can_empty_the_map(with_locations):
    """Only the requested categories are drawn; none matching is a 400."""
    assert with_locations.get(
        "/api/export", params={"category": "nature", "quality": "standard"}
    ).status_code == 200
    r = with_locations.get("/api/export", params={"category": "beach"})
    assert r.status_code == 400


@pytest.mark.parametrize(
    "params",
    [{"format": "gif"}, {"size": "poster"}, {"quality": "max"}, {"theme": "neon"}, {"category": "volcano"}],
)
def test_export_bad_options(with_locations, params):
    """Unknown option values are a 400."""
    r = with_locations.get("/api/export", params=params)
    assert r.status_code == 400


def test_export_query_parameter_is_named_format(client):
    """The public query parameter stays `format`."""
    params = client.get("/openapi.json").json()["paths"]["/api/export"]["get"]["parameters"]
    names = [p["name"] for p in params]
    assert "format" in names
    assert "format_" not in names
