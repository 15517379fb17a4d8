"""API tests: health, root and reference data endpoints."""
import pytest

pytestmark = pytest.mark.api


def test_api_health(client):
    """GET /api/health returns ok and the service name."""
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "service": "travel-memory-map"}


def test_root(client):
    """GET / points at docs and health."""
    r = client.get("/")
    assert r.status_code == 200
    assert r.json()["health"] == "/api/health"


def test_categories(client):
    """GET /api/categories lists every tag with its colour, general first."""
    r = client.get("/api/categories")
    assert r.status_code == 200
    data = r.json()
    assert len(data) == 10
    assert data[0] == {"id": "general", "name": "General", "icon": "📍", "color": "#6b7280"}
    assert {c["id"] for c in data} >= {"nature", "food", "beach", "photo"}


def test_map_styles_marks_default(client):
    """GET /api/map-styles flags outdoors as the default style."""
    r = client.get("/api/map-styles")
    assert r.status_code == 200
    defaults = [s["id"] for s in r.json() if s["default"]]
    assert defaults == ["outdoors-v12"]
