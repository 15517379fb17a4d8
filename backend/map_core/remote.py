"""
Remote collaborators for the map workflow and their HTTP implementation.

RecordClient and BlobClient are the contracts the store, form and panel depend on;
ApiClient fulfils them (and Geocoder) against the memories API with httpx.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional, Protocol

import httpx

from map_core.geocoding import GeocodeResult
from map_core.location import Location, UserSession

LOG = logging.getLogger(__name__)


class RemoteError(Exception):
    """A remote collaborator rejected a call. str() is the service's message, verbatim."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RecordClient(Protocol):
    """Structured-record collaborator: per-owner locations collection."""

    async def list_locations(self) -> list[Location]:
        ...

    async def insert_location(self, fields: dict[str, Any]) -> Location:
        ...

    async def update_location(self, location_id: str, fields: dict[str, Any]) -> Location:
        ...

    async def delete_location(self, location_id: str) -> None:
        ...


class BlobClient(Protocol):
    """Blob-storage collaborator: upload-by-path returning a public URL."""

    async def upload_photo(self, path: str, content: bytes, content_type: str) -> str:
        ...


def _error_message(response: httpx.Response) -> str:
    """Best human-readable message from an error response (FastAPI puts it in detail)."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, str):
        return detail
    if isinstance(detail, list):
        return "; ".join(
            str(item.get("msg", item)) if isinstance(item, dict) else str(item)
            for item in detail
        )
    return f"HTTP {response.status_code}"


def _encode(fields: dict[str, Any]) -> dict[str, Any]:
    """JSON-ready copy of form fields (dates as ISO strings)."""
    return {k: v.isoformat() if isinstance(v, date) else v for k, v in fields.items()}


class ApiClient:
    """HTTP client for the memories API, scoped to one user session."""

    def __init__(
        self,
        session: UserSession,
        base_url: str = "http://localhost:8001",
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.session = session
        self._client = client or httpx.AsyncClient(base_url=base_url)
        self._owns_client = client is None
        self._headers = {"X-User-Id": session.user_id}
        if session.email:
            self._headers["X-User-Email"] = session.email

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        response = await self._client.request(method, url, headers=self._headers, **kwargs)
        if response.is_error:
            raise RemoteError(_error_message(response), status_code=response.status_code)
        return response

    # --- records ---

    async def list_locations(self) -> list[Location]:
        r = await self._request("GET", "/api/locations")
        return [Location.from_api(item) for item in r.json()]

    async def insert_location(self, fields: dict[str, Any]) -> Location:
        r = await self._request("POST", "/api/locations", json=_encode(fields))
        return Location.from_api(r.json())

    async def update_location(self, location_id: str, fields: dict[str, Any]) -> Location:
        r = await self._request("PATCH", f"/api/locations/{location_id}", json=_encode(fields))
        return Location.from_api(r.json())

    async def delete_location(self, location_id: str) -> None:
        await self._request("DELETE", f"/api/locations/{location_id}")

    # --- blobs ---

    async def upload_photo(self, path: str, content: bytes, content_type: str) -> str:
        filename = path.rsplit("/", 1)[-1]
        r = await self._request(
            "PUT",
            f"/api/photos/{path}",
            files={"file": (filename, content, content_type)},
        )
        return r.json()["url"]

    # --- geocoding (best-effort) ---

    async def forward(self, query: str) -> Optional[GeocodeResult]:
        return await self._geocode("/api/geocode/forward", {"q": query})

    async def reverse(self, latitude: float, longitude: float) -> Optional[GeocodeResult]:
        return await self._geocode("/api/geocode/reverse", {"lat": latitude, "lng": longitude})

    async def _geocode(self, url: str, params: dict[str, Any]) -> Optional[GeocodeResult]:
        try:
            r = await self._request("GET", url, params=params)
        except RemoteError as e:
            if e.status_code != 404:
                LOG.warning("Geocoding via API failed: %s", e)
            return None
        except httpx.HTTPError as e:
            LOG.warning("Geocoding via API unreachable: %s", e)
            return None
        data = r.json()
        return GeocodeResult(
            place_name=data["place_name"],
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
        )
