"""
Mapbox geocoding client.

Forward (place name -> point) and reverse (point -> place name) lookups. Results are
best-effort: every failure is logged and reported as None, never raised.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol
from urllib.parse import quote

import httpx

LOG = logging.getLogger(__name__)

DEFAULT_GEOCODING_URL = "https://api.mapbox.com/geocoding/v5/mapbox.places"


@dataclass(frozen=True)
class GeocodeResult:
    """First match of a lookup: canonical place name and its point."""

    place_name: str
    latitude: float
    longitude: float


class Geocoder(Protocol):
    """What the map workflow needs from a geocoding collaborator."""

    async def forward(self, query: str) -> Optional[GeocodeResult]:
        ...

    async def reverse(self, latitude: float, longitude: float) -> Optional[GeocodeResult]:
        ...


def _first_feature(data: Any) -> Optional[GeocodeResult]:
    """Extract the first feature of a Mapbox FeatureCollection, or None."""
    if not isinstance(data, dict):
        return None
    features = data.get("features") or []
    if not features:
        return None
    feature = features[0]
    center = feature.get("center") or []
    if len(center) < 2:
        return None
    lng, lat = center[0], center[1]
    return GeocodeResult(
        place_name=str(feature.get("place_name") or ""),
        latitude=float(lat),
        longitude=float(lng),
    )


class MapboxGeocoder:
    """Geocoding via the Mapbox Geocoding v5 places endpoint."""

    def __init__(
        self,
        access_token: str,
        base_url: str = DEFAULT_GEOCODING_URL,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.access_token = access_token
        self.base_url = base_url.rstrip("/")
        # No explicit timeout: the httpx default applies.
        self._client = client or httpx.AsyncClient()
        self._owns_client = client is None

    async def __aenter__(self) -> "MapboxGeocoder":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this geocoder created it."""
        if self._owns_client:
            await self._client.aclose()

    async def forward(self, query: str) -> Optional[GeocodeResult]:
        """Look up a free-text place name; first result or None."""
        q = (query or "").strip()
        if not q:
            return None
        return await self._lookup(quote(q, safe=""), {"limit": 1})

    async def reverse(self, latitude: float, longitude: float) -> Optional[GeocodeResult]:
        """Look up the place name at a point (Mapbox takes lng,lat order)."""
        return await self._lookup(f"{longitude},{latitude}", {})

    async def _lookup(self, search_text: str, params: dict[str, Any]) -> Optional[GeocodeResult]:
        if not self.access_token:
            LOG.warning("Geocoding skipped: no Mapbox access token configured")
            return None
        url = f"{self.base_url}/{search_text}.json"
        try:
            response = await self._client.get(url, params={**params, "access_token": self.access_token})
            response.raise_for_status()
            result = _first_feature(response.json())
        except httpx.HTTPStatusError as e:
            LOG.warning("Geocoding HTTP %s for %s", e.response.status_code, search_text)
            return None
        except httpx.TimeoutException:
            LOG.warning("Geocoding timed out for %s", search_text)
            return None
        except httpx.HTTPError as e:
            LOG.warning("Geocoding request failed for %s: %s", search_text, e)
            return None
        except ValueError as e:
            LOG.warning("Geocoding returned unreadable body for %s: %s", search_text, e)
            return None
        if result is None:
            LOG.info("Geocoding found no match for %s", search_text)
        return result
