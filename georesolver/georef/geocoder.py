from __future__ import annotations

from .config import DEFAULT_GEOREF_CONFIG, GeorefConfig
from .http import JsonHttpClient
from .models import GeocoderResult


class GeocoderClient:
    """Nominatim reverse and search endpoints."""

    def __init__(self, http: JsonHttpClient, config: GeorefConfig = DEFAULT_GEOREF_CONFIG) -> None:
        self._http = http
        self._config = config

    def _url(self, path: str) -> str:
        return f"{self._config.geocoder_base_url.rstrip('/')}/{path}"

    async def reverse(self, lat: float, lon: float) -> GeocoderResult | None:
        data = await self._http.get_json(
            self._url("reverse"),
            {"format": "json", "lat": lat, "lon": lon, "zoom": 18, "addressdetails": 1},
            f"reverse geocode lat={lat} lon={lon}",
        )
        if not isinstance(data, dict) or "error" in data:
            return None
        return GeocoderResult.from_payload(data)

    async def search(self, query: str, limit: int = 1) -> list[GeocoderResult]:
        data = await self._http.get_json(
            self._url("search"),
            {"format": "json", "q": query, "limit": limit, "addressdetails": 1},
            f"search address {query!r}",
        )
        if not isinstance(data, list):
            return []
        return [GeocoderResult.from_payload(it) for it in data if isinstance(it, dict)]
