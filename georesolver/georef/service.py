from __future__ import annotations

from .cache import ReferenceDataCache
from .config import DEFAULT_GEOREF_CONFIG, GeorefConfig
from .geocoder import GeocoderClient
from .http import JsonHttpClient
from .models import CacheStats, MunicipalityRef, ProvinceRef, ResolvedAddress
from .registry import RegistryClient
from .resolution import ForwardResolutionAdapter, ReverseResolutionAdapter


class GeorefService:
    """
    Entry point used by the API layer.

    Construct one per process. ``registry`` and ``geocoder`` can be passed in
    to run against fakes; otherwise both share one aiohttp session.
    """

    def __init__(
        self,
        config: GeorefConfig = DEFAULT_GEOREF_CONFIG,
        registry: RegistryClient | None = None,
        geocoder: GeocoderClient | None = None,
    ) -> None:
        self.config = config
        self._http: JsonHttpClient | None = None
        if registry is None or geocoder is None:
            self._http = JsonHttpClient(config)
        self.registry = registry or RegistryClient(self._http, config)
        self.geocoder = geocoder or GeocoderClient(self._http, config)
        self.cache = ReferenceDataCache(self.registry, config)
        self._reverse = ReverseResolutionAdapter(self.cache, self.geocoder)
        self._forward = ForwardResolutionAdapter(self.cache, self.geocoder, config.country_name)

    async def get_provinces(self) -> list[ProvinceRef]:
        return await self.cache.get_provinces()

    async def get_municipalities(self, province_id: str | None = None) -> list[MunicipalityRef]:
        return await self.cache.get_municipalities(province_id)

    async def refresh_municipalities(self, province_id: str) -> list[MunicipalityRef]:
        return await self.cache.refresh_municipalities(province_id)

    async def resolve_from_coordinates(self, lat: float, lon: float) -> ResolvedAddress:
        return await self._reverse.resolve_from_coordinates(lat, lon)

    async def resolve_from_address(
        self,
        street: str,
        house_number: str | int | None = None,
        province_name: str | None = None,
        municipality_name: str | None = None,
    ) -> list[ResolvedAddress]:
        return await self._forward.resolve_from_address(street, house_number, province_name, municipality_name)

    def cache_stats(self) -> CacheStats:
        return self.cache.stats()

    async def close(self) -> None:
        if self._http is not None:
            await self._http.close()
