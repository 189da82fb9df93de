from __future__ import annotations

import logging

from .config import DEFAULT_GEOREF_CONFIG, GeorefConfig
from .models import CacheStats, MunicipalityRef, ProvinceRef
from .registry import RegistryClient
from .sources import EndpointKind, build_endpoint_table, endpoint_kind_for

logger = logging.getLogger(__name__)


class ReferenceDataCache:
    """
    Process-lifetime cache of the GeoRef reference lists.

    The province list and the nationwide municipality list are fetched once.
    Provinces served by the ``localidades`` endpoint get their own slice,
    keyed by province id, which the nationwide list never touches. Entries
    are only stored after a fetch succeeds, so a failed call leaves the
    cache as it was.
    """

    def __init__(self, registry: RegistryClient, config: GeorefConfig = DEFAULT_GEOREF_CONFIG) -> None:
        self._registry = registry
        self._endpoint_table = build_endpoint_table(config.locality_provinces)
        self._provinces: list[ProvinceRef] | None = None
        self._municipalities: list[MunicipalityRef] | None = None
        self._locality_slices: dict[str, list[MunicipalityRef]] = {}
        self._hits = 0
        self._misses = 0

    # ── Provinces ────────────────────────────────────────────────────────

    async def get_provinces(self) -> list[ProvinceRef]:
        if self._provinces is not None:
            self._hits += 1
            logger.debug("Returning %d provinces from cache", len(self._provinces))
            return self._provinces
        self._misses += 1
        return await self._province_list()

    async def _province_list(self) -> list[ProvinceRef]:
        # Internal lookups load provinces without touching the hit/miss counters.
        if self._provinces is None:
            logger.debug("Fetching provinces from GeoRef")
            provinces = await self._registry.fetch_provinces()
            self._provinces = provinces
            logger.info("Cached %d provinces", len(provinces))
        return self._provinces

    async def get_province(self, province_id: str) -> ProvinceRef | None:
        for province in await self._province_list():
            if province.id == province_id:
                return province
        return None

    def endpoint_kind(self, province_id: str, province: ProvinceRef | None = None) -> EndpointKind:
        return endpoint_kind_for(province_id, self._endpoint_table, province)

    # ── Municipalities ───────────────────────────────────────────────────

    async def _nationwide(self) -> list[MunicipalityRef]:
        if self._municipalities is not None:
            self._hits += 1
            logger.debug("Returning %d municipalities from cache", len(self._municipalities))
            return self._municipalities
        self._misses += 1
        logger.debug("Fetching nationwide municipalities from GeoRef")
        municipalities = await self._registry.fetch_municipalities()
        self._municipalities = municipalities
        logger.info("Cached %d municipalities", len(municipalities))
        return municipalities

    async def _locality_slice(self, province_id: str) -> list[MunicipalityRef]:
        cached = self._locality_slices.get(province_id)
        if cached is not None:
            self._hits += 1
            logger.debug("Returning %d localities for province %s from cache", len(cached), province_id)
            return cached
        self._misses += 1
        logger.debug("Fetching localities for province %s from GeoRef", province_id)
        localities = await self._registry.fetch_localities(province_id)
        self._locality_slices[province_id] = localities
        logger.info("Cached %d localities for province %s", len(localities), province_id)
        return localities

    async def get_municipalities(self, province_id: str | None = None) -> list[MunicipalityRef]:
        """
        Return the municipalities of one province, or of the whole country.

        Only entries whose province is in the cached province list are
        returned.
        """
        provinces = await self._province_list()
        known = {p.id for p in provinces}

        if province_id is None:
            return _attached(await self._nationwide(), known)

        if province_id not in known:
            logger.warning("Province %s is not in the reference list", province_id)
            return []

        province = next(p for p in provinces if p.id == province_id)
        if self.endpoint_kind(province_id, province) is EndpointKind.localities:
            entries = await self._locality_slice(province_id)
            return [m for m in entries if m.province_id == province_id]

        return [m for m in await self._nationwide() if m.province_id == province_id]

    async def refresh_municipalities(self, province_id: str) -> list[MunicipalityRef]:
        """Re-fetch one province and replace its stored slice wholesale."""
        province = await self.get_province(province_id)
        if province is None:
            logger.warning("Refusing to refresh unknown province %s", province_id)
            return []

        if self.endpoint_kind(province_id, province) is EndpointKind.localities:
            localities = await self._registry.fetch_localities(province_id)
            self._locality_slices[province_id] = localities
            logger.info("Refreshed %d localities for province %s", len(localities), province_id)
            return [m for m in localities if m.province_id == province_id]

        if self._municipalities is None:
            return await self.get_municipalities(province_id)

        fresh = await self._registry.fetch_municipalities(province_id)
        fresh = [m for m in fresh if m.province_id == province_id]
        others = [m for m in self._municipalities if m.province_id != province_id]
        self._municipalities = others + fresh
        logger.info("Refreshed %d municipalities for province %s", len(fresh), province_id)
        return fresh

    # ── Lifecycle ────────────────────────────────────────────────────────

    def stats(self) -> CacheStats:
        total = self._hits + self._misses
        return CacheStats(
            provinces_cached=len(self._provinces or []),
            municipalities_cached=len(self._municipalities or []),
            locality_slices={pid: len(items) for pid, items in self._locality_slices.items()},
            hits=self._hits,
            misses=self._misses,
            hit_rate=round(self._hits / total * 100, 1) if total > 0 else 0.0,
        )

    def reset(self) -> None:
        self._provinces = None
        self._municipalities = None
        self._locality_slices.clear()
        self._hits = 0
        self._misses = 0


def _attached(municipalities: list[MunicipalityRef], known: set[str]) -> list[MunicipalityRef]:
    attached = [m for m in municipalities if m.province_id in known]
    dropped = len(municipalities) - len(attached)
    if dropped:
        logger.warning("Dropped %d municipalities with no matching province", dropped)
    return attached
