from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from .cache import ReferenceDataCache
from .candidates import build_candidate_names
from .errors import UpstreamUnavailable
from .geocoder import GeocoderClient
from .matching import MatchStrategy, match_municipality, match_province
from .models import AddressCandidate, Centroid, GeocoderResult, MunicipalityRef, ProvinceRef, ResolvedAddress

logger = logging.getLogger(__name__)

ADDRESS_NOT_AVAILABLE = "Dirección no disponible"

_LEADING_DIGITS_RE = re.compile(r"^\s*(\d+)")


@dataclass
class _Components:
    province: ProvinceRef | None = None
    province_raw: str | None = None
    municipality: MunicipalityRef | None = None
    strategy: MatchStrategy | None = None
    candidates: list[str] = field(default_factory=list)


def parse_house_number(raw: str | None) -> int | None:
    """Leading digits of the provider's house number ("1234A" -> 1234)."""
    if not raw:
        return None
    m = _LEADING_DIGITS_RE.match(str(raw))
    return int(m.group(1)) if m else None


def compose_query(
    street: str,
    house_number: str | int | None,
    province_name: str | None,
    municipality_name: str | None,
    country: str,
) -> str:
    """``"<street> [<number>][, <municipality>][, <province>], <country>"``."""
    head = (street or "").strip()
    number = str(house_number).strip() if house_number not in (None, "") else ""
    if number:
        head = f"{head} {number}".strip()
    parts = [head, (municipality_name or "").strip(), (province_name or "").strip(), country]
    return ", ".join(p for p in parts if p)


class _ResolutionAdapter:
    def __init__(self, cache: ReferenceDataCache, geocoder: GeocoderClient) -> None:
        self._cache = cache
        self._geocoder = geocoder

    async def _resolve_components(
        self,
        address: AddressCandidate | None,
        display_name: str | None,
        fallback_province: str | None = None,
        fallback_municipality: str | None = None,
    ) -> _Components:
        comp = _Components()
        provinces = await self._cache.get_provinces()

        comp.province_raw = (address.province_name if address else None) or fallback_province or None
        upstream_province_id = (address.province_ref_id or address.iso_province_code) if address else None
        province_match = match_province([comp.province_raw], provinces, upstream_province_id)
        if province_match:
            comp.province = province_match.ref
        elif comp.province_raw or upstream_province_id:
            logger.warning("No GeoRef province for %r (id hint %r)", comp.province_raw, upstream_province_id)

        # Province before municipalities: the province decides the endpoint.
        if comp.province is not None:
            municipalities = await self._cache.get_municipalities(comp.province.id)
        else:
            municipalities = await self._cache.get_municipalities()

        comp.candidates = build_candidate_names(address, display_name, fallback_municipality)
        upstream_municipality_id = address.municipality_ref_id if address else None
        match = match_municipality(comp.candidates, comp.province, municipalities, upstream_municipality_id)
        if match is None:
            logger.warning("No GeoRef municipality for candidates %s", comp.candidates)
            return comp

        comp.municipality = match.ref
        comp.strategy = match.strategy
        if comp.province is None:
            comp.province = await self._cache.get_province(match.ref.province_id)
        logger.debug(
            "Matched municipality %s (%s) in province %s via %s",
            comp.municipality.name,
            comp.municipality.id,
            comp.province.id if comp.province else None,
            comp.strategy.value,
        )
        return comp


def _build_address(result: GeocoderResult, comp: _Components, location: Centroid) -> ResolvedAddress:
    address = result.address or AddressCandidate()
    municipality = comp.municipality
    raw_municipality = comp.candidates[0] if comp.candidates else None

    if municipality is not None:
        census_id, census_name = municipality.id, municipality.name
    else:
        census_id, census_name = None, address.suburb or None

    return ResolvedAddress(
        full_text=result.display_name or ADDRESS_NOT_AVAILABLE,
        street=address.road or "",
        house_number=parse_house_number(address.house_number),
        province_id=comp.province.id if comp.province else None,
        province_name=comp.province.name if comp.province else comp.province_raw,
        municipality_id=municipality.id if municipality else None,
        municipality_name=municipality.name if municipality else raw_municipality,
        locality_id=municipality.id if municipality else None,
        locality_name=municipality.name if municipality else raw_municipality,
        census_locality_id=census_id,
        census_locality_name=census_name,
        postal_code=address.postcode or None,
        country_code=address.country_code or None,
        country_name=address.country or None,
        location=location,
    )


class ReverseResolutionAdapter(_ResolutionAdapter):
    """Coordinates -> ResolvedAddress, through Nominatim reverse and GeoRef."""

    async def resolve_from_coordinates(self, lat: float, lon: float) -> ResolvedAddress:
        context = f"resolving coordinates {lat}, {lon}"
        logger.debug("Reverse geocoding lat=%s lon=%s", lat, lon)
        try:
            result = await self._geocoder.reverse(lat, lon)
            if result is None or result.address is None:
                logger.warning("No address components from geocoder for %s, %s", lat, lon)
                return ResolvedAddress(
                    full_text=(result.display_name if result else None) or ADDRESS_NOT_AVAILABLE,
                    location=Centroid(lat=lat, lon=lon),
                )
            comp = await self._resolve_components(result.address, result.display_name)
        except UpstreamUnavailable as exc:
            raise exc.with_context(context) from exc

        if result.lat is not None and result.lon is not None:
            location = Centroid(lat=result.lat, lon=result.lon)
        else:
            location = Centroid(lat=lat, lon=lon)
        return _build_address(result, comp, location)


class ForwardResolutionAdapter(_ResolutionAdapter):
    """Structured address -> at most one ResolvedAddress, through Nominatim search."""

    def __init__(self, cache: ReferenceDataCache, geocoder: GeocoderClient, country_name: str) -> None:
        super().__init__(cache, geocoder)
        self._country_name = country_name

    async def resolve_from_address(
        self,
        street: str,
        house_number: str | int | None = None,
        province_name: str | None = None,
        municipality_name: str | None = None,
    ) -> list[ResolvedAddress]:
        query = compose_query(street, house_number, province_name, municipality_name, self._country_name)
        logger.debug("Searching address %r", query)
        try:
            results = await self._geocoder.search(query, limit=1)
            if not results:
                logger.warning("No geocoder results for address %r", query)
                return []
            result = results[0]
            if result.lat is None or result.lon is None:
                logger.warning("Geocoder result for %r has no coordinates", query)
                return []
            comp = await self._resolve_components(
                result.address,
                result.display_name,
                fallback_province=province_name,
                fallback_municipality=municipality_name,
            )
        except UpstreamUnavailable as exc:
            raise exc.with_context(f"resolving address {query!r}") from exc

        return [_build_address(result, comp, Centroid(lat=result.lat, lon=result.lon))]
