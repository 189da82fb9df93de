from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Centroid(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float
    lon: float


def _centroid(payload: Any) -> Centroid | None:
    if not isinstance(payload, dict):
        return None
    try:
        return Centroid(lat=float(payload["lat"]), lon=float(payload["lon"]))
    except (KeyError, TypeError, ValueError):
        return None


class ProvinceRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    centroid: Centroid | None = None
    iso_id: str | None = None

    @classmethod
    def from_registry(cls, item: dict[str, Any]) -> ProvinceRef:
        return cls(
            id=str(item.get("id", "")),
            name=str(item.get("nombre", "")),
            centroid=_centroid(item.get("centroide")),
            iso_id=item.get("iso_id") or None,
        )


class MunicipalityRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    province_id: str
    centroid: Centroid | None = None
    category: str | None = None

    @classmethod
    def from_registry(cls, item: dict[str, Any]) -> MunicipalityRef:
        """Build from a GeoRef ``municipios`` or ``localidades`` entry."""
        province = item.get("provincia") or {}
        return cls(
            id=str(item.get("id", "")),
            name=str(item.get("nombre", "")),
            province_id=str(province.get("id", "")),
            centroid=_centroid(item.get("centroide")),
            category=item.get("categoria") or None,
        )


class AddressCandidate(BaseModel):
    """
    Address breakdown as returned by the geocoder.

    Every field is optional: coverage varies by region and by how confident
    the provider is about the point.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    road: str | None = None
    house_number: str | None = None
    postcode: str | None = None
    municipality: str | None = None
    city: str | None = None
    town: str | None = None
    village: str | None = None
    suburb: str | None = None
    county: str | None = None
    locality: str | None = None
    local_administrative_area: str | None = None
    hamlet: str | None = None
    city_district: str | None = None
    state_district: str | None = None
    state: str | None = None
    province: str | None = None
    country: str | None = None
    country_code: str | None = None
    iso_province_code: str | None = Field(default=None, alias="ISO3166-2-lvl4")
    # Registry ids, when an upstream ever carries them directly.
    province_ref_id: str | None = None
    municipality_ref_id: str | None = None

    @property
    def province_name(self) -> str | None:
        return self.state or self.province


class GeocoderResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    display_name: str | None = None
    lat: float | None = None
    lon: float | None = None
    address: AddressCandidate | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> GeocoderResult:
        address = payload.get("address")
        return cls(
            display_name=payload.get("display_name") or None,
            lat=_float_or_none(payload.get("lat")),
            lon=_float_or_none(payload.get("lon")),
            address=AddressCandidate.model_validate(address) if isinstance(address, dict) and address else None,
        )


def _float_or_none(value: Any) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class ResolvedAddress(BaseModel):
    """
    Normalized address record.

    ``province_id``/``municipality_id`` are ``None`` when no canonical match
    was found; the ``*_name`` fields then carry the raw provider names.
    ``locality_*`` and ``census_locality_*`` mirror the municipality for
    consumers that still read those fields.
    """

    full_text: str
    street: str = ""
    house_number: int | None = None
    province_id: str | None = None
    province_name: str | None = None
    municipality_id: str | None = None
    municipality_name: str | None = None
    locality_id: str | None = None
    locality_name: str | None = None
    census_locality_id: str | None = None
    census_locality_name: str | None = None
    postal_code: str | None = None
    country_code: str | None = None
    country_name: str | None = None
    location: Centroid


class CacheStats(BaseModel):
    provinces_cached: int
    municipalities_cached: int
    locality_slices: dict[str, int]
    hits: int
    misses: int
    hit_rate: float
