from __future__ import annotations

import pytest

from georesolver.georef.config import GeorefConfig
from georesolver.georef.errors import UpstreamUnavailable
from georesolver.georef.models import Centroid, GeocoderResult, MunicipalityRef, ProvinceRef
from georesolver.georef.service import GeorefService

TEST_CONFIG = GeorefConfig(
    registry_base_url="http://georef.test/api",
    geocoder_base_url="http://nominatim.test",
    user_agent="RestoFinderTests/1.0",
    timeout=2.0,
    max_results=5000,
    country_name="Argentina",
    locality_provinces=("02", "86"),
)

PROVINCES = [
    ProvinceRef(id="06", name="Buenos Aires", iso_id="AR-B", centroid=Centroid(lat=-36.67, lon=-60.55)),
    ProvinceRef(id="14", name="Córdoba", iso_id="AR-X", centroid=Centroid(lat=-32.14, lon=-63.80)),
    ProvinceRef(id="86", name="Santiago del Estero", iso_id="AR-G", centroid=Centroid(lat=-27.78, lon=-63.25)),
    ProvinceRef(id="02", name="Ciudad Autónoma de Buenos Aires", iso_id="AR-C"),
    ProvinceRef(id="94", name="Tierra del Fuego, Antártida e Islas del Atlántico Sur", iso_id="AR-V"),
]


def _m(mid: str, name: str, pid: str, category: str | None = None) -> MunicipalityRef:
    return MunicipalityRef(id=mid, name=name, province_id=pid, category=category)


MUNICIPALITIES = [
    _m("060441", "La Plata", "06"),
    _m("060056", "Bahía Blanca", "06"),
    _m("140001", "Córdoba", "14"),
    _m("140250", "Colonia Hernando", "14"),
    _m("140252", "Hernando", "14"),
    _m("140700", "San Roque", "14"),
    _m("140710", "Roque Sáenz Peña", "14"),
    _m("860007", "Añatuya", "86"),
    _m("940007", "Ushuaia", "94"),
    # Points at a province the registry does not list.
    _m("999001", "Huérfano", "99"),
]

LOCALITIES = {
    "86": [
        _m("86049010000", "Capital", "86", "Localidad simple"),
        _m("86049020000", "La Banda", "86", "Localidad simple"),
    ],
    "02": [
        _m("02000010000", "Ciudad Autónoma de Buenos Aires", "02", "Entidad"),
    ],
}


class FakeRegistry:
    """In-memory GeoRef with per-endpoint call logs."""

    def __init__(self) -> None:
        self.provinces = list(PROVINCES)
        self.municipalities = list(MUNICIPALITIES)
        self.localities = {pid: list(items) for pid, items in LOCALITIES.items()}
        self.calls: list[tuple[str, str | None]] = []
        self.fail = False

    def _check(self, operation: str) -> None:
        if self.fail:
            raise UpstreamUnavailable(operation, status=503, body="service unavailable")

    def calls_to(self, endpoint: str) -> list[tuple[str, str | None]]:
        return [c for c in self.calls if c[0] == endpoint]

    async def fetch_provinces(self) -> list[ProvinceRef]:
        self.calls.append(("provincias", None))
        self._check("fetch provinces")
        return list(self.provinces)

    async def fetch_municipalities(self, province_id: str | None = None) -> list[MunicipalityRef]:
        self.calls.append(("municipios", province_id))
        self._check("fetch municipalities")
        if province_id is None:
            return list(self.municipalities)
        return [m for m in self.municipalities if m.province_id == province_id]

    async def fetch_localities(self, province_id: str) -> list[MunicipalityRef]:
        self.calls.append(("localidades", province_id))
        self._check(f"fetch localities for province {province_id}")
        return list(self.localities.get(province_id, []))


class FakeGeocoder:
    """Nominatim stand-in returning canned payloads."""

    def __init__(self) -> None:
        self.reverse_payload: dict | None = None
        self.search_payloads: list[dict] = []
        self.reverse_calls: list[tuple[float, float]] = []
        self.search_calls: list[tuple[str, int]] = []
        self.fail: UpstreamUnavailable | None = None

    async def reverse(self, lat: float, lon: float) -> GeocoderResult | None:
        self.reverse_calls.append((lat, lon))
        if self.fail is not None:
            raise self.fail
        if self.reverse_payload is None:
            return None
        return GeocoderResult.from_payload(self.reverse_payload)

    async def search(self, query: str, limit: int = 1) -> list[GeocoderResult]:
        self.search_calls.append((query, limit))
        if self.fail is not None:
            raise self.fail
        return [GeocoderResult.from_payload(p) for p in self.search_payloads[:limit]]


@pytest.fixture
def registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture
def geocoder() -> FakeGeocoder:
    return FakeGeocoder()


@pytest.fixture
def service(registry: FakeRegistry, geocoder: FakeGeocoder) -> GeorefService:
    return GeorefService(TEST_CONFIG, registry=registry, geocoder=geocoder)


@pytest.fixture
def test_config() -> GeorefConfig:
    return TEST_CONFIG
