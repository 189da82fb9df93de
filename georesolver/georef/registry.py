from __future__ import annotations

from typing import Any

from .config import DEFAULT_GEOREF_CONFIG, GeorefConfig
from .http import JsonHttpClient
from .models import MunicipalityRef, ProvinceRef


def _items(data: Any, key: str) -> list[dict[str, Any]]:
    if not isinstance(data, dict):
        return []
    items = data.get(key) or []
    return [it for it in items if isinstance(it, dict)]


class RegistryClient:
    """GeoRef reference registry: provincias, municipios and localidades."""

    def __init__(self, http: JsonHttpClient, config: GeorefConfig = DEFAULT_GEOREF_CONFIG) -> None:
        self._http = http
        self._config = config

    def _url(self, path: str) -> str:
        return f"{self._config.registry_base_url.rstrip('/')}/{path}"

    async def fetch_provinces(self) -> list[ProvinceRef]:
        data = await self._http.get_json(
            self._url("provincias"),
            {"max": self._config.max_results, "campos": "id,nombre,centroide,iso_id"},
            "fetch provinces",
        )
        return [ProvinceRef.from_registry(it) for it in _items(data, "provincias")]

    async def fetch_municipalities(self, province_id: str | None = None) -> list[MunicipalityRef]:
        params: dict[str, Any] = {"max": self._config.max_results}
        operation = "fetch municipalities"
        if province_id:
            params["provincia"] = province_id
            operation = f"fetch municipalities for province {province_id}"
        data = await self._http.get_json(self._url("municipios"), params, operation)
        return [MunicipalityRef.from_registry(it) for it in _items(data, "municipios")]

    async def fetch_localities(self, province_id: str) -> list[MunicipalityRef]:
        data = await self._http.get_json(
            self._url("localidades"),
            {"provincia": province_id, "max": self._config.max_results},
            f"fetch localities for province {province_id}",
        )
        return [MunicipalityRef.from_registry(it) for it in _items(data, "localidades")]
