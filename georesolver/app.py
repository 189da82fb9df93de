from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse

from .georef.config import DEFAULT_GEOREF_CONFIG
from .georef.errors import UpstreamUnavailable
from .georef.models import CacheStats, MunicipalityRef, ProvinceRef, ResolvedAddress
from .georef.service import GeorefService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(level=DEFAULT_GEOREF_CONFIG.log_level.upper())
    app.state.georef = GeorefService(DEFAULT_GEOREF_CONFIG)
    try:
        yield
    finally:
        await app.state.georef.close()


app = FastAPI(title="Restaurant Geo Resolution API", version="1.0.0", lifespan=lifespan)


def get_georef_service(request: Request) -> GeorefService:
    return request.app.state.georef


@app.exception_handler(UpstreamUnavailable)
async def upstream_unavailable_handler(request: Request, exc: UpstreamUnavailable) -> JSONResponse:
    logger.error("Upstream failure on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=502, content=exc.to_dict())


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


# ── Reference lists ──────────────────────────────────────────────────────


@app.get("/georef/provincias", response_model=list[ProvinceRef])
async def provincias(service: GeorefService = Depends(get_georef_service)) -> list[ProvinceRef]:
    return await service.get_provinces()


@app.get("/georef/municipios", response_model=list[MunicipalityRef])
async def municipios(
    provincia_id: str | None = Query(default=None, alias="provinciaId"),
    service: GeorefService = Depends(get_georef_service),
) -> list[MunicipalityRef]:
    return await service.get_municipalities(provincia_id)


# ── Resolution ───────────────────────────────────────────────────────────


@app.get("/georef/buscar-direccion", response_model=list[ResolvedAddress])
async def buscar_direccion(
    calle: str = Query(..., min_length=1),
    altura: str | None = None,
    provincia_nombre: str | None = Query(default=None, alias="provinciaNombre"),
    municipio_nombre: str | None = Query(default=None, alias="municipioNombre"),
    service: GeorefService = Depends(get_georef_service),
) -> list[ResolvedAddress]:
    return await service.resolve_from_address(calle, altura, provincia_nombre, municipio_nombre)


@app.get("/georef/direccion-por-coordenadas", response_model=ResolvedAddress)
async def direccion_por_coordenadas(
    lat: float = Query(..., ge=-90.0, le=90.0),
    lon: float = Query(..., ge=-180.0, le=180.0),
    service: GeorefService = Depends(get_georef_service),
) -> ResolvedAddress:
    return await service.resolve_from_coordinates(lat, lon)


# ── Cache ────────────────────────────────────────────────────────────────


@app.get("/georef/cache/stats", response_model=CacheStats)
def cache_stats(service: GeorefService = Depends(get_georef_service)) -> CacheStats:
    return service.cache_stats()


@app.post("/georef/cache/refresh/{province_id}", response_model=list[MunicipalityRef])
async def refresh_province(
    province_id: str,
    service: GeorefService = Depends(get_georef_service),
) -> list[MunicipalityRef]:
    return await service.refresh_municipalities(province_id)
