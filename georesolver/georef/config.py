from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


def _csv_env(name: str, default: str) -> tuple[str, ...]:
    raw = os.getenv(name, default)
    return tuple(part.strip() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class GeorefConfig:
    registry_base_url: str = os.getenv("GEOREF_API_BASE_URL", "https://apis.datos.gob.ar/georef/api")
    geocoder_base_url: str = os.getenv("NOMINATIM_BASE_URL", "https://nominatim.openstreetmap.org")
    user_agent: str = os.getenv("GEOCODER_USER_AGENT", "RestoFinderApp/1.0 (contact@example.com)")
    timeout: float = float(os.getenv("GEOREF_TIMEOUT", "10.0"))
    max_results: int = int(os.getenv("GEOREF_MAX_RESULTS", "5000"))
    country_name: str = os.getenv("GEOREF_COUNTRY_NAME", "Argentina")
    # Ciudad Autónoma de Buenos Aires and Santiago del Estero
    locality_provinces: tuple[str, ...] = field(
        default_factory=lambda: _csv_env("GEOREF_LOCALITY_PROVINCES", "02,86")
    )
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


DEFAULT_GEOREF_CONFIG = GeorefConfig()
