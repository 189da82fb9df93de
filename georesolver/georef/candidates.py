from __future__ import annotations

import re

from .models import AddressCandidate
from .normalizer import fold, normalize

# Most specific first.
LOCALITY_FIELDS: tuple[str, ...] = (
    "municipality",
    "city",
    "town",
    "village",
    "suburb",
    "county",
    "locality",
    "local_administrative_area",
    "hamlet",
    "city_district",
)

_ADMIN_KEYWORDS = ("departamento", "partido", "provincia de", "provincia del")
_POSTCODE_RE = re.compile(r"^[a-z]?\d{4}[a-z]{0,3}$")


def locality_names(address: AddressCandidate | None) -> list[str]:
    if address is None:
        return []
    names: list[str] = []
    for field in LOCALITY_FIELDS:
        value = getattr(address, field)
        if isinstance(value, str) and value.strip():
            names.append(value.strip())
    return names


def name_from_display(display_name: str | None, address: AddressCandidate | None = None) -> str | None:
    """
    First segment of the geocoder's display string that can name a locality.

    Skips house numbers, postcodes, the street and the country, and
    segments that name an administrative division ("Departamento Capital",
    "Partido de La Plata", "Provincia de Córdoba").
    """
    if not display_name:
        return None
    skip: set[str] = set()
    if address is not None:
        for value in (address.road, address.house_number, address.postcode, address.country):
            if value:
                skip.add(fold(value))
    for segment in display_name.split(","):
        key = fold(segment)
        if not key or key in skip:
            continue
        if key.isdigit() or _POSTCODE_RE.match(key):
            continue
        if key.startswith(_ADMIN_KEYWORDS):
            continue
        return segment.strip()
    return None


def build_candidate_names(
    address: AddressCandidate | None,
    display_name: str | None = None,
    fallback: str | None = None,
) -> list[str]:
    """
    Ordered, de-duplicated candidate names for the municipality step.

    ``fallback`` (a name supplied by the caller) is only used when the
    address carries no locality field at all.
    """
    names = locality_names(address)
    if not names and fallback:
        names.append(fallback)
    parsed = name_from_display(display_name, address)
    if parsed:
        names.append(parsed)

    seen: set[str] = set()
    ordered: list[str] = []
    for name in names:
        key = normalize(name, "city")
        if key and key not in seen:
            seen.add(key)
            ordered.append(name)
    return ordered
