"""
Name normalization for administrative divisions.

GeoRef and Nominatim name the same places with different administrative
vocabulary ("Municipio de Córdoba" vs "Córdoba", "Pedanía San Roque" vs
"San Roque"). Every name comparison in the engine goes through
``normalize`` so that matching decisions are reproducible from one place.
"""
from __future__ import annotations

import re
import unicodedata
from typing import Literal

NameKind = Literal["province", "city"]

# Province-equivalent token for the Ciudad Autónoma de Buenos Aires.
CABA = "caba"

_CABA_NAMES = frozenset({
    "caba",
    "ciudad autonoma de buenos aires",
    "ciudad de buenos aires",
    "capital federal",
})

_PROVINCE_PREFIXES = ("provincia de ", "provincia del ")

_CITY_PREFIXES = (
    "municipio de ",
    "municipalidad de ",
    "partido de ",
    "departamento ",
    "pedania ",
    "ciudad de ",
    "localidad ",
    "barrio ",
    "comision municipal de ",
)

_CITY_SUFFIXES = (
    " rural",
    " central",
    " y localidades",
    " eje vial",
)

_DASH_CAPITAL_RE = re.compile(r"\s*-\s*capital$")
_PARENTHETICAL_RE = re.compile(r"\s*\([^()]*\)$")


def fold(raw: object) -> str:
    """Strip diacritics, lowercase and collapse whitespace. Non-strings fold to ``""``."""
    if not isinstance(raw, str) or not raw:
        return ""
    decomposed = unicodedata.normalize("NFD", raw)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return " ".join(stripped.lower().split())


def _strip_prefixes(value: str, prefixes: tuple[str, ...]) -> str:
    for prefix in prefixes:
        if value.startswith(prefix):
            return value[len(prefix):].strip()
    return value


def _strip_city_suffixes(value: str) -> str:
    value = _PARENTHETICAL_RE.sub("", value)
    value = _DASH_CAPITAL_RE.sub("", value)
    for suffix in _CITY_SUFFIXES:
        if value.endswith(suffix):
            return value[: -len(suffix)].strip()
    return value.strip()


def _normalize_province(value: str) -> str:
    while True:
        stripped = _strip_prefixes(value, _PROVINCE_PREFIXES)
        if stripped == value:
            break
        value = stripped
    if value in _CABA_NAMES:
        return CABA
    # "Tierra del Fuego, Antártida e Islas del Atlántico Sur" -> "tierra del fuego"
    value = value.split(",", 1)[0].strip()
    if value in _CABA_NAMES:
        return CABA
    return value


def _normalize_city(value: str) -> str:
    while value not in _CABA_NAMES:
        stripped = _strip_city_suffixes(_strip_prefixes(value, _CITY_PREFIXES))
        if stripped == value:
            return value
        value = stripped
    return CABA


def normalize(raw: object, kind: NameKind = "city") -> str:
    """
    Convert a free-form administrative name into a comparison key.

    Deterministic and total: any input, including ``None`` or non-strings,
    yields a string, and ``normalize(normalize(x, k), k) == normalize(x, k)``.
    """
    value = fold(raw)
    if not value:
        return ""
    if kind == "province":
        return _normalize_province(value)
    return _normalize_city(value)
