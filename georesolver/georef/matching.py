"""
Matching of geocoder place names against the reference lists.

Strategies run in strict priority order and the first hit wins; there is
no scoring across strategies:

1. direct id         the payload already carries a registry id
2. exact name        normalized candidate == normalized municipality name
3. capital           the geocoder only named the province, so look for the
                     province's capital ("Capital", or a municipality
                     named after the province)
4. substring         normalized municipality name contains the candidate

Candidates are tried in the order given by the caller, most specific first.
On ties inside a strategy the first municipality in list order wins.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Iterable, Sequence, TypeVar

from .models import MunicipalityRef, ProvinceRef
from .normalizer import NameKind, normalize

T = TypeVar("T", MunicipalityRef, ProvinceRef)


class MatchStrategy(str, Enum):
    direct_id = "direct_id"
    exact_name = "exact_name"
    capital = "capital"
    substring = "substring"


@dataclass(frozen=True)
class Match(Generic[T]):
    ref: T
    strategy: MatchStrategy


def _clean_candidates(candidate_names: Iterable[str | None], kind: NameKind) -> list[str]:
    keys: list[str] = []
    for name in candidate_names:
        key = normalize(name, kind)
        if key and key not in keys:
            keys.append(key)
    return keys


def _capital_keys(province: ProvinceRef) -> set[str]:
    # "Ciudad de X" already normalizes to "x".
    return {"capital", normalize(province.name, "province")}


def match_municipality(
    candidate_names: Sequence[str | None],
    province: ProvinceRef | None,
    municipalities: Sequence[MunicipalityRef],
    upstream_id: str | None = None,
) -> Match[MunicipalityRef] | None:
    """Run the strategy pipeline and report which strategy matched."""
    if province is not None:
        municipalities = [m for m in municipalities if m.province_id == province.id]

    if upstream_id:
        for m in municipalities:
            if m.id == upstream_id:
                return Match(m, MatchStrategy.direct_id)

    keys = _clean_candidates(candidate_names, "city")
    indexed = [(normalize(m.name, "city"), m) for m in municipalities]

    for key in keys:
        for name_key, m in indexed:
            if name_key == key:
                return Match(m, MatchStrategy.exact_name)

    if province is not None:
        province_key = normalize(province.name, "province")
        named_province = province_key in keys or province_key in _clean_candidates(candidate_names, "province")
        if province_key and named_province:
            targets = _capital_keys(province)
            for name_key, m in indexed:
                if name_key in targets:
                    return Match(m, MatchStrategy.capital)

    for key in keys:
        for name_key, m in indexed:
            if key in name_key:
                return Match(m, MatchStrategy.substring)

    return None


def resolve(
    candidate_names: Sequence[str | None],
    province: ProvinceRef | None,
    municipalities: Sequence[MunicipalityRef],
    upstream_id: str | None = None,
) -> MunicipalityRef | None:
    """Best canonical municipality for ``candidate_names``, or ``None`` when nothing matches."""
    match = match_municipality(candidate_names, province, municipalities, upstream_id)
    return match.ref if match else None


def match_province(
    names: Sequence[str | None],
    provinces: Sequence[ProvinceRef],
    upstream_id: str | None = None,
) -> Match[ProvinceRef] | None:
    """Province tier: direct id (registry id or ISO 3166-2 code), then exact name."""
    if upstream_id:
        wanted = upstream_id.strip().upper()
        for p in provinces:
            if p.id == upstream_id or (p.iso_id and p.iso_id.upper() == wanted):
                return Match(p, MatchStrategy.direct_id)

    keys = _clean_candidates(names, "province")
    for key in keys:
        for p in provinces:
            if normalize(p.name, "province") == key:
                return Match(p, MatchStrategy.exact_name)
    return None


def resolve_province(
    names: Sequence[str | None],
    provinces: Sequence[ProvinceRef],
    upstream_id: str | None = None,
) -> ProvinceRef | None:
    match = match_province(names, provinces, upstream_id)
    return match.ref if match else None
