"""
Which GeoRef endpoint holds the second-level divisions of each province.

Most provinces are covered by ``municipios``. A few have no municipal
structure that maps onto it and must be read from ``localidades`` instead.
The table is keyed by province id or by normalized province name, so adding
a special case is a configuration change.
"""
from __future__ import annotations

from enum import Enum
from typing import Iterable, Mapping

from .models import ProvinceRef
from .normalizer import normalize


class EndpointKind(str, Enum):
    municipalities = "municipios"
    localities = "localidades"


def build_endpoint_table(locality_provinces: Iterable[str]) -> dict[str, EndpointKind]:
    table: dict[str, EndpointKind] = {}
    for key in locality_provinces:
        key = key.strip()
        if not key:
            continue
        # Ids are kept verbatim, names are stored by their comparison key.
        table[key if key.isdigit() else normalize(key, "province")] = EndpointKind.localities
    return table


def endpoint_kind_for(
    province_id: str,
    table: Mapping[str, EndpointKind],
    province: ProvinceRef | None = None,
) -> EndpointKind:
    if province_id in table:
        return table[province_id]
    if province is not None:
        by_name = table.get(normalize(province.name, "province"))
        if by_name is not None:
            return by_name
    return EndpointKind.municipalities
