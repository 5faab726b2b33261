"""Overpass QL query builders, one tag selector set per category."""

from __future__ import annotations

from thaihousing.proximity.models import ProximityCategory

_SELECTORS: dict[ProximityCategory, list[str]] = {
    ProximityCategory.TRANSPORT: [
        'node["public_transport"]',
        'node["highway"="bus_stop"]',
        'node["amenity"="bus_station"]',
        'node["railway"="station"]',
        'way["public_transport"]',
        'way["amenity"="bus_station"]',
    ],
    ProximityCategory.CONVENIENCE: [
        'node["shop"~"^(convenience|supermarket)$"]',
        'way["shop"~"^(convenience|supermarket)$"]',
    ],
    ProximityCategory.RESTAURANT: [
        'node["amenity"~"^(restaurant|cafe|fast_food)$"]',
        'way["amenity"~"^(restaurant|cafe|fast_food)$"]',
    ],
    ProximityCategory.HEALTH: [
        'node["amenity"~"^(hospital|clinic|doctors|dentist|pharmacy)$"]',
        'node["healthcare"]',
        'node["shop"="chemist"]',
        'way["amenity"~"^(hospital|clinic|doctors|dentist|pharmacy)$"]',
        'way["healthcare"]',
    ],
    ProximityCategory.SCHOOL: [
        'node["amenity"~"^(school|university|kindergarten)$"]',
        'way["amenity"~"^(school|university|kindergarten)$"]',
    ],
}


def build_query(
    category: ProximityCategory | str,
    latitude: float,
    longitude: float,
    radius_m: int,
    timeout: int = 25,
) -> str:
    """Build the query for *category* around a point.

    ``out center`` makes ways carry a centre coordinate, so every element
    can be placed on the map and measured.

    Raises:
        ValueError: If *category* is not a known proximity category.
    """
    selectors = _SELECTORS[ProximityCategory(category)]
    around = f"(around:{radius_m},{latitude},{longitude})"
    body = "".join(f"{selector}{around};" for selector in selectors)
    return f"[out:json][timeout:{timeout}];({body});out center;"
