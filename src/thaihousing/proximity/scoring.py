"""Pure scoring functions: category thresholds, weighting and distances."""

from __future__ import annotations

import math
from typing import Any, Iterable, Mapping

from thaihousing.proximity.models import (
    CATEGORY_RULES,
    CategoryRule,
    NearbyPlace,
    ProximityCategory,
    ScoreStatistics,
)

EARTH_RADIUS_M = 6_371_000


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def category_score(count: int, rule: CategoryRule) -> int:
    """Map a place count to 100/80/60/40/0 using the category's thresholds."""
    if count >= rule.excellent:
        return 100
    if count >= rule.good:
        return 80
    if count >= rule.fair:
        return 60
    if count > 0:
        return 40
    return 0


def weighted_score(scores: Mapping[str, int]) -> int:
    """Weighted average over the categories present in *scores*."""
    total = 0.0
    total_weight = 0.0
    for name, score in scores.items():
        weight = CATEGORY_RULES[ProximityCategory(name)].weight
        total += score * weight
        total_weight += weight
    if total_weight == 0:
        return 0
    return round_half_up(total / total_weight)


def haversine_m(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in metres."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def element_position(element: Mapping[str, Any]) -> tuple[float, float] | None:
    """Latitude/longitude of an Overpass element (node, centre or geometry)."""
    if "lat" in element and "lon" in element:
        return float(element["lat"]), float(element["lon"])
    center = element.get("center")
    if center and "lat" in center and "lon" in center:
        return float(center["lat"]), float(center["lon"])
    geometry = element.get("geometry")
    if geometry:
        lat = sum(point["lat"] for point in geometry) / len(geometry)
        lon = sum(point["lon"] for point in geometry) / len(geometry)
        return lat, lon
    return None


def place_name(tags: Mapping[str, Any], fallback: str = "") -> str:
    for key in ("name:th", "name", "name:en", "brand", "operator"):
        if tags.get(key):
            return str(tags[key])
    return fallback


def to_places(
    elements: Iterable[Mapping[str, Any]],
    latitude: float,
    longitude: float,
    fallback_name: str = "",
) -> list[NearbyPlace]:
    """Convert Overpass elements to places sorted by distance; unplaceable ones are skipped."""
    places = []
    for element in elements:
        position = element_position(element)
        if position is None:
            continue
        tags = dict(element.get("tags") or {})
        places.append(NearbyPlace(
            osm_id=int(element.get("id", 0)),
            osm_type=str(element.get("type", "node")),
            latitude=position[0],
            longitude=position[1],
            name=place_name(tags, fallback_name),
            distance_m=round(haversine_m(latitude, longitude, *position), 1),
            tags=tags,
        ))
    places.sort(key=lambda p: p.distance_m or 0.0)
    return places


def distance_score(places: Iterable[NearbyPlace]) -> int:
    """Score how close the nearest places are, independent of their count."""
    distances = [p.distance_m for p in places if p.distance_m is not None]
    if not distances:
        return 0
    closest = min(distances)
    average = sum(distances) / len(distances)
    if closest <= 100:
        return 100
    if closest <= 300:
        return 90
    if closest <= 500:
        return 80
    if average <= 600:
        return 70
    if average <= 800:
        return 60
    if len(distances) >= 3:
        return 50
    return 30


def score_statistics(scores: Iterable[int]) -> ScoreStatistics:
    """Count/average/min/max and a four-band distribution, ignoring zeros."""
    valid = [s for s in scores if s > 0]
    if not valid:
        return ScoreStatistics()
    stats = ScoreStatistics(
        count=len(valid),
        average=round(sum(valid) / len(valid), 1),
        min=min(valid),
        max=max(valid),
    )
    for score in valid:
        if score >= 80:
            stats.distribution["excellent"] += 1
        elif score >= 60:
            stats.distribution["good"] += 1
        elif score >= 40:
            stats.distribution["fair"] += 1
        else:
            stats.distribution["poor"] += 1
    return stats
