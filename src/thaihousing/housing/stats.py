"""Derived statistics and dashboard filters over normalized properties."""

from __future__ import annotations

from collections import Counter
from typing import Iterable, Mapping

from thaihousing.housing.models import (
    AMENITY_FIELDS,
    PRICE_BUCKETS,
    Property,
    PropertyFilters,
    PropertyStatistics,
    price_bucket,
)


def parse_range(value: str) -> tuple[float, float | None]:
    """Parse a ``"min-max"`` filter value.

    A bare number (``"401"``) means "at least that value" and yields
    ``(min, None)``.

    Raises:
        ValueError: If the value is not a number or a ``min-max`` pair.
    """
    text = value.strip()
    if "-" in text[1:]:
        low, high = text.split("-", 1)
        return float(low), float(high)
    return float(text), None


def in_range(value: float, range_value: str) -> bool:
    """Check *value* against an inclusive ``"min-max"`` range."""
    low, high = parse_range(range_value)
    if value < low:
        return False
    return high is None or value <= high


def _average(values: list[float]) -> float:
    return round(sum(values) / len(values), 2) if values else 0.0


def calculate_statistics(properties: Iterable[Property]) -> PropertyStatistics:
    """Aggregate counts and averages for the dashboard summary cards."""
    props = list(properties)
    if not props:
        return PropertyStatistics()

    prices = [p.monthly_min_price for p in props if p.monthly_min_price > 0]
    sizes = [p.room_size_min for p in props if p.room_size_min > 0]
    price_ranges = {bucket: 0 for bucket in PRICE_BUCKETS}
    for p in prices:
        price_ranges[price_bucket(p)] += 1

    return PropertyStatistics(
        total_properties=len(props),
        average_price=_average(prices),
        average_size=_average(sizes),
        average_amenity_score=_average([float(p.amenity_score) for p in props]),
        property_types=dict(Counter(p.property_type or "unknown" for p in props)),
        room_types=dict(Counter(p.room_type or "unknown" for p in props)),
        price_ranges=price_ranges,
    )


def filter_properties(
    properties: Iterable[Property],
    filters: PropertyFilters,
    proximity_scores: Mapping[str, int] | None = None,
) -> list[Property]:
    """Apply the dashboard filters; ``"all"`` leaves a dimension unfiltered.

    Properties that have not been scored count as a proximity score of 0.

    Raises:
        ValueError: On an unparseable range or an unknown amenity name.
    """
    unknown = [a for a in filters.required_amenities if a not in AMENITY_FIELDS]
    if unknown:
        raise ValueError(f"Unknown amenities: {', '.join(unknown)}")
    scores = proximity_scores or {}

    result: list[Property] = []
    for prop in properties:
        if filters.price_range != "all" and not in_range(prop.monthly_min_price, filters.price_range):
            continue
        if filters.property_type != "all" and prop.property_type != filters.property_type:
            continue
        if filters.room_type != "all" and prop.room_type != filters.room_type:
            continue
        if filters.size_range != "all" and not in_range(prop.room_size_min, filters.size_range):
            continue
        if filters.amenity_score != "all" and not in_range(prop.amenity_score, filters.amenity_score):
            continue
        if filters.proximity_score != "all":
            if not in_range(scores.get(prop.id, 0), filters.proximity_score):
                continue
        if not all(getattr(prop, name) for name in filters.required_amenities):
            continue
        result.append(prop)
    return result


def unique_values(properties: Iterable[Property], field: str) -> list[str]:
    """Sorted distinct non-empty values of a text field, for filter dropdowns."""
    return sorted({getattr(p, field) for p in properties if getattr(p, field)})
