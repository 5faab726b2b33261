"""Proximity scoring models and per-category parameters."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class ProximityCategory(StrEnum):
    """Service categories that contribute to a proximity score."""

    TRANSPORT = "transport"
    CONVENIENCE = "convenience"
    RESTAURANT = "restaurant"
    HEALTH = "health"
    SCHOOL = "school"


class CategoryRule(BaseModel):
    """Search radius, weight and count thresholds for one category."""

    model_config = {"frozen": True}

    category: ProximityCategory
    radius_m: int
    weight: float
    excellent: int
    good: int
    fair: int
    name_th: str
    icon: str


# Processed in this order; weights sum to 1.
CATEGORY_RULES: dict[ProximityCategory, CategoryRule] = {
    rule.category: rule
    for rule in (
        CategoryRule(
            category=ProximityCategory.TRANSPORT, radius_m=2500, weight=0.25,
            excellent=20, good=10, fair=4, name_th="ขนส่งสาธารณะ", icon="🚌",
        ),
        CategoryRule(
            category=ProximityCategory.CONVENIENCE, radius_m=500, weight=0.20,
            excellent=6, good=3, fair=1, name_th="ร้านสะดวกซื้อ", icon="🏪",
        ),
        CategoryRule(
            category=ProximityCategory.RESTAURANT, radius_m=1500, weight=0.20,
            excellent=30, good=15, fair=5, name_th="ร้านอาหาร", icon="🍽️",
        ),
        CategoryRule(
            category=ProximityCategory.HEALTH, radius_m=3000, weight=0.20,
            excellent=12, good=6, fair=2, name_th="สถานพยาบาล", icon="🏥",
        ),
        CategoryRule(
            category=ProximityCategory.SCHOOL, radius_m=4000, weight=0.15,
            excellent=8, good=4, fair=2, name_th="สถานศึกษา", icon="🎓",
        ),
    )
}


class NearbyPlace(BaseModel):
    """A point of interest returned by Overpass."""

    osm_id: int
    osm_type: str = "node"
    latitude: float
    longitude: float
    name: str = ""
    distance_m: float | None = None
    tags: dict[str, Any] = Field(default_factory=dict)


class CategoryResult(BaseModel):
    """Outcome of querying one category for one property."""

    category: ProximityCategory
    count: int = 0
    score: int = 0
    radius_m: int
    distance_score: int = 0
    error: str | None = None
    places: list[NearbyPlace] = Field(default_factory=list, exclude=True)


class ProximityResult(BaseModel):
    """Overall score plus the per-category breakdown."""

    property_id: str
    score: int = 0
    failed: bool = False
    categories: dict[str, CategoryResult] = Field(default_factory=dict)

    @property
    def breakdown(self) -> dict[str, int]:
        return {name: result.score for name, result in self.categories.items()}

    @property
    def counts(self) -> dict[str, int]:
        return {name: result.count for name, result in self.categories.items()}


class ScoreStatistics(BaseModel):
    """Summary of the non-zero proximity scores computed so far."""

    count: int = 0
    average: float = 0.0
    min: int = 0
    max: int = 0
    distribution: dict[str, int] = Field(
        default_factory=lambda: {"excellent": 0, "good": 0, "fair": 0, "poor": 0}
    )
