"""Housing delivery system (HDS) grid models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

HOUSING_SYSTEMS: dict[int, str] = {
    1: "ชุมชนบุกรุก",
    2: "ถือครองชั่วคราว",
    3: "กลุ่มประชากรแฝง",
    4: "ที่อยู่อาศัยลูกจ้าง",
    5: "ที่อยู่อาศัยรัฐ",
    6: "ที่อยู่อาศัยรัฐสนับสนุน",
    7: "ที่อยู่อาศัยเอกชน",
}

PROBLEM_FIELDS: dict[str, str] = {
    "supply": "Supply_Pro",
    "subsidies": "Subsidies_",
    "stability": "Stability_",
}


class GridDataError(Exception):
    """Raised when a province's grid file is missing or malformed."""


class GridFeature(BaseModel):
    """One grid cell with aggregated population and housing counts."""

    model_config = {"frozen": True}

    id: str
    population: float = 0.0
    housing: float = 0.0
    grid_class: int | None = None
    housing_systems: dict[int, float] = Field(default_factory=dict)
    problems: dict[str, bool] = Field(default_factory=dict)
    geometry: dict[str, Any] = Field(default_factory=dict)
    properties: dict[str, Any] = Field(default_factory=dict)

    @property
    def dominant_system(self) -> int | None:
        """The housing system with the most units; ``None`` if all are zero."""
        best: int | None = None
        best_count = 0.0
        for system, count in sorted(self.housing_systems.items()):
            if count > best_count:
                best, best_count = system, count
        return best


class GridStatistics(BaseModel):
    """Aggregates over a province's grid cells."""

    total_grids: int = 0
    total_population: float = 0.0
    total_housing: float = 0.0
    average_density: float = 0.0
    housing_systems: dict[int, float] = Field(default_factory=dict)
    density_levels: dict[int, int] = Field(default_factory=dict)
    problem_areas: dict[str, int] = Field(default_factory=dict)


class GridFilters(BaseModel):
    housing_system: str = "all"
    density_level: str = "all"
    population_range: str = "all"
