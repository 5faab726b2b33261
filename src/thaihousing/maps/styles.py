"""Colour schemes and legends for property markers and grid polygons."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

NO_DATA_COLOR = "#cccccc"


class LegendItem(BaseModel):
    color: str
    label: str


class ThresholdScheme(BaseModel):
    """Numeric classification: the first step whose bound the value reaches wins.

    Steps are ordered from the highest bound down. With ``strict`` the value
    must exceed the bound rather than reach it.
    """

    name: str
    title: str
    steps: list[tuple[float, str, str]]
    default_color: str
    default_label: str
    strict: bool = False

    def color_for(self, value: float | None) -> str:
        if value is None:
            return NO_DATA_COLOR
        for bound, color, _label in self.steps:
            if value > bound or (not self.strict and value == bound):
                return color
        return self.default_color

    def legend(self) -> list[LegendItem]:
        items = [LegendItem(color=color, label=label) for _bound, color, label in self.steps]
        items.append(LegendItem(color=self.default_color, label=self.default_label))
        return items


class CategoricalScheme(BaseModel):
    name: str
    title: str
    colors: dict[str, str] = Field(default_factory=dict)
    labels: dict[str, str] = Field(default_factory=dict)
    default_color: str = NO_DATA_COLOR

    def color_for(self, value: Any) -> str:
        if value is None:
            return self.default_color
        return self.colors.get(str(value), self.default_color)

    def legend(self) -> list[LegendItem]:
        return [
            LegendItem(color=color, label=self.labels.get(key, key))
            for key, color in self.colors.items()
        ]


# ---------------------------------------------------------------------------
# Property marker schemes
# ---------------------------------------------------------------------------

_SCORE_STEPS = [
    (80, "#059669", "80-100"),
    (60, "#0891b2", "60-79"),
    (40, "#ca8a04", "40-59"),
    (20, "#ea580c", "20-39"),
]

PROPERTY_SCHEMES: dict[str, ThresholdScheme | CategoricalScheme] = {
    "priceRange": ThresholdScheme(
        name="priceRange",
        title="ราคาเช่าต่อเดือน (บาท)",
        steps=[
            (30000, "#ef4444", "> 30,000"),
            (20000, "#f97316", "20,000-30,000"),
            (10000, "#eab308", "10,000-20,000"),
            (5000, "#84cc16", "5,000-10,000"),
        ],
        default_color="#22c55e",
        default_label="< 5,000",
    ),
    "roomType": CategoricalScheme(
        name="roomType",
        title="ประเภทห้อง",
        colors={
            "หอพัก": "#3b82f6",
            "แมนชั่น": "#8b5cf6",
            "อพาร์ตเมนต์": "#06b6d4",
            "คอนโด": "#f59e0b",
        },
        default_color="#6b7280",
    ),
    "amenityScore": ThresholdScheme(
        name="amenityScore",
        title="คะแนนสิ่งอำนวยความสะดวก",
        steps=_SCORE_STEPS,
        default_color="#dc2626",
        default_label="0-19",
    ),
    "size": ThresholdScheme(
        name="size",
        title="ขนาดห้อง (ตร.ม.)",
        steps=[
            (50, "#7c3aed", ">= 50"),
            (35, "#2563eb", "35-49"),
            (25, "#059669", "25-34"),
            (15, "#ea580c", "15-24"),
        ],
        default_color="#dc2626",
        default_label="< 15",
    ),
    "proximityScore": ThresholdScheme(
        name="proximityScore",
        title="คะแนนความใกล้สิ่งอำนวยความสะดวก",
        steps=_SCORE_STEPS,
        default_color="#dc2626",
        default_label="0-19",
    ),
}

# ---------------------------------------------------------------------------
# Grid polygon schemes
# ---------------------------------------------------------------------------

_DENSITY_RAMP = ["#800026", "#bd0026", "#e31a1c", "#fc4e2a", "#fd8d3c", "#feb24c", "#fed976"]


def _density_steps(bounds: list[int]) -> list[tuple[float, str, str]]:
    steps = []
    upper: int | None = None
    for bound, color in zip(bounds, _DENSITY_RAMP):
        label = f"> {bound:,}" if upper is None else f"{bound + 1:,}-{upper:,}"
        steps.append((float(bound), color, label))
        upper = bound
    return steps


GRID_SCHEMES: dict[str, ThresholdScheme | CategoricalScheme] = {
    "housingSystem": CategoricalScheme(
        name="housingSystem",
        title="ระบบที่อยู่อาศัยหลัก",
        colors={
            "1": "#e31a1c",
            "2": "#ff7f00",
            "3": "#fdbf6f",
            "4": "#1f78b4",
            "5": "#33a02c",
            "6": "#a6cee3",
            "7": "#b2df8a",
        },
        labels={
            "1": "C1: ชุมชนบุกรุก",
            "2": "C2: ถือครองชั่วคราว",
            "3": "C3: กลุ่มประชากรแฝง",
            "4": "C4: ที่อยู่อาศัยลูกจ้าง",
            "5": "C5: ที่อยู่อาศัยรัฐ",
            "6": "C6: ที่อยู่อาศัยรัฐสนับสนุน",
            "7": "C7: ที่อยู่อาศัยเอกชน",
        },
    ),
    "populationDensity": ThresholdScheme(
        name="populationDensity",
        title="ความหนาแน่นประชากร (คน)",
        steps=_density_steps([5000, 3000, 2000, 1000, 500, 200, 50]),
        default_color="#ffeda0",
        default_label="0-50",
        strict=True,
    ),
    "housingDensity": ThresholdScheme(
        name="housingDensity",
        title="ความหนาแน่นที่อยู่อาศัย (หน่วย)",
        steps=_density_steps([2000, 1500, 1000, 500, 200, 100, 20]),
        default_color="#ffeda0",
        default_label="0-20",
        strict=True,
    ),
    "gridClass": CategoricalScheme(
        name="gridClass",
        title="ระดับความหนาแน่น",
        colors={
            "5": "#006837",
            "4": "#31a354",
            "3": "#78c679",
            "2": "#c2e699",
            "1": "#ffffcc",
        },
        labels={
            "5": "ระดับ 5 (สูงมาก)",
            "4": "ระดับ 4 (สูง)",
            "3": "ระดับ 3 (ปานกลาง)",
            "2": "ระดับ 2 (ต่ำ)",
            "1": "ระดับ 1 (ต่ำมาก)",
        },
    ),
}

# Nearby-place overlay colours, keyed by proximity category.
PLACE_CATEGORY_COLORS: dict[str, str] = {
    "restaurant": "#ef4444",
    "convenience": "#22c55e",
    "health": "#3b82f6",
    "school": "#f59e0b",
    "transport": "#8b5cf6",
}


def get_scheme(name: str) -> ThresholdScheme | CategoricalScheme:
    """Look up a property or grid scheme by name.

    Raises:
        KeyError: If no scheme has that name.
    """
    if name in PROPERTY_SCHEMES:
        return PROPERTY_SCHEMES[name]
    if name in GRID_SCHEMES:
        return GRID_SCHEMES[name]
    raise KeyError(f"Unknown color scheme {name!r}")
