"""Housing data models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, computed_field


AMENITY_FIELDS: tuple[str, ...] = (
    "has_air",
    "has_furniture",
    "has_internet",
    "has_parking",
    "has_lift",
    "has_pool",
    "has_fitness",
    "has_security",
)

PRICE_BUCKETS: tuple[str, ...] = ("under5k", "5k-10k", "10k-20k", "20k-30k", "over30k")


def price_bucket(price: float) -> str:
    """Classify a monthly rent into its price bucket."""
    if price < 5000:
        return "under5k"
    if price < 10000:
        return "5k-10k"
    if price < 20000:
        return "10k-20k"
    if price < 30000:
        return "20k-30k"
    return "over30k"


def size_category(size: float) -> str:
    if size < 30:
        return "small"
    if size < 50:
        return "medium"
    if size < 80:
        return "large"
    return "very-large"


class Property(BaseModel):
    """A normalized rental property listing."""

    model_config = {"frozen": True}

    id: str
    name: str = ""
    property_type: str = ""
    room_type: str = ""
    latitude: float
    longitude: float
    monthly_min_price: float = 0.0
    monthly_max_price: float = 0.0
    room_size_min: float = 0.0
    room_size_max: float = 0.0
    rooms_available: int = 0

    has_air: bool = False
    has_furniture: bool = False
    has_internet: bool = False
    has_parking: bool = False
    has_lift: bool = False
    has_pool: bool = False
    has_fitness: bool = False
    has_security: bool = False

    address: str = ""
    phone: str = ""
    line_id: str = ""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def price_bucket(self) -> str:
        return price_bucket(self.monthly_min_price)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def amenity_score(self) -> int:
        """Share of the eight amenity flags that are present, 0-100."""
        available = sum(1 for name in AMENITY_FIELDS if getattr(self, name))
        return round(available / len(AMENITY_FIELDS) * 100)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def size_category(self) -> str:
        return size_category(self.room_size_max or self.room_size_min)

    @property
    def amenities(self) -> list[str]:
        return [name for name in AMENITY_FIELDS if getattr(self, name)]


class PropertyStatistics(BaseModel):
    """Aggregate statistics over a set of properties."""

    total_properties: int = 0
    average_price: float = 0.0
    average_size: float = 0.0
    average_amenity_score: float = 0.0
    property_types: dict[str, int] = Field(default_factory=dict)
    room_types: dict[str, int] = Field(default_factory=dict)
    price_ranges: dict[str, int] = Field(
        default_factory=lambda: {bucket: 0 for bucket in PRICE_BUCKETS}
    )


class PropertyFilters(BaseModel):
    """Dashboard filter selections. ``"all"`` disables a filter."""

    price_range: str = "all"
    property_type: str = "all"
    room_type: str = "all"
    size_range: str = "all"
    amenity_score: str = "all"
    proximity_score: str = "all"
    required_amenities: list[str] = Field(default_factory=list)


class DatasetMetadata(BaseModel):
    """Bookkeeping about the last apartment fetch."""

    resource_id: str
    total_records: int = 0
    valid_records: int = 0
    dropped_records: int = 0
    fields: list[dict[str, Any]] = Field(default_factory=list)
