"""Normalization of raw CKAN apartment rows into :class:`Property` records.

CKAN's datastore returns most columns as strings. Numbers are parsed
leniently (a leading numeric prefix is accepted, anything else becomes 0),
string booleans such as ``"TRUE"`` are coerced, and rows that cannot be
placed on a map are dropped.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Iterable

from thaihousing.housing.models import AMENITY_FIELDS, Property

logger = logging.getLogger(__name__)

_FLOAT_PREFIX = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")
_INT_PREFIX = re.compile(r"^\s*[+-]?\d+")
_TRUTHY = {"true", "1", "yes", "y", "t"}


def parse_float(value: Any, default: float = 0.0) -> float:
    """Parse *value* as a float, returning *default* when it has no numeric prefix."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return default if math.isnan(value) or math.isinf(value) else float(value)
    match = _FLOAT_PREFIX.match(str(value).replace(",", ""))
    if match is None:
        return default
    return float(match.group(0))


def parse_int(value: Any, default: int = 0) -> int:
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, float):
        return default if math.isnan(value) or math.isinf(value) else int(value)
    if isinstance(value, int):
        return value
    match = _INT_PREFIX.match(str(value).replace(",", ""))
    return int(match.group(0)) if match else default


def parse_bool(value: Any) -> bool:
    """Coerce CKAN boolean encodings (``True``, ``"TRUE"``, ``"1"``) to bool."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    return False


def is_valid_coordinate(latitude: float, longitude: float) -> bool:
    if math.isnan(latitude) or math.isnan(longitude):
        return False
    if latitude == 0 or longitude == 0:
        return False
    return -90 <= latitude <= 90 and -180 <= longitude <= 180


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _record_id(row: dict[str, Any], name: str, latitude: float, longitude: float) -> str:
    for key in ("apartment_id", "id"):
        value = row.get(key)
        if value not in (None, ""):
            return str(value)
    return f"{name}_{latitude}_{longitude}"


def normalize_record(row: dict[str, Any]) -> Property | None:
    """Normalize one raw row, or return ``None`` if it lacks valid coordinates."""
    latitude = parse_float(row.get("latitude"), default=math.nan)
    longitude = parse_float(row.get("longitude"), default=math.nan)
    if not is_valid_coordinate(latitude, longitude):
        return None

    name = _text(row.get("name") or row.get("apartment_name"))
    amenities = {field: parse_bool(row.get(field)) for field in AMENITY_FIELDS}

    return Property(
        id=_record_id(row, name, latitude, longitude),
        name=name,
        property_type=_text(row.get("property_type")),
        room_type=_text(row.get("room_type")),
        latitude=latitude,
        longitude=longitude,
        monthly_min_price=parse_float(row.get("monthly_min_price")),
        monthly_max_price=parse_float(row.get("monthly_max_price")),
        room_size_min=parse_float(row.get("room_size_min")),
        room_size_max=parse_float(row.get("room_size_max")),
        rooms_available=parse_int(row.get("rooms_available")),
        address=_text(row.get("address")),
        phone=_text(row.get("phone")),
        line_id=_text(row.get("line_id")),
        **amenities,
    )


def normalize_records(rows: Iterable[dict[str, Any]]) -> list[Property]:
    """Normalize many rows, dropping the ones that cannot be mapped."""
    properties: list[Property] = []
    dropped = 0
    for row in rows:
        prop = normalize_record(row)
        if prop is None:
            dropped += 1
            continue
        properties.append(prop)
    if dropped:
        logger.info("Dropped %d records without valid coordinates", dropped)
    return properties
