"""Loads per-province HDS grid GeoJSON files.

Source files may be exported in Web Mercator (EPSG:3857); those are
reprojected to WGS84 longitude/latitude on load. Files already in WGS84
are passed through untouched.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pyproj import Transformer

from thaihousing.core.catalog import Catalog
from thaihousing.core.config import GridConfig
from thaihousing.grid.models import PROBLEM_FIELDS, GridDataError, GridFeature
from thaihousing.housing.normalize import parse_float, parse_int

logger = logging.getLogger(__name__)

_MERCATOR_TO_WGS84 = Transformer.from_crs("EPSG:3857", "EPSG:4326", always_xy=True)


def _first_position(coords: Any) -> list[float] | None:
    while isinstance(coords, list) and coords and isinstance(coords[0], list):
        coords = coords[0]
    if isinstance(coords, list) and len(coords) >= 2:
        return coords
    return None


def is_mercator(geometry: dict[str, Any]) -> bool:
    """Guess whether a geometry's coordinates are projected metres."""
    position = _first_position(geometry.get("coordinates"))
    if position is None:
        return False
    x, y = position[0], position[1]
    return abs(x) > 180 or abs(y) > 90


def transform_coords(coords: Any) -> Any:
    """Recursively reproject a GeoJSON coordinate array to WGS84."""
    if coords and isinstance(coords[0], (int, float)):
        lng, lat = _MERCATOR_TO_WGS84.transform(coords[0], coords[1])
        return [lng, lat]
    return [transform_coords(c) for c in coords]


def to_wgs84(geometry: dict[str, Any]) -> dict[str, Any]:
    if not geometry or not is_mercator(geometry):
        return geometry
    return {**geometry, "coordinates": transform_coords(geometry["coordinates"])}


def parse_feature(feature: dict[str, Any], index: int) -> GridFeature:
    props = feature.get("properties") or {}
    grid_id = feature.get("id") or props.get("OBJECTID") or props.get("FID") or index
    grid_class = props.get("Grid_Class")
    return GridFeature(
        id=str(grid_id),
        population=parse_float(props.get("Grid_POP")),
        housing=parse_float(props.get("Grid_House")),
        grid_class=parse_int(grid_class) if grid_class not in (None, "") else None,
        housing_systems={n: parse_float(props.get(f"HDS_C{n}_num")) for n in range(1, 8)},
        problems={name: bool(props.get(field)) for name, field in PROBLEM_FIELDS.items()},
        geometry=to_wgs84(feature.get("geometry") or {}),
        properties=props,
    )


class GridLoader:
    """Reads and caches grid features per province."""

    def __init__(self, catalog: Catalog, config: GridConfig | None = None) -> None:
        self._catalog = catalog
        self._config = config or GridConfig()
        self._cache: dict[str, list[GridFeature]] = {}

    def available_provinces(self) -> list[str]:
        return [p.id for p in self._catalog.list_provinces() if p.grid_file]

    def load(self, province_id: str) -> list[GridFeature]:
        """Return the grid features for a province.

        Raises:
            KeyError: If the province is unknown or has no grid file.
            GridDataError: If the file is missing or not a FeatureCollection.
        """
        if province_id in self._cache:
            return self._cache[province_id]

        province = self._catalog.get_province(province_id)
        if province is None or not province.grid_file:
            raise KeyError(f"No grid data for province {province_id!r}")

        path = Path(self._config.data_dir) / province.grid_file
        try:
            with open(path, encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError as exc:
            raise GridDataError(f"Grid file not found: {path}") from exc
        except json.JSONDecodeError as exc:
            raise GridDataError(f"Invalid GeoJSON in {path}: {exc}") from exc

        if not isinstance(data, dict) or data.get("type") != "FeatureCollection":
            raise GridDataError(f"{path} is not a GeoJSON FeatureCollection")

        features = [parse_feature(f, i) for i, f in enumerate(data.get("features") or [])]
        logger.info("Loaded %d grid cells for province %s", len(features), province_id)
        self._cache[province_id] = features
        return features
