"""GeoJSON layers for the dashboard maps, with a colour per feature."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from thaihousing.grid.models import GridFeature
from thaihousing.housing.models import Property
from thaihousing.maps.styles import GRID_SCHEMES, PROPERTY_SCHEMES


def _property_value(prop: Property, scheme: str, scores: Mapping[str, int]) -> Any:
    if scheme == "priceRange":
        return prop.monthly_min_price
    if scheme == "roomType":
        return prop.room_type
    if scheme == "amenityScore":
        return prop.amenity_score
    if scheme == "size":
        return prop.room_size_max or prop.room_size_min
    if scheme == "proximityScore":
        return scores.get(prop.id)
    raise KeyError(f"Unknown property color scheme {scheme!r}")


def _grid_value(grid: GridFeature, scheme: str) -> Any:
    if scheme == "housingSystem":
        return grid.dominant_system
    if scheme == "populationDensity":
        return grid.population
    if scheme == "housingDensity":
        return grid.housing
    if scheme == "gridClass":
        return grid.grid_class
    raise KeyError(f"Unknown grid color scheme {scheme!r}")


def properties_to_geojson(
    properties: Iterable[Property],
    color_scheme: str = "priceRange",
    proximity_scores: Mapping[str, int] | None = None,
) -> dict[str, Any]:
    """Point FeatureCollection of properties with popup fields and ``color``.

    Raises:
        KeyError: If *color_scheme* is not a property scheme.
    """
    if color_scheme not in PROPERTY_SCHEMES:
        raise KeyError(f"Unknown property color scheme {color_scheme!r}")
    scheme = PROPERTY_SCHEMES[color_scheme]
    scores = proximity_scores or {}

    features = []
    for prop in properties:
        popup = prop.model_dump(exclude={"latitude", "longitude"})
        popup["amenities"] = prop.amenities
        popup["proximity_score"] = scores.get(prop.id)
        popup["color"] = scheme.color_for(_property_value(prop, color_scheme, scores))
        features.append({
            "type": "Feature",
            "id": prop.id,
            "geometry": {"type": "Point", "coordinates": [prop.longitude, prop.latitude]},
            "properties": popup,
        })
    return {"type": "FeatureCollection", "features": features}


def grids_to_geojson(
    grids: Iterable[GridFeature],
    color_scheme: str = "housingSystem",
) -> dict[str, Any]:
    """Polygon FeatureCollection of grid cells with ``color`` and summary fields.

    Raises:
        KeyError: If *color_scheme* is not a grid scheme.
    """
    if color_scheme not in GRID_SCHEMES:
        raise KeyError(f"Unknown grid color scheme {color_scheme!r}")
    scheme = GRID_SCHEMES[color_scheme]

    features = []
    for grid in grids:
        props = dict(grid.properties)
        props["color"] = scheme.color_for(_grid_value(grid, color_scheme))
        props["dominant_system"] = grid.dominant_system
        features.append({
            "type": "Feature",
            "id": grid.id,
            "geometry": grid.geometry,
            "properties": props,
        })
    return {"type": "FeatureCollection", "features": features}
