"""FastAPI router for apartment listings, provinces and regional datasets."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Query, Request

from thaihousing.housing.models import PropertyFilters
from thaihousing.housing.regional import DATASETS
from thaihousing.housing.stats import calculate_statistics, filter_properties, unique_values
from thaihousing.maps.layers import properties_to_geojson

router = APIRouter()


def _filters(
    price_range: str,
    property_type: str,
    room_type: str,
    size_range: str,
    amenity_score: str,
    proximity_score: str,
    amenities: list[str],
) -> PropertyFilters:
    return PropertyFilters(
        price_range=price_range,
        property_type=property_type,
        room_type=room_type,
        size_range=size_range,
        amenity_score=amenity_score,
        proximity_score=proximity_score,
        required_amenities=amenities,
    )


def _proximity_scores(request: Request) -> dict[str, int]:
    scorer = getattr(request.app.state, "proximity_scorer", None)
    return scorer.cache.scores() if scorer is not None else {}


# --- Provinces ---


@router.get("/api/provinces")
async def list_provinces(request: Request) -> list[dict[str, Any]]:
    catalog = request.app.state.catalog
    return [p.model_dump() for p in catalog.list_provinces()]


# --- Apartments ---


@router.get("/api/apartments")
async def list_apartments(
    request: Request,
    price_range: str = "all",
    property_type: str = "all",
    room_type: str = "all",
    size_range: str = "all",
    amenity_score: str = "all",
    proximity_score: str = "all",
    amenities: list[str] = Query(default=[]),
    format: str = "json",
    color_scheme: str = "priceRange",
) -> Any:
    """List apartments, filtered; ``format=geojson`` returns a coloured map layer."""
    service = request.app.state.apartment_service
    properties = await service.list_properties()
    scores = _proximity_scores(request)
    filters = _filters(
        price_range, property_type, room_type, size_range,
        amenity_score, proximity_score, amenities,
    )
    try:
        matched = filter_properties(properties, filters, scores)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    if format == "geojson":
        try:
            return properties_to_geojson(matched, color_scheme, scores)
        except KeyError as exc:
            raise HTTPException(status_code=400, detail=str(exc.args[0]))
    return [p.model_dump() for p in matched]


@router.get("/api/apartments/stats")
async def apartment_stats(request: Request) -> dict[str, Any]:
    service = request.app.state.apartment_service
    properties = await service.list_properties()
    return calculate_statistics(properties).model_dump()


@router.get("/api/apartments/metadata")
async def apartment_metadata(request: Request) -> dict[str, Any]:
    """Dataset bookkeeping plus the distinct values for filter dropdowns."""
    service = request.app.state.apartment_service
    properties = await service.list_properties()
    metadata = service.metadata
    return {
        "dataset": metadata.model_dump() if metadata else None,
        "property_types": unique_values(properties, "property_type"),
        "room_types": unique_values(properties, "room_type"),
    }


@router.get("/api/apartments/{property_id}")
async def get_apartment(property_id: str, request: Request) -> dict[str, Any]:
    service = request.app.state.apartment_service
    await service.list_properties()
    prop = service.get(property_id)
    if prop is None:
        raise HTTPException(status_code=404, detail=f"Property {property_id!r} not found")
    return prop.model_dump()


# --- Regional datasets ---


@router.get("/api/regions/{province_id}/{dataset}")
async def regional_dataset(
    province_id: str,
    dataset: str,
    request: Request,
    year: int | None = None,
    quintile: int | None = None,
    by_year: bool = False,
) -> list[dict[str, Any]]:
    """Fetch a province-level dataset; dashes in the name map to underscores."""
    if request.app.state.catalog.get_province(province_id) is None:
        raise HTTPException(status_code=404, detail=f"Province {province_id!r} not found")
    name = dataset.replace("-", "_")
    if name not in DATASETS:
        raise HTTPException(status_code=404, detail=f"Dataset {dataset!r} not found")

    service = request.app.state.regional_service
    if name == "housing_supply":
        if by_year:
            return await service.housing_supply_by_year(province_id)
        return await service.housing_supply(province_id, year=year)
    if name == "expenditure":
        return await service.expenditure(province_id, quintile=quintile)
    return await service.get_dataset(name, province_id)
