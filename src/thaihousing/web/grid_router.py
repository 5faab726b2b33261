"""FastAPI router for housing delivery grids and map legends."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Request

from thaihousing.grid.models import GridDataError, GridFeature, GridFilters
from thaihousing.grid.stats import calculate_grid_statistics, filter_grids
from thaihousing.maps.layers import grids_to_geojson
from thaihousing.maps.styles import get_scheme

router = APIRouter()


def _load(request: Request, province_id: str) -> list[GridFeature]:
    loader = request.app.state.grid_loader
    try:
        return loader.load(province_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"No grid data for province {province_id!r}")
    except GridDataError as exc:
        raise HTTPException(status_code=503, detail=str(exc))


@router.get("/api/grids")
async def list_grid_provinces(request: Request) -> list[str]:
    return request.app.state.grid_loader.available_provinces()


@router.get("/api/grids/{province_id}")
async def get_grids(
    province_id: str,
    request: Request,
    housing_system: str = "all",
    density_level: str = "all",
    population_range: str = "all",
    color_scheme: str = "housingSystem",
) -> dict[str, Any]:
    """Filtered grid cells as a coloured GeoJSON FeatureCollection."""
    grids = _load(request, province_id)
    filters = GridFilters(
        housing_system=housing_system,
        density_level=density_level,
        population_range=population_range,
    )
    try:
        matched = filter_grids(grids, filters)
        return grids_to_geojson(matched, color_scheme)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except KeyError as exc:
        raise HTTPException(status_code=400, detail=str(exc.args[0]))


@router.get("/api/grids/{province_id}/stats")
async def grid_stats(province_id: str, request: Request) -> dict[str, Any]:
    return calculate_grid_statistics(_load(request, province_id)).model_dump()


@router.get("/api/maps/legend/{scheme}")
async def legend(scheme: str) -> dict[str, Any]:
    try:
        color_scheme = get_scheme(scheme)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Color scheme {scheme!r} not found")
    return {
        "scheme": scheme,
        "title": color_scheme.title,
        "items": [item.model_dump() for item in color_scheme.legend()],
    }
