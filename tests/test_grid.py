"""Tests for HDS grid loading, statistics and filters."""

from __future__ import annotations

import json

import pytest
from pyproj import Transformer

from thaihousing.core.catalog import Catalog
from thaihousing.core.config import GridConfig
from thaihousing.grid.loader import GridLoader, is_mercator, parse_feature, to_wgs84
from thaihousing.grid.models import GridDataError, GridFilters
from thaihousing.grid.stats import calculate_grid_statistics, filter_grids

_TO_MERCATOR = Transformer.from_crs("EPSG:4326", "EPSG:3857", always_xy=True)


def _square(lng: float, lat: float, size: float = 0.01, mercator: bool = False) -> dict:
    ring = [[lng, lat], [lng + size, lat], [lng + size, lat + size], [lng, lat + size], [lng, lat]]
    if mercator:
        ring = [list(_TO_MERCATOR.transform(x, y)) for x, y in ring]
    return {"type": "Polygon", "coordinates": [ring]}


def _feature(fid: int, mercator: bool = False, **props) -> dict:
    base = {
        "OBJECTID": fid,
        "Grid_POP": 0,
        "Grid_House": 0,
        "Grid_Class": 1,
        **{f"HDS_C{n}_num": 0 for n in range(1, 8)},
        "Supply_Pro": None,
        "Subsidies_": None,
        "Stability_": None,
    }
    base.update(props)
    return {"type": "Feature", "properties": base, "geometry": _square(102.8, 16.4, mercator=mercator)}


def _write(tmp_path, features, name="HDS_KKN01.geojson") -> None:
    (tmp_path / name).write_text(
        json.dumps({"type": "FeatureCollection", "features": features}),
        encoding="utf-8",
    )


class TestProjection:
    def test_detects_mercator(self) -> None:
        assert is_mercator(_square(102.8, 16.4, mercator=True))
        assert not is_mercator(_square(102.8, 16.4))

    def test_transforms_to_wgs84(self) -> None:
        geometry = to_wgs84(_square(102.8, 16.4, mercator=True))
        lng, lat = geometry["coordinates"][0][0]
        assert lng == pytest.approx(102.8, abs=1e-6)
        assert lat == pytest.approx(16.4, abs=1e-6)

    def test_wgs84_untouched(self) -> None:
        geometry = _square(102.8, 16.4)
        assert to_wgs84(geometry) is geometry


class TestGridLoader:
    def test_load_province(self, tmp_path) -> None:
        _write(tmp_path, [_feature(1, mercator=True, Grid_POP=1200, HDS_C4_num=30)])
        loader = GridLoader(Catalog(), GridConfig(data_dir=str(tmp_path)))
        grids = loader.load("40")
        assert len(grids) == 1
        assert grids[0].id == "1"
        assert grids[0].population == 1200
        assert grids[0].dominant_system == 4
        lng, lat = grids[0].geometry["coordinates"][0][0]
        assert lng == pytest.approx(102.8, abs=1e-6)
        assert loader.load("40") is grids

    def test_province_without_grid(self, tmp_path) -> None:
        loader = GridLoader(Catalog(), GridConfig(data_dir=str(tmp_path)))
        with pytest.raises(KeyError):
            loader.load("10")

    def test_missing_file(self, tmp_path) -> None:
        loader = GridLoader(Catalog(), GridConfig(data_dir=str(tmp_path)))
        with pytest.raises(GridDataError, match="not found"):
            loader.load("50")

    def test_not_a_feature_collection(self, tmp_path) -> None:
        (tmp_path / "HDS_HYT.geojson").write_text('{"type": "Feature"}', encoding="utf-8")
        loader = GridLoader(Catalog(), GridConfig(data_dir=str(tmp_path)))
        with pytest.raises(GridDataError):
            loader.load("90")

    def test_available_provinces(self) -> None:
        loader = GridLoader(Catalog())
        assert loader.available_provinces() == ["40", "50", "90"]


def _grids():
    return [
        parse_feature(_feature(1, Grid_POP=100, Grid_House=40, Grid_Class=1, HDS_C1_num=5,
                               Supply_Pro="Y"), 0),
        parse_feature(_feature(2, Grid_POP=600, Grid_House=250, Grid_Class=3, HDS_C7_num=20,
                               Stability_="Y"), 1),
        parse_feature(_feature(3, Grid_POP=5000, Grid_House=2100, Grid_Class=3, HDS_C1_num=2,
                               HDS_C7_num=50, Supply_Pro="Y"), 2),
    ]


class TestGridStatistics:
    def test_statistics(self) -> None:
        stats = calculate_grid_statistics(_grids())
        assert stats.total_grids == 3
        assert stats.total_population == 5700
        assert stats.total_housing == 2390
        assert stats.average_density == 1900
        assert stats.housing_systems[1] == 7
        assert stats.housing_systems[7] == 70
        assert stats.density_levels == {1: 1, 3: 2}
        assert stats.problem_areas == {"supply": 2, "subsidies": 0, "stability": 1}

    def test_empty(self) -> None:
        assert calculate_grid_statistics([]).total_grids == 0


class TestGridFilters:
    def test_housing_system(self) -> None:
        matched = filter_grids(_grids(), GridFilters(housing_system="1"))
        assert [g.id for g in matched] == ["1", "3"]

    def test_density_level(self) -> None:
        matched = filter_grids(_grids(), GridFilters(density_level="3"))
        assert [g.id for g in matched] == ["2", "3"]

    def test_population_range(self) -> None:
        assert [g.id for g in filter_grids(_grids(), GridFilters(population_range="0-500"))] == ["1"]
        assert [g.id for g in filter_grids(_grids(), GridFilters(population_range="401"))] == ["2", "3"]

    def test_bad_value(self) -> None:
        with pytest.raises(ValueError):
            filter_grids(_grids(), GridFilters(housing_system="x"))
