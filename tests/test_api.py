"""API tests for the housing, grid and proximity routers."""

from __future__ import annotations

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from tests.conftest import apartment_row, ckan_ok, mock_ckan
from tests.test_proximity_scorer import FakeOverpass, _elements
from thaihousing.core.config import GridConfig, ProximityConfig, Settings
from thaihousing.web.app import create_app


def _ckan_handler(request: httpx.Request) -> httpx.Response:
    body = json.loads(request.content)
    if request.url.path.endswith("datastore_search_sql"):
        return ckan_ok({"records": [{"year": 2565, "housing_id": 1, "housing_unit": 10}]})
    if body["resource_id"] == "b6dbb8e0-1194-4eeb-945d-e883b3275b35":
        rows = [
            apartment_row(),
            apartment_row(apartment_id="2", monthly_min_price="15000", property_type="CONDO"),
            apartment_row(apartment_id="3", latitude=None),
        ]
        return ckan_ok({"records": rows, "total": 3})
    return ckan_ok({"records": [{"geo_id": 10, "year": 2565}]})


def _settings(tmp_path) -> Settings:
    return Settings(
        grid=GridConfig(data_dir=str(tmp_path)),
        proximity=ProximityConfig(min_delay_ms=0, mid_delay_ms=0, max_delay_ms=0),
    )


@pytest.fixture
def overpass() -> FakeOverpass:
    return FakeOverpass(_elements(20), _elements(3), _elements(5), _elements(1), [])


@pytest.fixture
def client(tmp_path, overpass) -> TestClient:
    grid = {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {"OBJECTID": 1, "Grid_POP": 800, "Grid_House": 300, "Grid_Class": 2,
                               "HDS_C5_num": 12, "Supply_Pro": "Y"},
                "geometry": {"type": "Polygon", "coordinates": [[[102.8, 16.4], [102.81, 16.4], [102.8, 16.41], [102.8, 16.4]]]},
            },
        ],
    }
    (tmp_path / "HDS_KKN01.geojson").write_text(json.dumps(grid), encoding="utf-8")
    app = create_app(
        settings=_settings(tmp_path),
        ckan_client=mock_ckan(_ckan_handler),
        overpass_client=overpass,
    )
    return TestClient(app)


class TestHealthAndProvinces:
    def test_health(self, client: TestClient) -> None:
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"

    def test_ckan_health(self, tmp_path) -> None:
        app = create_app(
            settings=_settings(tmp_path),
            ckan_client=mock_ckan(lambda request: ckan_ok({"ckan_version": "2.10"})),
            overpass_client=FakeOverpass(),
        )
        data = TestClient(app).get("/api/health/ckan").json()
        assert data["service"] == "ckan"
        assert data["healthy"] is True
        assert data["latency_ms"] >= 0

    def test_ckan_health_unreachable(self, tmp_path) -> None:
        app = create_app(
            settings=_settings(tmp_path),
            ckan_client=mock_ckan(lambda request: httpx.Response(502)),
            overpass_client=FakeOverpass(),
        )
        assert TestClient(app).get("/api/health/ckan").json()["healthy"] is False

    def test_provinces(self, client: TestClient) -> None:
        data = client.get("/api/provinces").json()
        assert [p["id"] for p in data] == ["10", "40", "50", "90"]


class TestApartmentsAPI:
    def test_list(self, client: TestClient) -> None:
        data = client.get("/api/apartments").json()
        assert [p["id"] for p in data] == ["1", "2"]
        assert data[0]["price_bucket"] == "under5k"

    def test_filter(self, client: TestClient) -> None:
        data = client.get("/api/apartments", params={"property_type": "CONDO"}).json()
        assert [p["id"] for p in data] == ["2"]

    def test_bad_range(self, client: TestClient) -> None:
        assert client.get("/api/apartments", params={"price_range": "cheap"}).status_code == 400

    def test_geojson(self, client: TestClient) -> None:
        data = client.get("/api/apartments", params={"format": "geojson", "color_scheme": "amenityScore"}).json()
        assert data["type"] == "FeatureCollection"
        assert data["features"][0]["properties"]["color"] == "#ca8a04"

    def test_bad_scheme(self, client: TestClient) -> None:
        resp = client.get("/api/apartments", params={"format": "geojson", "color_scheme": "nope"})
        assert resp.status_code == 400

    def test_stats(self, client: TestClient) -> None:
        data = client.get("/api/apartments/stats").json()
        assert data["total_properties"] == 2
        assert data["price_ranges"]["10k-20k"] == 1

    def test_metadata(self, client: TestClient) -> None:
        data = client.get("/api/apartments/metadata").json()
        assert data["dataset"]["dropped_records"] == 1
        assert data["property_types"] == ["APARTMENT", "CONDO"]

    def test_get_one(self, client: TestClient) -> None:
        assert client.get("/api/apartments/1").json()["name"] == "Baan Suan"
        assert client.get("/api/apartments/999").status_code == 404


class TestRegionsAPI:
    def test_population(self, client: TestClient) -> None:
        data = client.get("/api/regions/10/population").json()
        assert data == [{"geo_id": 10, "year": 2565}]

    def test_housing_supply_by_year(self, client: TestClient) -> None:
        data = client.get("/api/regions/40/housing-supply", params={"by_year": True}).json()
        assert data == [{"year": 2565, "บ้านเดี่ยว": 10.0}]

    def test_unknown(self, client: TestClient) -> None:
        assert client.get("/api/regions/99/population").status_code == 404
        assert client.get("/api/regions/10/weather").status_code == 404


class TestGridsAPI:
    def test_grid_layer(self, client: TestClient) -> None:
        data = client.get("/api/grids/40").json()
        assert len(data["features"]) == 1
        assert data["features"][0]["properties"]["color"] == "#33a02c"

    def test_grid_filter(self, client: TestClient) -> None:
        data = client.get("/api/grids/40", params={"housing_system": "1"}).json()
        assert data["features"] == []

    def test_grid_stats(self, client: TestClient) -> None:
        data = client.get("/api/grids/40/stats").json()
        assert data["total_grids"] == 1
        assert data["problem_areas"]["supply"] == 1

    def test_missing_grid(self, client: TestClient) -> None:
        assert client.get("/api/grids/10").status_code == 404
        assert client.get("/api/grids/50").status_code == 503

    def test_legend(self, client: TestClient) -> None:
        data = client.get("/api/maps/legend/gridClass").json()
        assert data["items"][0] == {"color": "#006837", "label": "ระดับ 5 (สูงมาก)"}
        assert client.get("/api/maps/legend/nope").status_code == 404


class TestProximityAPI:
    def test_score_and_lookup(self, client: TestClient, overpass: FakeOverpass) -> None:
        resp = client.post("/api/proximity/score", json={"property_id": "1", "latitude": 13.75, "longitude": 100.5})
        assert resp.status_code == 200
        data = resp.json()
        assert data["score"] == 61
        assert data["in_progress"] is False
        assert data["categories"]["transport"]["count"] == 20

        # Second request is served from the cache
        client.post("/api/proximity/score", json={"property_id": "1", "latitude": 13.75, "longitude": 100.5})
        assert len(overpass.queries) == 5

        assert client.get("/api/proximity/scores").json()["scores"] == {"1": 61}
        assert client.get("/api/proximity/scores/1").json()["score"] == 61
        assert client.get("/api/proximity/scores/2").status_code == 404

        nearby = client.get("/api/proximity/nearby/1").json()
        transport = nearby["categories"]["transport"]
        assert transport["radius_m"] == 2500
        assert len(transport["features"]) == 20

        stats = client.get("/api/proximity/stats").json()
        assert stats["scores"]["count"] == 1
        assert stats["scores"]["distribution"]["good"] == 1

        # Scored apartments can be filtered by proximity
        matched = client.get("/api/apartments", params={"proximity_score": "60-79"}).json()
        assert [p["id"] for p in matched] == ["1"]

    def test_in_progress(self, client: TestClient) -> None:
        client.app.state.proximity_scorer.cache.start("7")
        data = client.post(
            "/api/proximity/score", json={"property_id": "7", "latitude": 13.75, "longitude": 100.5}
        ).json()
        assert data == {"property_id": "7", "score": None, "in_progress": True}

    def test_categories(self, client: TestClient) -> None:
        data = client.get("/api/proximity/categories").json()
        assert [c["category"] for c in data][0] == "transport"

    def test_nearby_missing(self, client: TestClient) -> None:
        assert client.get("/api/proximity/nearby/1").status_code == 404
