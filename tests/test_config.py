"""Tests for settings and the static catalog."""

from __future__ import annotations

import pytest

from thaihousing.core.catalog import Catalog
from thaihousing.core.config import ProximityConfig, Settings


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings()
        assert settings.ckan.base_url == "http://147.50.228.205"
        assert settings.overpass.url == "https://overpass-api.de/api/interpreter"
        assert settings.proximity.concurrency == 1
        assert settings.proximity.rate_limit_backoff_seconds == 3.0
        assert settings.proxy.allowed_hosts == []

    def test_env_override(self, monkeypatch) -> None:
        monkeypatch.setenv("THAIHOUSING_PROXIMITY_CONCURRENCY", "2")
        monkeypatch.setenv("THAIHOUSING_CKAN_BASE_URL", "http://ckan.example")
        settings = Settings()
        assert settings.proximity.concurrency == 2
        assert settings.ckan.base_url == "http://ckan.example"

    def test_pacing_defaults(self) -> None:
        config = ProximityConfig()
        assert (config.min_delay_ms, config.mid_delay_ms, config.max_delay_ms) == (150, 200, 250)


class TestCatalog:
    def test_provinces_loaded(self) -> None:
        catalog = Catalog()
        ids = [p.id for p in catalog.list_provinces()]
        assert ids == ["10", "40", "50", "90"]
        bangkok = catalog.get_province("10")
        assert bangkok is not None
        assert bangkok.latitude == pytest.approx(13.7563)
        assert bangkok.grid_file is None

    def test_grid_files(self) -> None:
        catalog = Catalog()
        assert catalog.get_province("40").grid_file == "HDS_KKN01.geojson"

    def test_resource_ids(self) -> None:
        catalog = Catalog()
        assert catalog.resource_id("apartments") == "b6dbb8e0-1194-4eeb-945d-e883b3275b35"
        with pytest.raises(KeyError):
            catalog.resource_id("nope")

    def test_housing_categories(self) -> None:
        categories = Catalog().housing_categories
        assert categories[1] == "บ้านเดี่ยว"
        assert len(categories) == 8

    def test_custom_path(self, tmp_path) -> None:
        path = tmp_path / "catalog.yml"
        path.write_text(
            "provinces:\n  77:\n    name: Test\n    latitude: 1.0\n    longitude: 2.0\n",
            encoding="utf-8",
        )
        catalog = Catalog(path)
        assert catalog.get_province("77").name == "Test"
        assert catalog.query_defaults("apartments") == {}
