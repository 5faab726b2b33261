"""Province-level datasets: population, income, expenditure and housing supply.

Each dataset is a CKAN datastore resource keyed by ``geo_id`` (the
province code). Results are cached per query; CKAN errors degrade to an
empty list and are not cached.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any

from thaihousing.ckan.client import CkanClient, CkanError
from thaihousing.core.catalog import Catalog
from thaihousing.housing.cache import KeyedCache
from thaihousing.housing.normalize import parse_float, parse_int

logger = logging.getLogger(__name__)

DATASETS: tuple[str, ...] = (
    "population",
    "population_age",
    "income",
    "expenditure",
    "housing_supply",
)


class RegionalDataService:
    """Fetches and caches the regional datasets for a province."""

    def __init__(
        self,
        ckan: CkanClient,
        catalog: Catalog,
        cache: KeyedCache | None = None,
    ) -> None:
        self._ckan = ckan
        self._catalog = catalog
        self._cache = cache or KeyedCache()

    @property
    def cache(self) -> KeyedCache:
        return self._cache

    # -- public API ----------------------------------------------------------

    async def get_dataset(
        self,
        dataset: str,
        province_id: str,
        **filters: Any,
    ) -> list[dict[str, Any]]:
        """Fetch one regional dataset for a province.

        Raises:
            KeyError: If *dataset* is not a known regional dataset.
        """
        if dataset not in DATASETS:
            raise KeyError(f"Unknown dataset {dataset!r}")
        if dataset == "housing_supply":
            return await self.housing_supply(province_id, year=filters.get("year"))

        query_filters: dict[str, Any] = {"geo_id": province_id}
        query_filters.update({k: v for k, v in filters.items() if v is not None})
        key = _cache_key(dataset, query_filters)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        defaults = self._catalog.query_defaults("regional")
        try:
            result = await self._ckan.get_ckan_data(
                self._catalog.resource_id(dataset),
                filters=query_filters,
                limit=defaults.get("limit", 1000),
                sort=defaults.get("sort"),
            )
        except CkanError as exc:
            logger.warning("Failed to fetch %s for province %s: %s", dataset, province_id, exc)
            return []

        self._cache.set(key, result.records)
        return result.records

    async def population(self, province_id: str) -> list[dict[str, Any]]:
        return await self.get_dataset("population", province_id)

    async def population_age(self, province_id: str) -> list[dict[str, Any]]:
        return await self.get_dataset("population_age", province_id)

    async def income(self, province_id: str) -> list[dict[str, Any]]:
        return await self.get_dataset("income", province_id)

    async def expenditure(self, province_id: str, quintile: int | None = None) -> list[dict[str, Any]]:
        return await self.get_dataset("expenditure", province_id, quintile=quintile)

    async def housing_supply(self, province_id: str, year: int | None = None) -> list[dict[str, Any]]:
        """Fetch housing supply rows through ``datastore_search_sql``."""
        if not str(province_id).isdigit() or (year is not None and not str(year).isdigit()):
            raise ValueError("province_id and year must be numeric")

        key = f"housing_supply:{province_id}:{year or 'all'}"
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        sql = f'SELECT * FROM "{self._catalog.resource_id("housing_supply")}"'
        conditions = [f"geo_id = {province_id}"]
        if year is not None:
            conditions.append(f"year = {year}")
        sql += " WHERE " + " AND ".join(conditions)

        try:
            result = await self._ckan.ckan_sql_query(sql)
        except CkanError as exc:
            logger.warning("Failed to fetch housing supply for province %s: %s", province_id, exc)
            return []

        self._cache.set(key, result.records)
        return result.records

    async def housing_supply_by_year(self, province_id: str) -> list[dict[str, Any]]:
        """Housing supply pivoted to one row per year keyed by housing type name."""
        rows = await self.housing_supply(province_id)
        categories = self._catalog.housing_categories
        by_year: dict[int, dict[str, Any]] = defaultdict(dict)
        for row in rows:
            year = parse_int(row.get("year"))
            entry = by_year[year]
            entry["year"] = year
            name = categories.get(parse_int(row.get("housing_id")))
            if name:
                entry[name] = parse_float(row.get("housing_unit"))
        return [by_year[year] for year in sorted(by_year)]

    async def preload(self, exclude: str | None = None) -> int:
        """Warm the housing supply cache for every province except *exclude*.

        Returns the number of provinces that loaded successfully.
        """
        loaded = 0
        for province in self._catalog.list_provinces():
            if province.id == exclude:
                continue
            if await self.housing_supply(province.id):
                loaded += 1
        logger.info("Preloaded housing supply for %d provinces", loaded)
        return loaded


def _cache_key(dataset: str, filters: dict[str, Any]) -> str:
    parts = [f"{k}={filters[k]}" for k in sorted(filters)]
    return f"{dataset}:" + "&".join(parts)
