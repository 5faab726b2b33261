"""Apartment supply service: fetches, normalizes and caches property listings."""

from __future__ import annotations

import logging

from thaihousing.ckan.client import CkanClient, CkanError
from thaihousing.core.catalog import Catalog
from thaihousing.housing.models import DatasetMetadata, Property
from thaihousing.housing.normalize import normalize_records

logger = logging.getLogger(__name__)


class ApartmentService:
    """Loads the apartment datastore resource once and serves it from memory.

    CKAN failures are logged and surface as an empty list; they are not
    cached, so the next call tries again.
    """

    def __init__(self, ckan: CkanClient, catalog: Catalog) -> None:
        self._ckan = ckan
        self._catalog = catalog
        self._properties: list[Property] | None = None
        self._by_id: dict[str, Property] = {}
        self._metadata: DatasetMetadata | None = None

    @property
    def resource_id(self) -> str:
        return self._catalog.resource_id("apartments")

    async def list_properties(self, refresh: bool = False) -> list[Property]:
        if self._properties is not None and not refresh:
            return self._properties

        defaults = self._catalog.query_defaults("apartments")
        try:
            result = await self._ckan.get_ckan_data(
                self.resource_id,
                limit=defaults.get("limit", 5000),
                sort=defaults.get("sort"),
            )
        except CkanError as exc:
            logger.warning("Failed to load apartment data: %s", exc)
            return []

        properties = normalize_records(result.records)
        self._properties = properties
        self._by_id = {p.id: p for p in properties}
        self._metadata = DatasetMetadata(
            resource_id=self.resource_id,
            total_records=result.total if result.total is not None else len(result.records),
            valid_records=len(properties),
            dropped_records=len(result.records) - len(properties),
            fields=[f.model_dump() for f in result.fields],
        )
        logger.info("Loaded %d apartments (%d dropped)", len(properties), self._metadata.dropped_records)
        return properties

    def get(self, property_id: str) -> Property | None:
        return self._by_id.get(property_id)

    @property
    def metadata(self) -> DatasetMetadata | None:
        return self._metadata
