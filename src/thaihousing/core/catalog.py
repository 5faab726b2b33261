"""Static catalog of provinces and CKAN resource identifiers, loaded from YAML."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from thaihousing.core.types import Province


_DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[3] / "config" / "catalog.yml"


class Catalog:
    """Read-only lookup of provinces, datastore resources and housing categories."""

    def __init__(self, config_path: str | Path | None = None) -> None:
        self._config_path = Path(config_path) if config_path else _DEFAULT_CONFIG_PATH
        self._raw: dict[str, Any] = {}
        self._provinces: dict[str, Province] = {}
        self._load_config()

    def _load_config(self) -> None:
        with open(self._config_path, encoding="utf-8") as fh:
            self._raw = yaml.safe_load(fh) or {}

        for province_id, data in self._raw.get("provinces", {}).items():
            province_id = str(province_id)  # YAML may parse numeric keys as int
            self._provinces[province_id] = Province(id=province_id, **data)

    # -- provinces -----------------------------------------------------------

    def get_province(self, province_id: str) -> Province | None:
        return self._provinces.get(str(province_id))

    def list_provinces(self) -> list[Province]:
        return list(self._provinces.values())

    # -- resources -----------------------------------------------------------

    def resource_id(self, name: str) -> str:
        """Return the datastore resource id registered under *name*.

        Raises:
            KeyError: If no resource with that name is configured.
        """
        resources = self._raw.get("resources", {})
        if name not in resources:
            raise KeyError(f"Unknown resource {name!r}")
        return str(resources[name])

    def query_defaults(self, section: str) -> dict[str, Any]:
        """Return the limit/sort defaults for a dataset family."""
        return dict(self._raw.get(section, {}))

    @property
    def housing_categories(self) -> dict[int, str]:
        return {int(k): str(v) for k, v in self._raw.get("housing_categories", {}).items()}
