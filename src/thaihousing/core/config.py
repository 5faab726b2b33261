"""Application configuration loaded from environment and config files."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class CkanConfig(BaseSettings):
    """CKAN open-data backend configuration."""

    model_config = {"env_prefix": "THAIHOUSING_CKAN_"}

    base_url: str = "http://147.50.228.205"
    api_token: str | None = None
    timeout_seconds: int = 30
    default_limit: int = 100


class OverpassConfig(BaseSettings):
    """Overpass API configuration."""

    model_config = {"env_prefix": "THAIHOUSING_OVERPASS_"}

    url: str = "https://overpass-api.de/api/interpreter"
    timeout_seconds: int = 30
    query_timeout: int = 25


class ProximityConfig(BaseSettings):
    """Proximity scorer pacing, retry and cache configuration."""

    model_config = {"env_prefix": "THAIHOUSING_PROXIMITY_"}

    rate_limit_backoff_seconds: float = 3.0
    timeout_radius_factor: float = 0.7
    timeout_count_factor: float = 1.4
    min_delay_ms: int = 150
    mid_delay_ms: int = 200
    max_delay_ms: int = 250
    concurrency: int = 1
    requests_per_minute: int = 0
    cache_ttl_seconds: int = 3600
    batch_limit: int = 20


class ProxyConfig(BaseSettings):
    """CORS / CKAN proxy relay configuration."""

    model_config = {"env_prefix": "THAIHOUSING_PROXY_"}

    timeout_seconds: int = 30
    allowed_hosts: list[str] = Field(default_factory=list)
    user_agent: str = "Mozilla/5.0 (compatible; ThaiHousing-CORS-Proxy/1.0)"


class GridConfig(BaseSettings):
    """Housing delivery grid data configuration."""

    model_config = {"env_prefix": "THAIHOUSING_GRID_"}

    data_dir: str = "data"


class Settings(BaseSettings):
    """Root application settings."""

    model_config = {"env_prefix": "THAIHOUSING_"}

    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    catalog_path: str | None = None

    ckan: CkanConfig = Field(default_factory=CkanConfig)
    overpass: OverpassConfig = Field(default_factory=OverpassConfig)
    proximity: ProximityConfig = Field(default_factory=ProximityConfig)
    proxy: ProxyConfig = Field(default_factory=ProxyConfig)
    grid: GridConfig = Field(default_factory=GridConfig)
