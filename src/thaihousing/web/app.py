"""FastAPI application for the Thai housing dashboard backend.

Serves the CKAN/CORS relay endpoints, apartment and regional datasets,
housing delivery grids and proximity scores to the browser dashboard.
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from thaihousing.ckan.client import CkanClient
from thaihousing.core.catalog import Catalog
from thaihousing.core.config import Settings
from thaihousing.core.types import HealthStatus
from thaihousing.grid.loader import GridLoader
from thaihousing.housing.cache import KeyedCache
from thaihousing.housing.regional import RegionalDataService
from thaihousing.housing.service import ApartmentService
from thaihousing.proximity.cache import ProximityCache
from thaihousing.proximity.overpass import OverpassClient
from thaihousing.proximity.scorer import ProximityScorer
from thaihousing.web.grid_router import router as grid_router
from thaihousing.web.housing_router import router as housing_router
from thaihousing.web.proximity_router import router as proximity_router
from thaihousing.web.proxy_router import router as proxy_router

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str
    version: str = "0.1.0"
    ckan_base_url: str = ""


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    for name in ("proxy_http", "ckan_client", "overpass_client"):
        client = getattr(app.state, name, None)
        if client is None:
            continue
        if isinstance(client, httpx.AsyncClient):
            await client.aclose()
        else:
            await client.close()


def _configure_logging(settings: Settings) -> None:
    logging.getLogger("thaihousing").setLevel(settings.log_level.upper())


def _base_app(settings: Settings, title: str) -> FastAPI:
    _configure_logging(settings)
    app = FastAPI(title=title, version="0.1.0", lifespan=_lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.proxy_http = httpx.AsyncClient(
        timeout=httpx.Timeout(settings.proxy.timeout_seconds),
        follow_redirects=True,
    )
    app.include_router(proxy_router)
    return app


# --- Application factories ---


def create_proxy_app(settings: Settings | None = None) -> FastAPI:
    """Create an app exposing only the relay endpoints (development proxy)."""
    if settings is None:
        settings = Settings()
    return _base_app(settings, "Thai Housing Dev Proxy")


def create_app(
    settings: Settings | None = None,
    catalog: Catalog | None = None,
    ckan_client: CkanClient | None = None,
    overpass_client: OverpassClient | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Uses the factory pattern so tests can create isolated app instances
    with their own settings, catalog and HTTP clients.

    Args:
        settings: Application settings. Defaults to Settings().
        catalog: Optional pre-loaded Catalog.
        ckan_client: Optional pre-built CkanClient.
        overpass_client: Optional pre-built OverpassClient.

    Returns:
        A configured FastAPI instance.
    """
    if settings is None:
        settings = Settings()

    app = _base_app(settings, "Thai Housing Dashboard")

    catalog = catalog or Catalog(settings.catalog_path)
    ckan_client = ckan_client or CkanClient(settings.ckan)
    overpass_client = overpass_client or OverpassClient(settings.overpass)

    # Store on app state for access in route handlers
    app.state.catalog = catalog
    app.state.ckan_client = ckan_client
    app.state.overpass_client = overpass_client
    app.state.apartment_service = ApartmentService(ckan_client, catalog)
    app.state.regional_service = RegionalDataService(ckan_client, catalog, KeyedCache())
    app.state.grid_loader = GridLoader(catalog, settings.grid)
    app.state.proximity_scorer = ProximityScorer(
        overpass_client,
        cache=ProximityCache(),
        config=settings.proximity,
        overpass_config=settings.overpass,
    )

    app.include_router(housing_router)
    app.include_router(grid_router)
    app.include_router(proximity_router)

    @app.get("/api/health", response_model=HealthResponse)
    async def health(request: Request) -> HealthResponse:
        return HealthResponse(
            status="ok",
            service="thaihousing",
            ckan_base_url=request.app.state.settings.ckan.base_url,
        )

    @app.get("/api/health/ckan", response_model=HealthStatus)
    async def ckan_health(request: Request) -> HealthStatus:
        started = time.monotonic()
        healthy = await request.app.state.ckan_client.is_available()
        return HealthStatus(
            service="ckan",
            healthy=healthy,
            latency_ms=round((time.monotonic() - started) * 1000, 1),
            details={"base_url": request.app.state.settings.ckan.base_url},
        )

    logger.info("Application created (environment=%s)", settings.environment)
    return app
