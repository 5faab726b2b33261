"""Shared test fixtures and helpers."""

from __future__ import annotations

from typing import Any, Callable

import httpx

from thaihousing.ckan.client import CkanClient
from thaihousing.core.config import CkanConfig

CKAN_BASE = "http://ckan.test"


def mock_http(handler: Callable[[httpx.Request], httpx.Response], base_url: str = "") -> httpx.AsyncClient:
    """An AsyncClient whose requests are answered by *handler*."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=base_url)


def mock_ckan(handler: Callable[[httpx.Request], httpx.Response]) -> CkanClient:
    config = CkanConfig(base_url=CKAN_BASE)
    return CkanClient(config, http=mock_http(handler, CKAN_BASE))


def ckan_ok(result: Any) -> httpx.Response:
    return httpx.Response(200, json={"success": True, "result": result})


def apartment_row(**overrides) -> dict[str, Any]:
    row: dict[str, Any] = {
        "apartment_id": "1",
        "name": "Baan Suan",
        "property_type": "APARTMENT",
        "room_type": "อพาร์ตเมนต์",
        "latitude": "13.75",
        "longitude": "100.50",
        "monthly_min_price": "4500",
        "monthly_max_price": "6000",
        "room_size_min": "24",
        "room_size_max": "32",
        "rooms_available": "3",
        "has_air": "TRUE",
        "has_furniture": "TRUE",
        "has_internet": "FALSE",
        "has_parking": "",
        "has_lift": None,
        "has_pool": "TRUE",
        "has_fitness": "false",
        "has_security": "TRUE",
    }
    row.update(overrides)
    return row
