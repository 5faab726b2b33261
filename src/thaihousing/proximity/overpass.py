"""Thin async client for the Overpass API interpreter endpoint."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from thaihousing.core.config import OverpassConfig

logger = logging.getLogger(__name__)


class OverpassError(Exception):
    """Raised when an Overpass query fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class OverpassRateLimited(OverpassError):
    """HTTP 429 from the interpreter."""


class OverpassTimeout(OverpassError):
    """HTTP 504 from the interpreter: the query took too long server-side."""


class OverpassClient:
    """Posts Overpass QL queries and returns the ``elements`` array."""

    def __init__(
        self,
        config: OverpassConfig | None = None,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config or OverpassConfig()
        self._http = http or httpx.AsyncClient(
            timeout=httpx.Timeout(self.config.timeout_seconds),
        )

    async def fetch(self, query: str) -> list[dict[str, Any]]:
        """Run *query* and return the matching elements.

        Raises:
            OverpassRateLimited: On HTTP 429.
            OverpassTimeout: On HTTP 504.
            OverpassError: On any other HTTP, transport or decoding failure.
        """
        try:
            resp = await self._http.post(self.config.url, data={"data": query})
        except httpx.HTTPError as exc:
            raise OverpassError(f"Overpass request failed: {exc}") from exc

        if resp.status_code == 429:
            raise OverpassRateLimited("Overpass API rate limit exceeded", 429)
        if resp.status_code == 504:
            raise OverpassTimeout("Overpass API gateway timeout", 504)
        if resp.status_code != 200:
            raise OverpassError(f"Overpass API error: {resp.status_code}", resp.status_code)

        try:
            data = resp.json()
        except ValueError as exc:
            raise OverpassError("Overpass returned a non-JSON response", resp.status_code) from exc
        return list(data.get("elements") or [])

    async def close(self) -> None:
        await self._http.aclose()
