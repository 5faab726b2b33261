"""Async client for the CKAN action API.

Every call is a POST of a JSON body to ``/api/3/action/<name>``. CKAN
answers with an envelope ``{"success": bool, "result": ..., "error": ...}``;
this client unwraps it and raises :class:`CkanError` on any failure so
callers can degrade to empty data.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from thaihousing.ckan.models import DatastoreResult
from thaihousing.core.config import CkanConfig

logger = logging.getLogger(__name__)


class CkanError(Exception):
    """Raised when a CKAN action fails at the HTTP or application level."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class CkanClient:
    """Talks to a CKAN instance through its JSON action API."""

    def __init__(
        self,
        config: CkanConfig | None = None,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config or CkanConfig()
        headers = {"Content-Type": "application/json"}
        if self.config.api_token:
            headers["Authorization"] = self.config.api_token
        self._http = http or httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=httpx.Timeout(self.config.timeout_seconds),
            headers=headers,
        )

    # -- public API ----------------------------------------------------------

    async def action(self, name: str, payload: dict[str, Any] | None = None) -> Any:
        """Invoke a CKAN action and return its ``result`` payload."""
        try:
            resp = await self._http.post(f"/api/3/action/{name}", json=payload or {})
        except httpx.HTTPError as exc:
            raise CkanError(f"CKAN request failed: {exc}") from exc

        if resp.status_code < 200 or resp.status_code >= 300:
            raise CkanError(f"CKAN API error: {resp.status_code}", status_code=resp.status_code)

        try:
            body = resp.json()
        except ValueError as exc:
            raise CkanError("CKAN returned a non-JSON response", resp.status_code) from exc

        if not body.get("success"):
            error = body.get("error") or {}
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise CkanError(message or "Unknown CKAN API error", resp.status_code)

        return body.get("result")

    async def get_ckan_data(
        self,
        resource_id: str,
        filters: dict[str, Any] | None = None,
        limit: int | None = None,
        sort: str | None = None,
        offset: int | None = None,
        fields: list[str] | None = None,
    ) -> DatastoreResult:
        """Run ``datastore_search`` against one resource."""
        payload: dict[str, Any] = {
            "resource_id": resource_id,
            "limit": limit if limit is not None else self.config.default_limit,
        }
        if filters:
            payload["filters"] = json.dumps(filters, ensure_ascii=False)
        if sort:
            payload["sort"] = sort
        if offset:
            payload["offset"] = offset
        if fields:
            payload["fields"] = ",".join(fields)

        logger.debug("datastore_search %s filters=%s limit=%s", resource_id, filters, payload["limit"])
        result = await self.action("datastore_search", payload)
        return DatastoreResult.model_validate(result or {})

    async def ckan_sql_query(self, sql: str) -> DatastoreResult:
        """Run a read-only ``datastore_search_sql`` statement."""
        result = await self.action("datastore_search_sql", {"sql": sql})
        return DatastoreResult.model_validate(result or {})

    async def is_available(self) -> bool:
        try:
            await self.action("status_show")
            return True
        except CkanError:
            return False

    async def close(self) -> None:
        await self._http.aclose()
