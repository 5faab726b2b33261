"""Relay endpoints that let the browser reach CKAN and other JSON APIs.

``/api/cors-proxy`` fetches an arbitrary JSON URL and re-serves it with
permissive CORS headers. ``/api/ckan-proxy`` forwards a CKAN action call.
Both use the shared ``app.state.proxy_http`` client.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import unquote, urlparse

import httpx
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response

logger = logging.getLogger(__name__)

router = APIRouter()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

_ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]


def _cors_json(content: Any, status_code: int = 200) -> JSONResponse:
    return JSONResponse(content=content, status_code=status_code, headers=CORS_HEADERS)


# --- CORS proxy ---


@router.api_route("/api/cors-proxy", methods=_ALL_METHODS)
async def cors_proxy(request: Request) -> Response:
    """GET a JSON resource on the caller's behalf."""
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=CORS_HEADERS)
    if request.method != "GET":
        return _cors_json({"error": "Method not allowed"}, status_code=405)

    url = request.query_params.get("url")
    if not url:
        return _cors_json({"error": "URL parameter is required"}, status_code=400)

    settings = request.app.state.settings
    host = urlparse(url).hostname or ""
    allowed = settings.proxy.allowed_hosts
    if allowed and host not in allowed:
        return _cors_json({"error": f"Host {host!r} is not allowed"}, status_code=403)

    http: httpx.AsyncClient = request.app.state.proxy_http
    try:
        upstream = await http.get(
            url,
            headers={
                "Accept": "application/json",
                "Content-Type": "application/json",
                "User-Agent": settings.proxy.user_agent,
            },
        )
    except httpx.HTTPError as exc:
        logger.warning("CORS proxy request to %s failed: %s", url, exc)
        return _cors_json({"error": "Proxy request failed", "details": str(exc)}, status_code=500)

    if not upstream.is_success:
        return _cors_json(
            {
                "error": f"Request failed: {upstream.status_code} {upstream.reason_phrase}",
                "details": upstream.text,
            },
            status_code=upstream.status_code,
        )

    content_type = upstream.headers.get("content-type", "")
    if "application/json" not in content_type:
        return _cors_json(
            {
                "error": "Unexpected response format",
                "contentType": content_type,
                "preview": upstream.text[:200],
            },
            status_code=500,
        )

    try:
        data = upstream.json()
    except ValueError as exc:
        return _cors_json({"error": "Proxy request failed", "details": str(exc)}, status_code=500)
    return _cors_json(data)


# --- CKAN proxy ---


@router.api_route("/api/ckan-proxy", methods=["GET", "POST"])
async def ckan_proxy(request: Request) -> JSONResponse:
    """Forward a CKAN action; GET takes parameters from the query string."""
    action = request.query_params.get("action")
    if not action:
        return JSONResponse(
            {"success": False, "error": "Missing 'action' parameter"},
            status_code=400,
        )

    if request.method == "POST":
        try:
            payload = await request.json()
        except ValueError:
            payload = {}
    else:
        payload = {k: v for k, v in request.query_params.items() if k != "action"}
        if "sql" in payload:
            payload["sql"] = unquote(payload["sql"])

    settings = request.app.state.settings
    http: httpx.AsyncClient = request.app.state.proxy_http
    url = f"{settings.ckan.base_url.rstrip('/')}/api/3/action/{action}"
    headers = {"Content-Type": "application/json"}
    if settings.ckan.api_token:
        headers["Authorization"] = settings.ckan.api_token

    try:
        upstream = await http.post(url, json=payload, headers=headers)
        data = upstream.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.exception("CKAN proxy call %s failed", action)
        return JSONResponse(
            {"success": False, "error": "Failed to fetch data from CKAN", "details": str(exc)},
            status_code=500,
        )
    return JSONResponse(data, status_code=200)
