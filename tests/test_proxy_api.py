"""API tests for the CORS and CKAN relay endpoints."""

from __future__ import annotations

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from tests.conftest import CKAN_BASE, mock_http
from thaihousing.core.config import CkanConfig, ProxyConfig, Settings
from thaihousing.web.app import create_proxy_app


class _Upstream:
    def __init__(self, response: httpx.Response | Exception) -> None:
        self.response = response
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


def _client(upstream: _Upstream, **settings_overrides) -> TestClient:
    settings = Settings(ckan=CkanConfig(base_url=CKAN_BASE), **settings_overrides)
    app = create_proxy_app(settings)
    app.state.proxy_http = mock_http(upstream)
    return TestClient(app)


class TestCorsProxy:
    def test_relays_json(self) -> None:
        upstream = _Upstream(httpx.Response(200, json={"ok": True}))
        resp = _client(upstream).get("/api/cors-proxy", params={"url": "http://data.test/x.json"})
        assert resp.status_code == 200
        assert resp.json() == {"ok": True}
        assert resp.headers["access-control-allow-origin"] == "*"
        sent = upstream.requests[0]
        assert str(sent.url) == "http://data.test/x.json"
        assert sent.headers["accept"] == "application/json"
        assert "CORS-Proxy" in sent.headers["user-agent"]

    def test_options(self) -> None:
        resp = _client(_Upstream(httpx.Response(200))).options("/api/cors-proxy")
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-methods"] == "GET, OPTIONS"

    def test_method_not_allowed(self) -> None:
        resp = _client(_Upstream(httpx.Response(200))).post("/api/cors-proxy?url=http://x.test")
        assert resp.status_code == 405
        assert resp.json() == {"error": "Method not allowed"}

    def test_missing_url(self) -> None:
        resp = _client(_Upstream(httpx.Response(200))).get("/api/cors-proxy")
        assert resp.status_code == 400
        assert resp.json() == {"error": "URL parameter is required"}

    def test_upstream_error_status_passed_through(self) -> None:
        upstream = _Upstream(httpx.Response(404, text="no such resource"))
        resp = _client(upstream).get("/api/cors-proxy", params={"url": "http://data.test/missing"})
        assert resp.status_code == 404
        body = resp.json()
        assert body["error"] == "Request failed: 404 Not Found"
        assert body["details"] == "no such resource"

    def test_non_json_upstream(self) -> None:
        upstream = _Upstream(httpx.Response(200, text="<html>hello</html>", headers={"content-type": "text/html"}))
        resp = _client(upstream).get("/api/cors-proxy", params={"url": "http://data.test/page"})
        assert resp.status_code == 500
        body = resp.json()
        assert body["error"] == "Unexpected response format"
        assert body["contentType"] == "text/html"
        assert body["preview"] == "<html>hello</html>"

    def test_transport_failure(self) -> None:
        upstream = _Upstream(httpx.ConnectError("refused"))
        resp = _client(upstream).get("/api/cors-proxy", params={"url": "http://data.test/x"})
        assert resp.status_code == 500
        assert resp.json()["error"] == "Proxy request failed"

    def test_host_allow_list(self) -> None:
        upstream = _Upstream(httpx.Response(200, json={}))
        client = _client(upstream, proxy=ProxyConfig(allowed_hosts=["data.test"]))
        assert client.get("/api/cors-proxy", params={"url": "http://evil.test/"}).status_code == 403
        assert client.get("/api/cors-proxy", params={"url": "http://data.test/"}).status_code == 200


class TestCkanProxy:
    def test_missing_action(self) -> None:
        resp = _client(_Upstream(httpx.Response(200))).get("/api/ckan-proxy")
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "error": "Missing 'action' parameter"}

    def test_get_forwards_query_as_json_body(self) -> None:
        upstream = _Upstream(httpx.Response(200, json={"success": True, "result": {"records": []}}))
        resp = _client(upstream).get(
            "/api/ckan-proxy",
            params={"action": "datastore_search_sql", "sql": 'SELECT * FROM "abc"'},
        )
        assert resp.status_code == 200
        assert resp.json()["success"] is True
        sent = upstream.requests[0]
        assert sent.method == "POST"
        assert str(sent.url) == f"{CKAN_BASE}/api/3/action/datastore_search_sql"
        assert json.loads(sent.content) == {"sql": 'SELECT * FROM "abc"'}

    def test_post_forwards_body(self) -> None:
        upstream = _Upstream(httpx.Response(200, json={"success": False, "error": {"message": "x"}}))
        resp = _client(upstream).post(
            "/api/ckan-proxy?action=datastore_search",
            json={"resource_id": "r1", "limit": 5},
        )
        # CKAN's own error envelope is relayed untouched
        assert resp.status_code == 200
        assert resp.json()["success"] is False
        assert json.loads(upstream.requests[0].content) == {"resource_id": "r1", "limit": 5}

    @pytest.mark.parametrize(
        "response",
        [httpx.ConnectError("down"), httpx.Response(502, text="bad gateway")],
    )
    def test_failure(self, response) -> None:
        resp = _client(_Upstream(response)).get("/api/ckan-proxy", params={"action": "package_list"})
        assert resp.status_code == 500
        body = resp.json()
        assert body["success"] is False
        assert body["error"] == "Failed to fetch data from CKAN"
        assert body["details"]
