import json

import pytest
from fastapi.testclient import TestClient

from woo_settings_mcp.auth import StaticAuthorizer
from woo_settings_mcp.metrics import default_metrics
from woo_settings_mcp.server import app as module_app
from woo_settings_mcp.server import create_app

AUTH = {"Authorization": "Bearer secret-token"}


@pytest.fixture
def client(components):
    return TestClient(create_app(components))


def _rpc(rpc_id, method, params=None):
    payload = {"jsonrpc": "2.0", "id": rpc_id, "method": method}
    if params is not None:
        payload["params"] = params
    return payload


def test_health_endpoint(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {
        "status": "ok",
        "version": "1.0.0",
        "woocommerce_active": True,
        "mcp_protocol": "2024-11-05",
    }
    assert resp.headers.get("X-Request-ID")


def test_health_reports_unavailable_store(components):
    class DownStore:
        async def is_available(self):
            return False

    components.store = DownStore()
    resp = TestClient(create_app(components)).get("/health")
    assert resp.json()["woocommerce_active"] is False


def test_metrics_endpoint_counts_requests(client):
    client.get("/health")
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert resp.json().get("requests", 0) >= 2


def test_mcp_ping(client):
    resp = client.post("/mcp", json=_rpc(1, "ping"))
    assert resp.status_code == 200
    assert resp.json() == {"jsonrpc": "2.0", "id": 1, "result": {"pong": True}}
    assert "X-Request-ID" in resp.headers


def test_mcp_notification_is_204(client):
    resp = client.post("/mcp", json={"jsonrpc": "2.0", "method": "initialized"})
    assert resp.status_code == 204
    assert resp.content == b""


def test_mcp_empty_body(client):
    resp = client.post("/mcp", content=b"")
    assert resp.status_code == 400
    assert resp.json() == {"code": "empty_body", "message": "Request body is empty."}


def test_mcp_malformed_json_is_200_envelope(client):
    resp = client.post("/mcp", content=b"{oops", headers={"Content-Type": "application/json"})
    assert resp.status_code == 200
    assert resp.json()["error"]["code"] == -32700
    assert resp.json()["id"] is None


def _update(client, value, headers=None):
    return client.post(
        "/mcp",
        json=_rpc(2, "tools/call", {"name": "update_setting", "arguments": {"option_name": "woocommerce_store_city", "value": value}}),
        headers=headers or {},
    )


def test_mcp_update_requires_token(client):
    result = _update(client, "Lisbon").json()["result"]
    assert result["isError"] is True
    assert result["content"][0]["text"].startswith("Permission denied:")

    result = _update(client, "Lisbon", headers={"Authorization": "Bearer wrong"}).json()["result"]
    assert result["isError"] is True


def test_mcp_update_with_token(client):
    result = _update(client, "Lisbon", headers=AUTH).json()["result"]
    assert "isError" not in result
    assert json.loads(result["content"][0]["text"])["value"] == "Lisbon"

    read = client.post(
        "/mcp",
        json=_rpc(3, "tools/call", {"name": "get_setting", "arguments": {"option_name": "woocommerce_store_city"}}),
    )
    assert json.loads(read.json()["result"]["content"][0]["text"])["value"] == "Lisbon"
    assert default_metrics.snapshot()["settings_changed"] == {"woocommerce_store_city": 1}


def test_schema_requires_capability(client):
    resp = client.get("/schema")
    assert resp.status_code == 403
    assert resp.json() == {
        "code": "rest_forbidden",
        "message": "You do not have permission to view WooCommerce settings.",
    }


def test_schema_with_token(client):
    resp = client.get("/schema", headers=AUTH)
    assert resp.status_code == 200
    settings = resp.json()["settings"]
    assert len(settings) == 16
    assert list(settings)[0] == "woocommerce_store_address"
    assert settings["woocommerce_price_num_decimals"]["max"] == 8


def test_custom_authorizer_factory(components):
    client = TestClient(create_app(components, authorizer_factory=lambda _request: StaticAuthorizer(True)))
    assert client.get("/schema").status_code == 200


def test_module_app_serves_health():
    resp = TestClient(module_app).get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_mcp_deeply_nested_json_is_200_envelope(client):
    body = ("[" * 100000 + "]" * 100000).encode()
    resp = client.post("/mcp", content=body, headers={"Content-Type": "application/json"})
    assert resp.status_code == 200
    assert resp.json()["error"] == {"code": -32700, "message": "Parse error"}
