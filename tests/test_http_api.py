import json

import pytest
from fastapi.testclient import TestClient

from sdkfoundry.observability import TelemetrySink
from sdkfoundry.server.cache_loader import KnowledgeCache
from sdkfoundry.server.http_api import create_app


@pytest.fixture
def client(cache, settings, tmp_path):
    app = create_app(settings, cache, TelemetrySink(tmp_path / "http-telemetry.jsonl"))
    return TestClient(app)


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["ok"] is True
    assert response.json()["time"].endswith("Z")


def test_list_tools(client):
    response = client.get("/tools")
    assert response.status_code == 200
    assert len(response.json()) == 19
    assert {"name", "description", "inputSchema"} <= set(response.json()[0])


def test_call_tool(client, tmp_path):
    response = client.post("/tools/check_component_order", json={"componentName": "PhysicsBody"})

    assert response.status_code == 200
    text = response.json()["content"][0]["text"]
    assert text.startswith("# Component Ordering for PhysicsBody")

    event = json.loads((tmp_path / "http-telemetry.jsonl").read_text().splitlines()[0])
    assert event["tool"] == "check_component_order"


def test_unknown_tool_is_404(client):
    response = client.post("/tools/does_not_exist", json={})
    assert response.status_code == 404


def test_missing_argument_is_text_error(client):
    response = client.post("/tools/validate_code", json={})
    assert response.status_code == 200
    assert response.json()["content"][0]["text"] == "Error: Missing required argument: code"


def test_missing_cache_is_503(settings, tmp_path):
    app = create_app(settings, KnowledgeCache(cache_dir=tmp_path / "none"), TelemetrySink(tmp_path / "t.jsonl"))
    response = TestClient(app).post("/tools/validate_code", json={"code": "x"})
    assert response.status_code == 503


def test_unknown_tool_is_404_without_cache(settings, tmp_path):
    app = create_app(settings, KnowledgeCache(cache_dir=tmp_path / "none"), TelemetrySink(tmp_path / "t.jsonl"))
    response = TestClient(app).post("/tools/does_not_exist", json={})
    assert response.status_code == 404
