from __future__ import annotations

import httpx
import pytest
from fastapi.testclient import TestClient

from modules.power_proxy.config_loader import load_config
from modules.power_proxy.xPowerProxyService import create_app

AGENT = {
    "temperature_c": 72.5, "voltage_v": 0.86, "undervoltage": False,
    "freq_capped": False, "throttled": False, "last_error": None,
}
STATUS = {"node": "pi-1", "battery_percent": 22, "is_charging": False, "solar_available": False}


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("HOST_IP", "POWER_API_URL", "POWER_STATUS_URL"):
        monkeypatch.delenv(name, raising=False)


def _handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/power":
        return httpx.Response(200, json=AGENT)
    if request.url.path == "/status":
        return httpx.Response(200, json=STATUS)
    return httpx.Response(404)


def _client() -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(_handler))


def test_url_resolution_from_host_ip(monkeypatch):
    monkeypatch.setenv("HOST_IP", "10.0.0.7")
    cfg = load_config()
    assert cfg["power"]["url"] == "http://10.0.0.7:8085/power"
    assert cfg["battery"]["url"] == "http://10.0.0.7:8080/status"


def test_explicit_urls_win(monkeypatch):
    monkeypatch.setenv("HOST_IP", "10.0.0.7")
    monkeypatch.setenv("POWER_API_URL", "http://agent:1/power")
    monkeypatch.setenv("POWER_STATUS_URL", "http://sim:2/status")
    cfg = load_config()
    assert cfg["power"]["url"] == "http://agent:1/power"
    assert cfg["battery"]["url"] == "http://sim:2/status"


def test_battery_defaults_to_localhost():
    cfg = load_config()
    assert cfg["power"]["url"] is None
    assert cfg["battery"]["url"] == "http://localhost:8080/status"


def test_proxy_power(monkeypatch):
    monkeypatch.setenv("HOST_IP", "pi.local")
    client = TestClient(create_app(client=_client()))
    body = client.get("/proxy/power").json()
    assert body["degraded"] is True
    assert body["power"] == AGENT
    assert "time" in body["server"]


def test_proxy_power_without_url():
    client = TestClient(create_app(client=_client()))
    r = client.get("/proxy/power")
    assert r.status_code == 200
    body = r.json()
    assert body["power"] == {"last_error": "POWER_API_URL/HOST_IP not set"}
    assert body["degraded"] is False


def test_proxy_battery():
    client = TestClient(create_app(client=_client()))
    body = client.get("/proxy/battery").json()
    assert body["source_url"] == "http://localhost:8080/status"
    assert body["power"] == STATUS
    assert body["power_state"] == "low"
    assert body["should_run"] is False
    assert body["cache_ttl_s"] == 2
    assert body["cached_at"] is not None


def test_health_endpoints():
    client = TestClient(create_app(client=_client()))
    assert client.get("/proxy/healthz").json() == {"ok": True}
    assert client.get("/proxy/readyz").json() == {"ok": True}
