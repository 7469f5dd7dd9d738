from __future__ import annotations

import json
import re
import time

import httpx
import pytest
from cloudevents.conversion import to_binary
from cloudevents.http import from_http
from fastapi.testclient import TestClient

from modules.power_events.config_loader import load_config
from modules.power_events.services.forwarder import EventForwarder, build_event, derive_run_decision
from modules.power_events.xPowerEventsService import create_app

STATUS_URL = "http://sim.local:8080/status"
SINK_URL = "http://broker.local/default"
EVENT_TYPE = "dev.power-agent.power.status"
LOW_NIGHT = {"node_name": "pi-2", "battery_percent": 12, "time_of_day": "night", "is_charging": False}
CORE_ATTRIBUTES = {"specversion", "id", "source", "type", "time", "datacontenttype", "subject", "dataschema"}


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("POWER_STATUS_URL", "K_SINK", "PERIOD"):
        monkeypatch.delenv(name, raising=False)


class Recorder:
    def __init__(self, status=None, sink_status: int = 202):
        self.status = status if status is not None else LOW_NIGHT
        self.sink_status = sink_status
        self.posts = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, json=self.status)
        self.posts.append(request)
        return httpx.Response(self.sink_status)


def _forwarder(rec, sink: str | None = SINK_URL, status_url: str = STATUS_URL, period_s: float = 60) -> EventForwarder:
    cfg = {"status_url": status_url, "sink_url": sink, "period_s": period_s}
    return EventForwarder(cfg, client=httpx.Client(transport=httpx.MockTransport(rec)))


@pytest.mark.parametrize(
    "status,expected",
    [
        (LOW_NIGHT, (True, "low")),
        ({**LOW_NIGHT, "time_of_day": "day"}, (False, "ok")),
        ({**LOW_NIGHT, "is_charging": True}, (False, "ok")),
        ({**LOW_NIGHT, "battery_percent": 30}, (False, "ok")),
        ({**LOW_NIGHT, "battery_percent": "n/a"}, (True, "low")),
    ],
)
def test_run_decision(status, expected):
    assert derive_run_decision(status, 30) == expected


def test_build_event_attributes():
    event = build_event(LOW_NIGHT, "power-poller", EVENT_TYPE)
    assert event["specversion"] == "1.0"
    assert event["source"] == "power-poller"
    assert event["type"] == EVENT_TYPE
    assert event["id"]
    assert event["time"]
    assert event["shouldrun"] == "true"
    assert event["powerstate"] == "low"
    assert event["node"] == "pi-2"
    assert event.data == LOW_NIGHT


def test_extension_names_are_valid():
    event = build_event(LOW_NIGHT, "power-poller", EVENT_TYPE)
    extensions = set(event.get_attributes()) - CORE_ATTRIBUTES
    assert extensions == {"shouldrun", "powerstate", "node"}
    assert all(re.fullmatch(r"[a-z0-9]+", name) for name in extensions)


def test_binary_mode_round_trips_through_sdk():
    headers, body = to_binary(build_event(LOW_NIGHT, "power-poller", EVENT_TYPE))
    assert headers["ce-specversion"] == "1.0"
    assert headers["ce-powerstate"] == "low"
    assert headers["content-type"] == "application/json"
    assert json.loads(body) == LOW_NIGHT
    received = from_http(headers, body)
    assert received["shouldrun"] == "true"
    assert received.data == LOW_NIGHT


def test_poll_once_delivers():
    rec = Recorder()
    fw = _forwarder(rec)
    summary = fw.poll_once()
    assert summary["delivered"] is True
    assert summary["power_state"] == "low"
    assert summary["should_run"] is True
    assert summary["node"] == "pi-2"
    assert len(rec.posts) == 1
    sent = rec.posts[0]
    assert str(sent.url) == SINK_URL
    assert sent.headers["ce-id"] == summary["id"]
    assert sent.headers["ce-type"] == EVENT_TYPE
    assert json.loads(sent.content) == LOW_NIGHT
    assert fw.last_event() == summary


def test_sink_rejection_is_not_delivered():
    summary = _forwarder(Recorder(sink_status=500)).poll_once()
    assert summary["delivered"] is False


def test_no_sink_still_records_event():
    rec = Recorder()
    summary = _forwarder(rec, sink=None).poll_once()
    assert summary["delivered"] is False
    assert rec.posts == []


def test_fetch_error_skips_round():
    fw = _forwarder(lambda request: httpx.Response(502))
    assert fw.poll_once() is None
    assert fw.last_event() is None


def test_malformed_status_url_skips_round():
    rec = Recorder()
    fw = _forwarder(rec, status_url="http://sim.local:notaport/status")
    assert fw.poll_once() is None
    assert rec.posts == []


def test_loop_survives_unexpected_errors():
    calls = []

    def handler(request):
        calls.append(1)
        raise RuntimeError("transport blew up")

    fw = _forwarder(handler, period_s=0.01)
    fw.start()
    try:
        deadline = time.monotonic() + 2.0
        while len(calls) < 3 and time.monotonic() < deadline:
            time.sleep(0.01)
        assert len(calls) >= 3
        assert fw._thread.is_alive()
    finally:
        fw.stop()


def test_config_env(monkeypatch):
    monkeypatch.setenv("POWER_STATUS_URL", "http://x/status")
    monkeypatch.setenv("K_SINK", "http://sink")
    monkeypatch.setenv("PERIOD", "45s")
    cfg = load_config()
    assert cfg["status_url"] == "http://x/status"
    assert cfg["sink_url"] == "http://sink"
    assert cfg["period_s"] == 45.0


@pytest.mark.parametrize("period", ["soon", "0s", "-5"])
def test_invalid_period_keeps_configured(monkeypatch, period):
    monkeypatch.setenv("PERIOD", period)
    assert load_config()["period_s"] == 30


def test_receiver_and_last_event():
    rec = Recorder()
    client = httpx.Client(transport=httpx.MockTransport(rec))
    app = create_app(client=client, start=False)
    tc = TestClient(app)
    assert tc.get("/events/last").json() == {"event": None}
    app.state.forwarder.poll_once()
    assert tc.get("/events/last").json()["event"]["node"] == "pi-2"

    headers, body = to_binary(build_event(LOW_NIGHT, "power-poller", EVENT_TYPE))
    r = tc.post("/events/", headers=headers, content=body)
    assert r.status_code == 202
    assert r.json() == {"ok": True}
    assert tc.get("/events/healthz").json() == {"ok": True}


def test_receiver_rejects_non_events():
    app = create_app(client=httpx.Client(transport=httpx.MockTransport(Recorder())), start=False)
    r = TestClient(app).post("/events/", content=b"{}", headers={"content-type": "application/json"})
    assert r.status_code == 400
