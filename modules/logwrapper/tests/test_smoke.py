from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.testclient import TestClient

from modules.logwrapper import init_logging, get_memory_handler, get_router


def test_smoke_memory_handler():
    init_logging({"enable_file": False})
    log = logging.getLogger("modules.logwrapper.test")
    log.info("info line")
    handler = get_memory_handler()
    assert handler is not None
    items = handler.tail(5)
    assert any("info line" in i for i in items)


def test_logs_router_lists_and_sets_level():
    init_logging({"enable_file": False})
    logging.getLogger("power.test").warning("visible in buffer")
    app = FastAPI()
    app.include_router(get_router())
    client = TestClient(app)

    r = client.get("/logs/", params={"n": 50})
    assert r.status_code == 200
    assert any("visible in buffer" in i for i in r.json()["items"])

    r = client.post("/logs/level", json={"logger": "power.test", "level": "error"})
    assert r.status_code == 200
    assert logging.getLogger("power.test").level == logging.ERROR

    r = client.post("/logs/level", json={"logger": "power.test", "level": "loud"})
    assert r.status_code == 400

    r = client.post("/logs/debug", json={"enabled": True})
    assert r.json()["debug"] is True
