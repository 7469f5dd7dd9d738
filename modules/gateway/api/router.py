from __future__ import annotations
from typing import Any, Dict

from fastapi import APIRouter


def get_router(cfg: Dict[str, Any], started: Dict[str, object]) -> APIRouter:
    r = APIRouter()

    @r.get("/status")
    def status():
        include_cfg = dict(cfg.get("include", {}))
        started_names = list(started.keys())
        configured_on = [k for k, v in include_cfg.items() if bool(v)]
        not_started = [k for k in configured_on if k not in started_names]
        out: Dict[str, Any] = {
            "ok": not not_started,
            "configured": include_cfg,
            "started": started_names,
            "not_started": not_started,
        }
        power = started.get("power")
        if power is not None:
            poller = power.poller  # type: ignore[attr-defined]
            out["poller"] = {
                "running": poller.running,
                "interval_s": poller.interval_s,
                "timeout_s": poller.timeout_s,
            }
        return out

    return r
