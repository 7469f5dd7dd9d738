from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import APIRouter

from ..services.fetcher import CachedFetcher
from ..services.policy import derive_degraded, derive_power_state


def _iso(epoch: Optional[float]) -> Optional[str]:
    if epoch is None:
        return None
    return datetime.fromtimestamp(epoch, tz=timezone.utc).isoformat()


def get_router(power: CachedFetcher, battery: CachedFetcher, cfg: Dict[str, Any]) -> APIRouter:
    r = APIRouter(prefix="/proxy", tags=["power_proxy"])
    pcfg = cfg.get("power", {})
    bcfg = cfg.get("battery", {})
    temp_limit = float(pcfg.get("temp_limit_c", 70.0))
    min_volt = pcfg.get("min_voltage_v")
    min_volt = float(min_volt) if min_volt is not None else None
    min_battery = int(bcfg.get("min_battery", 30))

    @r.get("/healthz")
    def healthz():
        return {"ok": True}

    @r.get("/readyz")
    def readyz():
        return {"ok": True}

    @r.get("/power", summary="Agent reading with degraded flag")
    def proxied_power() -> Dict[str, Any]:
        # upstream errors surface in power["last_error"]
        p, _ = power.get()
        return {
            "degraded": derive_degraded(p, temp_limit, min_volt),
            "power": p,
            "server": {"time": datetime.now(timezone.utc).isoformat()},
        }

    @r.get("/battery", summary="Simulator status with derived power state")
    def proxied_battery() -> Dict[str, Any]:
        status, cached_at = battery.get()
        state, should_run = derive_power_state(status, min_battery)
        return {
            "source_url": battery.url,
            "power": status,
            "power_state": state,
            "should_run": should_run,
            "cached_at": _iso(cached_at),
            "cache_ttl_s": int(battery.ttl_s),
            "server_time": datetime.now(timezone.utc).isoformat(),
        }

    return r
