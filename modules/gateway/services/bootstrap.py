from __future__ import annotations
from typing import Any, Callable, Dict, Optional

import logging

from fastapi import FastAPI

logger = logging.getLogger("gateway.bootstrap")


def _include_power(app: FastAPI, started: Dict[str, object], cfg: Dict[str, Any], invoke: Optional[Callable] = None) -> None:
    from modules.power.xPowerService import xPowerService
    svc = xPowerService(config_overrides=cfg.get("power") or None, invoke=invoke)
    if svc.cfg.get("debug"):
        from modules.logwrapper import set_debug
        set_debug(True)
    svc.start()
    started["power"] = svc
    app.include_router(svc.router())
    logger.info("module power mounted")


def _include_logs(app: FastAPI, started: Dict[str, object]) -> None:
    from modules.logwrapper import get_router as get_logs_router
    app.include_router(get_logs_router())
    started["logs"] = True
    logger.info("module logs mounted")


def _include_power_proxy(app: FastAPI, started: Dict[str, object]) -> None:
    from modules.power_proxy.config_loader import load_config as load_proxy_cfg
    from modules.power_proxy.xPowerProxyService import build_fetchers
    from modules.power_proxy.api.router import get_router as get_proxy_router
    pcfg = load_proxy_cfg(None)
    power, battery = build_fetchers(pcfg)
    started["power_proxy"] = (power, battery)
    app.include_router(get_proxy_router(power, battery, pcfg))
    logger.info("module power_proxy mounted")


def _include_battery_sim(app: FastAPI, started: Dict[str, object]) -> None:
    from modules.battery_sim.config_loader import load_config as load_sim_cfg
    from modules.battery_sim.api.router import get_router as get_sim_router
    app.include_router(get_sim_router(load_sim_cfg(None)))
    started["battery_sim"] = True
    logger.info("module battery_sim mounted")


def _include_power_events(app: FastAPI, started: Dict[str, object]) -> None:
    from modules.power_events.config_loader import load_config as load_events_cfg
    from modules.power_events.services.forwarder import EventForwarder
    from modules.power_events.api.router import get_router as get_events_router
    fwd = EventForwarder(load_events_cfg(None))
    fwd.start()
    started["power_events"] = fwd
    app.include_router(get_events_router(fwd))
    logger.info("module power_events mounted")


def bootstrap(app: FastAPI, cfg: Dict[str, Any], invoke: Optional[Callable] = None) -> Dict[str, object]:
    """Start and wire modules according to cfg.include and return started dict."""
    started: Dict[str, object] = {}

    include = cfg.get("include", {})

    def _try(fn, name: str = ""):
        try:
            fn()
        except Exception as exc:
            logger.warning("module %s failed to mount: %s", name or fn.__name__, exc)

    # power is the agent itself; a broken config must stop startup
    if include.get("power"):
        _include_power(app, started, cfg, invoke)
    if include.get("logs"):
        _try(lambda: _include_logs(app, started), "logs")
    if include.get("power_proxy"):
        _try(lambda: _include_power_proxy(app, started), "power_proxy")
    if include.get("battery_sim"):
        _try(lambda: _include_battery_sim(app, started), "battery_sim")
    if include.get("power_events"):
        _try(lambda: _include_power_events(app, started), "power_events")

    return started
