from __future__ import annotations
import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI

from .config_loader import load_config
from .api.router import get_router
from .services.cache import ReadingCache
from .services.invoker import CommandInvoker, Invoke
from .services.poller import PowerPoller
from .services.preflight import check_command

logger = logging.getLogger("power.service")


class xPowerService:
    """Owns the cache and the poller; handlers only get the cache."""

    def __init__(self, config_overrides: Optional[Dict[str, Any]] = None, invoke: Optional[Invoke] = None, config_path: Optional[str] = None):
        self.cfg = load_config(config_path, overrides=config_overrides)
        self.command = str(self.cfg["command"])
        self.invoke: Invoke = invoke or CommandInvoker(self.command)
        self.cache = ReadingCache()
        poll = self.cfg["poll"]
        self.poller = PowerPoller(
            self.cache,
            self.invoke,
            interval_s=float(poll["interval_s"]),
            timeout_s=int(poll["timeout_ms"]) / 1000.0,
            source=str(self.cfg.get("source", self.command)),
        )

    def start(self) -> None:
        if isinstance(self.invoke, CommandInvoker):
            check_command(self.invoke)
        self.poller.start()
        logger.info(
            "power poller started (poll=%.1fs, timeout=%.3fs, command=%s)",
            self.poller.interval_s, self.poller.timeout_s, self.command,
        )

    def stop(self) -> None:
        self.poller.stop()

    def router(self):
        return get_router(self.cache, self.poller.source)


def create_app(config_path: str | None = None, invoke: Optional[Invoke] = None) -> FastAPI:
    svc = xPowerService(invoke=invoke, config_path=config_path)
    svc.start()
    app = FastAPI(title="Power Agent")
    app.state.power = svc  # type: ignore[attr-defined]
    app.include_router(svc.router())
    return app


if __name__ == "__main__":
    import uvicorn
    from modules.logwrapper import init_logging
    init_logging()
    cfg = load_config(None)
    uvicorn.run(create_app(), host=str(cfg["server"]["host"]), port=int(cfg["server"]["port"]))
