from __future__ import annotations
from typing import Any, Dict, Optional

import httpx
from fastapi import FastAPI

from .config_loader import load_config
from .api.router import get_router
from .services.fetcher import CachedFetcher


def build_fetchers(cfg: Dict[str, Any], client: Optional[httpx.Client] = None) -> tuple[CachedFetcher, CachedFetcher]:
    p = cfg["power"]
    b = cfg["battery"]
    power = CachedFetcher(
        p.get("url"),
        ttl_s=float(p.get("ttl_s", 5.0)),
        timeout_s=float(p.get("timeout_s", 0.6)),
        client=client,
        missing_url_error="POWER_API_URL/HOST_IP not set",
    )
    battery = CachedFetcher(
        b.get("url"),
        ttl_s=float(b.get("ttl_s", 2.0)),
        timeout_s=float(b.get("timeout_s", 0.8)),
        client=client,
        missing_url_error="POWER_STATUS_URL/HOST_IP not set",
    )
    return power, battery


def create_app(config_path: str | None = None, client: Optional[httpx.Client] = None) -> FastAPI:
    cfg = load_config(config_path)
    power, battery = build_fetchers(cfg, client)
    app = FastAPI(title="Power Proxy")
    app.include_router(get_router(power, battery, cfg))
    return app


if __name__ == "__main__":
    import uvicorn
    from modules.logwrapper import init_logging
    init_logging()
    cfg = load_config(None)
    uvicorn.run(create_app(), host=str(cfg["server"]["host"]), port=int(cfg["server"]["port"]))
