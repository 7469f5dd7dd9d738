from __future__ import annotations
from typing import Optional

import httpx
from fastapi import FastAPI

from .config_loader import load_config
from .api.router import get_router
from .services.forwarder import EventForwarder


def create_app(config_path: str | None = None, client: Optional[httpx.Client] = None, start: bool = True) -> FastAPI:
    cfg = load_config(config_path)
    forwarder = EventForwarder(cfg, client=client)
    if start:
        forwarder.start()
    app = FastAPI(title="Power Events")
    app.state.forwarder = forwarder  # type: ignore[attr-defined]
    app.include_router(get_router(forwarder))
    return app


if __name__ == "__main__":
    import uvicorn
    from modules.logwrapper import init_logging
    init_logging()
    cfg = load_config()
    uvicorn.run(
        create_app(),
        host=str(cfg.get("server", {}).get("host", "0.0.0.0")),
        port=int(cfg.get("server", {}).get("port", 8080)),
    )
