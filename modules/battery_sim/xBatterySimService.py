from __future__ import annotations
from fastapi import FastAPI

from .config_loader import load_config
from .api.router import get_router


def create_app(config_path: str | None = None) -> FastAPI:
    cfg = load_config(config_path)
    app = FastAPI(title="Battery Simulator")
    app.include_router(get_router(cfg))
    return app


if __name__ == "__main__":
    import uvicorn
    from modules.logwrapper import init_logging
    init_logging()
    cfg = load_config(None)
    uvicorn.run(create_app(), host=str(cfg["server"]["host"]), port=int(cfg["server"]["port"]))
