from __future__ import annotations
from typing import Any, Callable, Dict, Optional

from fastapi import FastAPI

from .config_loader import load_config
from .services.bootstrap import bootstrap
from .api.router import get_router as get_core_router


def create_app(overrides: Optional[Dict[str, Any]] = None, invoke: Optional[Callable] = None) -> FastAPI:
    cfg = load_config(overrides=overrides)
    app = FastAPI(title="Power Agent Gateway")

    started = bootstrap(app, cfg, invoke=invoke)
    app.state.started = started  # type: ignore[attr-defined]

    # core API for status
    app.include_router(get_core_router(cfg, started))
    return app


if __name__ == "__main__":
    import uvicorn
    from modules.logwrapper import init_logging
    init_logging()
    cfg = load_config()
    uvicorn.run(create_app(), host=str(cfg["server"]["host"]), port=int(cfg["server"]["port"]))
