from __future__ import annotations
import random
from typing import Any, Dict, Optional

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from ..services.generator import generate_status


def get_router(cfg: Dict[str, Any], rng: Optional[random.Random] = None) -> APIRouter:
    r = APIRouter(prefix="/sim", tags=["battery_sim"])
    node = str(cfg.get("node_name") or "unknown-node")
    rng = rng or random.Random()

    @r.get("/", response_class=PlainTextResponse)
    def banner():
        return "Power metrics API daemon - GET /sim/status\n"

    @r.get("/status")
    def status() -> Dict[str, Any]:
        return generate_status(node, rng=rng)

    return r
