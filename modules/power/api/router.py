from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from ..models.reading import Reading
from ..services.cache import ReadingCache


def get_router(cache: ReadingCache, source: str = "vcgencmd") -> APIRouter:
    r = APIRouter(tags=["power"])

    @r.get("/power", summary="Latest Reading")
    def power() -> Dict[str, Any]:
        entry = cache.get()
        if entry is None:
            # only reachable before the initial poll published
            return {**Reading.empty(source, "no reading yet").to_dict(), "cached_at": None}
        cached_at = datetime.fromtimestamp(entry.cached_at, tz=timezone.utc).isoformat()
        return {**entry.reading.to_dict(), "cached_at": cached_at}

    @r.get("/healthz", summary="Healthz")
    def healthz():
        return {"ok": True}

    @r.get("/", response_class=PlainTextResponse, include_in_schema=False)
    def root():
        return "ok\n"

    return r
