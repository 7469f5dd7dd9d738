from __future__ import annotations
import logging
from typing import Any, Dict

from cloudevents.exceptions import GenericException
from cloudevents.http import from_http
from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from ..services.forwarder import EXT_POWER_STATE, EventForwarder

logger = logging.getLogger("power_events.receiver")


def get_router(forwarder: EventForwarder) -> APIRouter:
    r = APIRouter(prefix="/events", tags=["power_events"])

    @r.get("/healthz")
    def healthz():
        return {"ok": True}

    @r.get("/last")
    def last() -> Dict[str, Any]:
        return {"event": forwarder.last_event()}

    @r.post("/")
    async def receive(request: Request):
        try:
            event = from_http(dict(request.headers), await request.body())
        except GenericException as exc:
            raise HTTPException(status_code=400, detail=f"not a CloudEvent: {exc}")
        # the extension is present because the trigger matched
        ps = event.get(EXT_POWER_STATE)
        if ps is not None:
            logger.info("power_state=%s", ps)
        logger.debug("received event id=%s type=%s", event["id"], event["type"])
        return JSONResponse({"ok": True}, status_code=202)

    return r
