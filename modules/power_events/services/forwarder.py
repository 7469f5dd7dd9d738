from __future__ import annotations
import logging
import threading
from typing import Any, Dict, Optional, Tuple

import httpx
from cloudevents.conversion import to_binary
from cloudevents.http import CloudEvent

logger = logging.getLogger("power_events.forwarder")

# CloudEvents extension names allow only [a-z0-9]
EXT_SHOULD_RUN = "shouldrun"
EXT_POWER_STATE = "powerstate"
EXT_NODE = "node"


def derive_run_decision(status: Dict[str, Any], min_battery: int = 30) -> Tuple[bool, str]:
    """Run deferred work only on a low battery at night while not charging."""
    try:
        battery = int(status.get("battery_percent") or 0)
    except (TypeError, ValueError):
        battery = 0
    should_run = battery < min_battery and status.get("time_of_day") == "night" and not status.get("is_charging")
    return should_run, "low" if should_run else "ok"


def build_event(status: Dict[str, Any], source: str, event_type: str, min_battery: int = 30) -> CloudEvent:
    """Status payload as data, the run decision as extensions for trigger filters."""
    should_run, power_state = derive_run_decision(status, min_battery)
    attributes = {
        "type": event_type,
        "source": source,
        "datacontenttype": "application/json",
        EXT_SHOULD_RUN: "true" if should_run else "false",
        EXT_POWER_STATE: power_state,
        EXT_NODE: str(status.get("node_name", "")),
    }
    return CloudEvent(attributes, status)


class EventForwarder:
    """Polls a power status endpoint and emits one event per period."""

    def __init__(self, cfg: Dict[str, Any], client: Optional[httpx.Client] = None) -> None:
        self.status_url = str(cfg.get("status_url") or "")
        self.sink_url = str(cfg.get("sink_url") or "")
        self.period_s = float(cfg.get("period_s", 30.0))
        self.source = str(cfg.get("source", "power-poller"))
        self.event_type = str(cfg.get("event_type", "dev.power-agent.power.status"))
        self.min_battery = int(cfg.get("min_battery", 30))
        self._client = client or httpx.Client(timeout=float(cfg.get("timeout_s", 2.0)))
        self._thread: Optional[threading.Thread] = None
        self._stop = threading.Event()
        self._lock = threading.Lock()
        self._last: Optional[Dict[str, Any]] = None

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        if not self.sink_url:
            logger.warning("no sink configured (K_SINK); events are built but not delivered")
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="power-events", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread:
            self._thread.join(timeout=1.0)

    def last_event(self) -> Optional[Dict[str, Any]]:
        with self._lock:
            return dict(self._last) if self._last else None

    def _loop(self) -> None:
        while not self._stop.is_set():
            try:
                self.poll_once()
            except Exception:
                # keep the loop alive; the next period retries
                logger.exception("poll round failed")
            self._stop.wait(self.period_s)

    def fetch(self) -> Dict[str, Any]:
        resp = self._client.get(self.status_url)
        resp.raise_for_status()
        data = resp.json()
        if not isinstance(data, dict):
            raise ValueError("status payload is not a JSON object")
        return data

    def poll_once(self) -> Optional[Dict[str, Any]]:
        """One fetch/derive/emit round. Returns the event summary, None on fetch error."""
        try:
            status = self.fetch()
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            logger.warning("fetch error: %s", exc)
            return None

        event = build_event(status, self.source, self.event_type, self.min_battery)
        headers, body = to_binary(event)
        delivered = False
        if self.sink_url:
            try:
                resp = self._client.post(self.sink_url, headers=headers, content=body)
                delivered = resp.is_success
                if not delivered:
                    logger.warning("send failed: sink answered %s", resp.status_code)
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                logger.warning("send failed: %s", exc)

        summary = {
            "id": event["id"],
            "time": event["time"],
            "should_run": event[EXT_SHOULD_RUN] == "true",
            "power_state": event[EXT_POWER_STATE],
            "node": event[EXT_NODE],
            "delivered": delivered,
        }
        with self._lock:
            self._last = summary
        logger.debug("event %s power_state=%s delivered=%s", summary["id"], summary["power_state"], delivered)
        return summary
