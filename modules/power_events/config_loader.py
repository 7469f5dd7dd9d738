from __future__ import annotations

import os
from typing import Any, Dict, Optional

import yaml

from modules.power.config_loader import parse_duration


DEFAULT_CONFIG: Dict[str, Any] = {
    "server": {"host": "0.0.0.0", "port": 8080},
    "status_url": "http://power-api.monitoring.svc.cluster.local:8080/status",
    "sink_url": None,
    "period_s": 30.0,
    "timeout_s": 2.0,
    "source": "power-poller",
    "event_type": "dev.power-agent.power.status",
    "min_battery": 30,
}


def load_config(config_path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Defaults < config/config.yml < env (POWER_STATUS_URL, K_SINK, PERIOD) < overrides."""
    cfg: Dict[str, Any] = dict(DEFAULT_CONFIG)
    p = config_path or os.path.join(os.path.dirname(__file__), "config", "config.yml")
    if os.path.exists(p):
        with open(p, "r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
        if isinstance(loaded, dict):
            cfg.update(loaded)

    if os.getenv("POWER_STATUS_URL"):
        cfg["status_url"] = os.environ["POWER_STATUS_URL"]
    if os.getenv("K_SINK"):
        cfg["sink_url"] = os.environ["K_SINK"]
    period = os.getenv("PERIOD")
    if period:
        # invalid PERIOD keeps the configured value
        try:
            parsed = parse_duration(period)
        except ValueError:
            parsed = 0.0
        if parsed > 0:
            cfg["period_s"] = parsed

    if overrides:
        cfg.update(overrides)
    return cfg
