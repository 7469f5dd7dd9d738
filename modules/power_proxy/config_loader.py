from __future__ import annotations
import copy
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

_DEFAULT_CFG_PATH = Path(__file__).parent / "config" / "config.yml"

DEFAULT_CONFIG: Dict[str, Any] = {
    "server": {"host": "0.0.0.0", "port": 8080},
    "power": {"url": None, "ttl_s": 5.0, "timeout_s": 0.6, "temp_limit_c": 70.0, "min_voltage_v": None},
    "battery": {"url": None, "ttl_s": 2.0, "timeout_s": 0.8, "min_battery": 30},
}


def _deep_update(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_update(out[k], v)
        else:
            out[k] = v
    return out


def _resolve_urls(cfg: Dict[str, Any]) -> Dict[str, Any]:
    # explicit url > HOST_IP derived > (battery only) localhost
    host = os.getenv("HOST_IP")
    power = cfg["power"]
    power["url"] = os.getenv("POWER_API_URL") or power.get("url")
    if not power["url"] and host:
        power["url"] = f"http://{host}:8085/power"

    battery = cfg["battery"]
    battery["url"] = os.getenv("POWER_STATUS_URL") or battery.get("url")
    if not battery["url"]:
        battery["url"] = f"http://{host}:8080/status" if host else "http://localhost:8080/status"
    return cfg


def load_config(path: str | os.PathLike | None = None, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    cfg_path = Path(path) if path else _DEFAULT_CFG_PATH
    if not cfg_path.exists():
        cfg_path = _DEFAULT_CFG_PATH
    data: Dict[str, Any] = {}
    if cfg_path.exists():
        with open(cfg_path, "r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
        if isinstance(loaded, dict):
            data = loaded
    cfg = _deep_update(copy.deepcopy(DEFAULT_CONFIG), data)
    if overrides:
        cfg = _deep_update(cfg, overrides)
    return _resolve_urls(cfg)
