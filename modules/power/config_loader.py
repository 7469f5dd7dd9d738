from __future__ import annotations
import copy
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

_DEFAULT_CFG_PATH = Path(__file__).parent / "config" / "config.yml"

DEFAULT_CONFIG: Dict[str, Any] = {
    "server": {"host": "0.0.0.0", "port": 8085},
    "poll": {"interval_s": 5.0, "timeout_ms": 800},
    "command": "vcgencmd",
    "source": "vcgencmd",
    "debug": False,
}

_TRUTHY = {"1", "true", "yes", "on"}


def parse_duration(raw: str) -> float:
    """Seconds from ``"5"``, ``"5s"``, ``"800ms"`` or ``"2m"``. Raises ValueError."""
    txt = str(raw).strip().lower()
    if txt.endswith("ms"):
        return float(txt[:-2]) / 1000.0
    if txt.endswith("s"):
        return float(txt[:-1])
    if txt.endswith("m"):
        return float(txt[:-1]) * 60.0
    return float(txt)


def _deep_update(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_update(out[k], v)
        else:
            out[k] = v
    return out


def _env_overrides() -> Dict[str, Any]:
    env: Dict[str, Any] = {}
    host = os.getenv("POWER_HOST")
    port = os.getenv("POWER_PORT")
    interval = os.getenv("POWER_POLL_INTERVAL_S")
    timeout = os.getenv("POWER_POLL_TIMEOUT_MS")
    if host:
        env.setdefault("server", {})["host"] = host
    if port:
        env.setdefault("server", {})["port"] = int(port)
    if interval:
        env.setdefault("poll", {})["interval_s"] = float(interval)
    if timeout:
        env.setdefault("poll", {})["timeout_ms"] = int(timeout)
    debug = os.getenv("POWER_DEBUG")
    if debug:
        env["debug"] = debug.strip().lower() in _TRUTHY
    elif os.getenv("LOG_LEVEL", "").upper() == "DEBUG":
        env["debug"] = True
    return env


def _validate(cfg: Dict[str, Any]) -> Dict[str, Any]:
    if float(cfg["poll"]["interval_s"]) <= 0:
        raise ValueError("poll.interval_s must be positive")
    if int(cfg["poll"]["timeout_ms"]) <= 0:
        raise ValueError("poll.timeout_ms must be positive")
    if not str(cfg.get("command") or "").strip():
        raise ValueError("command must not be empty")
    return cfg


def load_config(path: str | os.PathLike | None = None, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Defaults < YAML file < environment < explicit overrides."""
    cfg_path = Path(path) if path else Path(os.getenv("POWER_CONFIG", _DEFAULT_CFG_PATH))
    if not cfg_path.exists():
        cfg_path = _DEFAULT_CFG_PATH
    data: Dict[str, Any] = {}
    if cfg_path.exists():
        with open(cfg_path, "r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
        if isinstance(loaded, dict):
            data = loaded
    cfg = _deep_update(copy.deepcopy(DEFAULT_CONFIG), data)
    cfg = _deep_update(cfg, _env_overrides())
    if overrides:
        cfg = _deep_update(cfg, overrides)
    return _validate(cfg)
