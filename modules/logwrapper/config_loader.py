from __future__ import annotations

import os
from typing import Any, Dict, Optional

import yaml


DEFAULT_CONFIG: Dict[str, Any] = {
    "enable_console": True,
    "console_level": "INFO",
    "enable_file": False,
    "file_path": "logs/power-agent.log",
    "rotate_bytes": 2 * 1024 * 1024,  # 2MB
    "backup_count": 3,
    "json_format": False,
    "buffer_size": 500,  # in-memory ring buffer size
    "capture_warnings": True,
    "debug": False,
    # Per-module level overrides, e.g. {"uvicorn.access": "WARNING"}
    "module_levels": {},
}


def load_config(base_dir: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Load logging config.

    Search order:
    - base_dir/config/config.yml (if given)
    - modules/logwrapper/config/config.yml

    ``overrides`` win over YAML; LOG_LEVEL / LOG_FILE / POWER_DEBUG win over both.
    """
    cfg: Dict[str, Any] = dict(DEFAULT_CONFIG)

    candidates = []
    if base_dir:
        candidates.append(os.path.join(base_dir, "config", "config.yml"))
    here = os.path.dirname(__file__)
    candidates.append(os.path.join(here, "config", "config.yml"))

    for path in candidates:
        if os.path.exists(path):
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            if isinstance(data, dict):
                cfg.update(data)
            break

    if overrides:
        cfg.update({k: v for k, v in overrides.items() if v is not None})

    env_level = os.getenv("LOG_LEVEL")
    if env_level:
        cfg["console_level"] = env_level.upper()
    env_file = os.getenv("LOG_FILE")
    if env_file:
        cfg["file_path"] = env_file
        cfg["enable_file"] = True
    if os.getenv("POWER_DEBUG", "").strip().lower() in ("1", "true", "yes", "on"):
        cfg["debug"] = True

    if cfg.get("debug"):
        cfg["console_level"] = "DEBUG"
    return cfg
