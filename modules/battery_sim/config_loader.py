from __future__ import annotations
import os
from pathlib import Path
from typing import Any, Dict

import yaml

_DEFAULT_CFG_PATH = Path(__file__).parent / "config" / "config.yml"


def load_config(path: str | os.PathLike | None = None) -> Dict[str, Any]:
    cfg_path = Path(path) if path else _DEFAULT_CFG_PATH
    if not cfg_path.exists():
        cfg_path = _DEFAULT_CFG_PATH
    with open(cfg_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    # injected by Kubernetes via the downward API
    node = os.getenv("NODE_NAME")
    if node:
        data["node_name"] = node
    data.setdefault("node_name", "unknown-node")
    data.setdefault("server", {"host": "0.0.0.0", "port": 8080})
    return data
