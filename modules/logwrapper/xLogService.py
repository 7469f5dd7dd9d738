from __future__ import annotations

import logging
import logging.config
import os
from typing import Any, Dict, Optional

from .config_loader import load_config
from .services.handlers import InMemoryLogHandler, build_formatter

_MEMORY_HANDLER: Optional[InMemoryLogHandler] = None
_CONSOLE_HANDLER: Optional[logging.Handler] = None
_ROUTER = None  # built lazily


def _ensure_log_dir(path: str) -> None:
    directory = os.path.dirname(path)
    if directory and not os.path.exists(directory):
        os.makedirs(directory, exist_ok=True)


def init_logging(overrides: Optional[Dict[str, Any]] = None) -> None:
    """Configure the root logger once for the whole agent.

    - existing loggers keep propagating (disable_existing_loggers=False)
    - console and rotating file handlers are optional
    - an in-memory ring buffer backs GET /logs/
    - a later call with ``{"debug": True}`` only flips the console to DEBUG
    """
    global _MEMORY_HANDLER, _CONSOLE_HANDLER

    if _MEMORY_HANDLER is not None and logging.getLogger().handlers:
        if overrides and overrides.get("debug"):
            set_debug(True)
        return

    cfg = load_config(overrides=overrides)

    handlers: Dict[str, Dict[str, Any]] = {
        "in_memory": {
            "()": InMemoryLogHandler,
            "maxlen": int(cfg.get("buffer_size", 500)),
            "level": "DEBUG",
        }
    }

    if cfg.get("enable_console", True):
        handlers["console"] = {
            "class": "logging.StreamHandler",
            "level": str(cfg.get("console_level", "INFO")).upper(),
            "stream": "ext://sys.stdout",
        }

    if cfg.get("enable_file", False):
        path = str(cfg.get("file_path", "logs/power-agent.log"))
        _ensure_log_dir(path)
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "DEBUG",
            "filename": path,
            "maxBytes": int(cfg.get("rotate_bytes", 2 * 1024 * 1024)),
            "backupCount": int(cfg.get("backup_count", 3)),
            "encoding": "utf-8",
        }

    formatter = build_formatter(bool(cfg.get("json_format", False)))

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"default": {"()": lambda: formatter}},
            "handlers": {name: {**opts, "formatter": "default"} for name, opts in handlers.items()},
            "root": {"level": "DEBUG", "handlers": list(handlers.keys())},
        }
    )

    if cfg.get("capture_warnings", True):
        logging.captureWarnings(True)

    for h in logging.getLogger().handlers:
        if isinstance(h, InMemoryLogHandler):
            _MEMORY_HANDLER = h
        elif type(h) is logging.StreamHandler:
            _CONSOLE_HANDLER = h

    for name, level in (cfg.get("module_levels") or {}).items():
        logging.getLogger(name).setLevel(str(level).upper())

    if cfg.get("debug"):
        logging.getLogger("logwrapper").debug("debug logging enabled")


def set_debug(enabled: bool) -> None:
    if _CONSOLE_HANDLER is not None:
        _CONSOLE_HANDLER.setLevel(logging.DEBUG if enabled else logging.INFO)
        if enabled:
            logging.getLogger("logwrapper").debug("debug logging enabled")


def get_memory_handler() -> Optional[InMemoryLogHandler]:
    return _MEMORY_HANDLER


def get_router():
    global _ROUTER
    if _ROUTER is None:
        from .api.router import router
        _ROUTER = router
    return _ROUTER


if __name__ == "__main__":
    init_logging({"debug": True})
    log = logging.getLogger("logwrapper.demo")
    log.debug("debug line")
    log.info("Logwrapper service started")
    log.warning("This is a warning")
