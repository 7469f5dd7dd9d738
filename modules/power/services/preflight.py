from __future__ import annotations
import logging
import sys

from .invoker import CommandInvoker

logger = logging.getLogger("power.preflight")


def is_raspberry_pi(model_path: str = "/proc/device-tree/model") -> bool:
    if not sys.platform.startswith("linux"):
        return False
    try:
        with open(model_path, "r", encoding="utf-8", errors="ignore") as f:
            return "raspberry pi" in f.read().lower()
    except OSError:
        return False


def check_command(invoker: CommandInvoker) -> bool:
    """Warn when the measurement utility is missing. Never fatal."""
    command = invoker.command
    if invoker.available():
        return True
    logger.warning("%s not found in PATH; readings will carry last_error", command)
    if not is_raspberry_pi():
        logger.warning("host does not look like a Raspberry Pi; %s ships with Raspberry Pi OS", command)
    else:
        logger.warning("if running in a container, mount %s from the host or run the agent on the host", command)
    return False
