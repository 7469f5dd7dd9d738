"""Power module: vcgencmd poller, reading cache and the /power endpoint.

Public API:
- xPowerService: owns the cache and the poller
- create_app(config_path) -> FastAPI
"""
from .xPowerService import xPowerService, create_app

__all__ = ["xPowerService", "create_app"]
