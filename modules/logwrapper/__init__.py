"""
logwrapper: central logging for the agent.

Public API:
- init_logging(overrides: dict | None) -> None
- set_debug(enabled: bool) -> None
- get_memory_handler() -> InMemoryLogHandler | None
- get_router() -> fastapi.APIRouter
"""
from .xLogService import init_logging, set_debug, get_memory_handler, get_router

__all__ = [
    "init_logging",
    "set_debug",
    "get_memory_handler",
    "get_router",
]
