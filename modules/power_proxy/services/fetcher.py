from __future__ import annotations
import logging
import threading
import time
from typing import Any, Dict, Optional, Tuple

import httpx

logger = logging.getLogger("power_proxy.fetcher")


class CachedFetcher:
    """GETs one upstream JSON object, reusing it for ``ttl_s`` seconds.

    Failures never raise: they come back as ``{"last_error": ...}`` and are
    not cached, so the next request tries upstream again.
    """

    def __init__(
        self,
        url: Optional[str],
        ttl_s: float = 5.0,
        timeout_s: float = 0.6,
        client: Optional[httpx.Client] = None,
        missing_url_error: str = "upstream url not set",
    ) -> None:
        self.url = url
        self.ttl_s = float(ttl_s)
        self.timeout_s = float(timeout_s)
        self.missing_url_error = missing_url_error
        self._client = client or httpx.Client(timeout=self.timeout_s)
        self._lock = threading.Lock()
        self._cache: Optional[Dict[str, Any]] = None
        self._fetched_mono = 0.0
        self._cached_at: Optional[float] = None

    def get(self) -> Tuple[Dict[str, Any], Optional[float]]:
        """Return ``(payload, cached_at_epoch)``."""
        with self._lock:
            now = time.monotonic()
            if self._cache is not None and now - self._fetched_mono < self.ttl_s:
                return dict(self._cache), self._cached_at
            if not self.url:
                return {"last_error": self.missing_url_error}, self._cached_at
            try:
                resp = self._client.get(self.url, timeout=self.timeout_s)
                resp.raise_for_status()
                data = resp.json()
                if not isinstance(data, dict):
                    raise ValueError(f"expected a JSON object, got {type(data).__name__}")
            except (httpx.HTTPError, ValueError) as exc:
                logger.warning("fetch %s failed: %s", self.url, exc)
                self._cached_at = time.time()
                return {"last_error": str(exc)}, self._cached_at
            self._cache = data
            self._fetched_mono = now
            self._cached_at = time.time()
            return dict(data), self._cached_at

    def close(self) -> None:
        self._client.close()
