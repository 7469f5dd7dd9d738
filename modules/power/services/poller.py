from __future__ import annotations
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

from ..models.reading import Reading, utcnow
from .cache import ReadingCache
from .invoker import Invoke, QueryResult
from .parser import (
    ParseError,
    parse_clock,
    parse_temperature,
    parse_throttle_bits,
    parse_voltage,
)

logger = logging.getLogger("power.poller")

# Dispatch order doubles as the failure precedence order.
QUERIES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("temperature", ("measure_temp",)),
    ("voltage", ("measure_volts",)),
    ("throttle", ("get_throttled",)),
    ("clock", ("measure_clock", "arm")),
)


def _temperature(raw: str) -> Dict[str, Any]:
    return {"temperature_c": parse_temperature(raw)}


def _voltage(raw: str) -> Dict[str, Any]:
    return {"voltage_v": parse_voltage(raw)}


def _clock(raw: str) -> Dict[str, Any]:
    return {"clock_mhz": parse_clock(raw)}


def _throttle(raw: str) -> Dict[str, Any]:
    st = parse_throttle_bits(raw)
    return {
        "throttle_bitmask_hex": st.hex,
        "undervoltage": st.undervoltage,
        "freq_capped": st.freq_capped,
        "throttled": st.throttled,
    }


PARSE_STEPS: Tuple[Tuple[str, Callable[[str], Dict[str, Any]]], ...] = (
    ("temperature", _temperature),
    ("voltage", _voltage),
    ("clock", _clock),
    ("throttle", _throttle),
)


class PowerPoller:
    """Runs poll cycles on a fixed tick and publishes each result to the cache."""

    def __init__(
        self,
        cache: ReadingCache,
        invoke: Invoke,
        interval_s: float = 5.0,
        timeout_s: float = 0.8,
        source: str = "vcgencmd",
    ) -> None:
        self.cache = cache
        self.invoke = invoke
        self.interval_s = float(interval_s)
        self.timeout_s = float(timeout_s)
        self.source = source
        self._thread: Optional[threading.Thread] = None
        self._stop = threading.Event()

    # -------- lifecycle --------
    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        # first request must never see an empty slot
        reading = self.refresh()
        if reading.last_error:
            logger.warning("initial poll failed: %s", reading.last_error)
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="power-poller", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread:
            self._thread.join(timeout=self.timeout_s + 1.0)

    @property
    def running(self) -> bool:
        return bool(self._thread and self._thread.is_alive())

    def _loop(self) -> None:
        next_tick = time.monotonic() + self.interval_s
        while not self._stop.wait(max(0.0, next_tick - time.monotonic())):
            self.refresh()
            next_tick += self.interval_s
            now = time.monotonic()
            if next_tick <= now:
                missed = int((now - next_tick) // self.interval_s) + 1
                next_tick += missed * self.interval_s
                logger.debug("poll cycle overran, dropped %d tick(s)", missed)

    # -------- cycle --------
    def refresh(self) -> Reading:
        reading = self.poll_once()
        if reading.last_error:
            logger.warning("poll error: %s", reading.last_error)
        self.cache.set(reading)
        logger.debug(
            "polled: temp=%.2fC volt=%.3fV arm=%.1fMHz uv=%s thr=%s fc=%s",
            reading.temperature_c, reading.voltage_v, reading.clock_mhz,
            reading.undervoltage, reading.throttled, reading.freq_capped,
        )
        return reading

    def poll_once(self) -> Reading:
        start = time.monotonic()
        results = self._dispatch(start + self.timeout_s)
        raws = {f"raw_{name}": (res.text or None) for name, res in results.items()}

        failed = next((name for name, _ in QUERIES if not results[name].ok), None)
        if failed is not None:
            now = utcnow()
            return Reading(
                timestamp=now,
                source=self.source,
                poll_latency=time.monotonic() - start,
                last_error=results[failed].error or f"{failed} query failed",
                last_error_at=now,
                **raws,
            )

        values: Dict[str, Any] = {}
        seen: Dict[str, Optional[str]] = {}
        for name, step in PARSE_STEPS:
            seen[f"raw_{name}"] = raws[f"raw_{name}"]
            try:
                values.update(step(results[name].text))
            except ParseError as exc:
                now = utcnow()
                return Reading(
                    timestamp=now,
                    source=self.source,
                    poll_latency=time.monotonic() - start,
                    last_error=str(exc),
                    last_error_at=now,
                    **values,
                    **seen,
                )

        return Reading(
            timestamp=utcnow(),
            source=self.source,
            poll_latency=time.monotonic() - start,
            **values,
            **raws,
        )

    def _dispatch(self, deadline: float) -> Dict[str, QueryResult]:
        pool = ThreadPoolExecutor(max_workers=len(QUERIES), thread_name_prefix="power-query")
        try:
            futures = {name: pool.submit(self._run_query, args, deadline) for name, args in QUERIES}
            done, _ = wait(futures.values(), timeout=max(0.0, deadline - time.monotonic()))
            out: Dict[str, QueryResult] = {}
            for name, fut in futures.items():
                if fut in done:
                    out[name] = fut.result()
                else:
                    fut.cancel()
                    err = f"exec failed: {self.source} {' '.join(dict(QUERIES)[name])}: deadline of {self.timeout_s:.3f}s exceeded"
                    logger.warning(err)
                    out[name] = QueryResult("", False, err)
            return out
        finally:
            # abandoned queries are not waited for
            pool.shutdown(wait=False, cancel_futures=True)

    def _run_query(self, args: Sequence[str], deadline: float) -> QueryResult:
        label = f"{self.source} {' '.join(args)}"
        try:
            res = self.invoke(args, max(0.0, deadline - time.monotonic()))
        except Exception as exc:
            logger.exception("query %s raised", label)
            return QueryResult("", False, f"exec failed: {label}: {exc}")
        if isinstance(res, QueryResult):
            return res
        text, ok = res
        text = str(text or "").strip()
        if ok:
            return QueryResult(text, True)
        return QueryResult(text, False, f"exec failed: {label}; output: {text!r}")
