from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(ts: Optional[datetime]) -> Optional[str]:
    return ts.isoformat() if ts is not None else None


@dataclass(frozen=True)
class Reading:
    """One poll cycle's snapshot.

    A non-empty ``last_error`` means the numeric fields must not be trusted;
    they may be partially or entirely zero-valued.
    """

    timestamp: datetime = field(default_factory=utcnow)
    temperature_c: float = 0.0
    voltage_v: float = 0.0
    clock_mhz: float = 0.0
    throttle_bitmask_hex: str = ""
    undervoltage: bool = False
    freq_capped: bool = False
    throttled: bool = False
    source: str = ""
    poll_latency: float = 0.0

    # Debug helpers
    raw_temperature: Optional[str] = None
    raw_voltage: Optional[str] = None
    raw_clock: Optional[str] = None
    raw_throttle: Optional[str] = None

    last_error: Optional[str] = None
    last_error_at: Optional[datetime] = None

    @classmethod
    def empty(cls, source: str, error: str) -> "Reading":
        now = utcnow()
        return cls(timestamp=now, source=source, last_error=error, last_error_at=now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": _iso(self.timestamp),
            "temperature_c": self.temperature_c,
            "voltage_v": self.voltage_v,
            "clock_mhz": self.clock_mhz,
            "throttle_bitmask_hex": self.throttle_bitmask_hex,
            "undervoltage": self.undervoltage,
            "freq_capped": self.freq_capped,
            "throttled": self.throttled,
            "source": self.source,
            "poll_latency": self.poll_latency,
            "raw_temperature": self.raw_temperature,
            "raw_voltage": self.raw_voltage,
            "raw_clock": self.raw_clock,
            "raw_throttle": self.raw_throttle,
            "last_error": self.last_error,
            "last_error_at": _iso(self.last_error_at),
        }
