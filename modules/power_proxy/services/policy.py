from __future__ import annotations
from typing import Any, Dict, Optional, Tuple


def _num(v: Any) -> float:
    try:
        return float(v)
    except (TypeError, ValueError):
        return 0.0


def derive_degraded(power: Dict[str, Any], temp_limit_c: float = 70.0, min_voltage_v: Optional[float] = None) -> bool:
    """True when the agent reports any throttle flag, heat above the limit or low voltage."""
    if power.get("undervoltage") or power.get("freq_capped") or power.get("throttled"):
        return True
    if _num(power.get("temperature_c")) > temp_limit_c:
        return True
    if min_voltage_v is not None and "voltage_v" in power and not power.get("last_error"):
        return _num(power.get("voltage_v")) < min_voltage_v
    return False


def derive_power_state(status: Dict[str, Any], min_battery: int = 30) -> Tuple[str, bool]:
    """Return ``(power_state, should_run)`` for a simulator status payload."""
    battery = int(_num(status.get("battery_percent")))
    ok = battery >= min_battery or bool(status.get("is_charging")) or bool(status.get("solar_available"))
    state = "ok" if ok else "low"
    return state, state == "ok"
