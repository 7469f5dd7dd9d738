from __future__ import annotations
import random
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def time_of_day(hour: int) -> str:
    return "night" if hour >= 18 or hour < 6 else "day"


def generate_status(node_name: str, now: Optional[datetime] = None, rng: Optional[random.Random] = None) -> Dict[str, Any]:
    """Random but plausible node power status.

    battery 40..99 %, solar only during the day while not charging.
    """
    rng = rng or random.Random()
    now = now or datetime.now(timezone.utc).astimezone()
    charging = rng.randint(0, 1) == 0
    tod = time_of_day(now.hour)
    return {
        "node_name": node_name,
        "battery_percent": rng.randint(40, 99),
        "is_charging": charging,
        "time_of_day": tod,
        "solar_available": tod == "day" and not charging,
        "last_updated": now.isoformat(timespec="seconds"),
    }
