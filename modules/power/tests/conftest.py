from __future__ import annotations

import threading
import time
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import pytest

GOOD_OUTPUT: Dict[Tuple[str, ...], str] = {
    ("measure_temp",): "temp=53.2'C",
    ("measure_volts",): "volt=0.8625V",
    ("get_throttled",): "throttled=0x50005",
    ("measure_clock", "arm"): "frequency(48)=1500398464",
}


class FakeVcgencmd:
    """Stands in for the vcgencmd invoker; records calls."""

    def __init__(
        self,
        outputs: Optional[Dict[Tuple[str, ...], str]] = None,
        fail: Iterable[Tuple[str, ...]] = (),
        hang: Iterable[Tuple[str, ...]] = (),
        hang_s: float = 1.0,
    ) -> None:
        self.outputs = dict(GOOD_OUTPUT)
        if outputs:
            self.outputs.update(outputs)
        self.fail = set(fail)
        self.hang = set(hang)
        self.hang_s = hang_s
        self.calls: List[Tuple[Tuple[str, ...], float]] = []
        self._lock = threading.Lock()

    def __call__(self, args: Sequence[str], timeout: float):
        key = tuple(args)
        with self._lock:
            self.calls.append((key, timeout))
        if key in self.hang:
            time.sleep(self.hang_s)
        return self.outputs[key], key not in self.fail

    @property
    def cycles(self) -> int:
        with self._lock:
            return sum(1 for k, _ in self.calls if k == ("measure_temp",))


@pytest.fixture
def fake_vcgencmd():
    return FakeVcgencmd
