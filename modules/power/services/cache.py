from __future__ import annotations
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from ..models.reading import Reading


class RWLock:
    """Many readers or one writer. Waiting writers block new readers."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


@dataclass(frozen=True)
class CachedReading:
    reading: Reading
    cached_at: float  # epoch seconds of publish


class ReadingCache:
    """Single slot holding the latest published Reading.

    The poller is the only writer; request handlers read concurrently.
    """

    def __init__(self) -> None:
        self._lock = RWLock()
        self._slot: Optional[CachedReading] = None

    def get(self) -> Optional[CachedReading]:
        with self._lock.read():
            return self._slot

    def set(self, reading: Reading) -> CachedReading:
        entry = CachedReading(reading=reading, cached_at=time.time())
        with self._lock.write():
            self._slot = entry
        return entry
