from __future__ import annotations

import logging
from collections import deque
from typing import Deque, List


class InMemoryLogHandler(logging.Handler):
    """Ring buffer of formatted log lines, served by GET /logs/.

    logging.Handler already serializes emit() with its own lock.
    """

    def __init__(self, maxlen: int = 500, level: int = logging.NOTSET) -> None:
        super().__init__(level=level)
        self.buffer: Deque[str] = deque(maxlen=maxlen)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
        except Exception:  # pragma: no cover
            msg = record.getMessage()
        self.buffer.append(msg)

    def tail(self, n: int = 100) -> List[str]:
        if n <= 0:
            return []
        items = list(self.buffer)
        return items[-n:]


def build_formatter(json_format: bool) -> logging.Formatter:
    if json_format:
        fmt = (
            '{"time":"%(asctime)s","level":"%(levelname)s","name":"%(name)s"'
            ',"msg":"%(message)s","thread":"%(threadName)s"}'
        )
        return logging.Formatter(fmt=fmt, datefmt="%Y-%m-%dT%H:%M:%S")
    fmt = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    return logging.Formatter(fmt=fmt, datefmt="%H:%M:%S")
