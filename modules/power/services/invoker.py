from __future__ import annotations
import logging
import shutil
import subprocess
from typing import Callable, NamedTuple, Optional, Sequence, Tuple, Union

logger = logging.getLogger("power.invoker")


class QueryResult(NamedTuple):
    text: str
    ok: bool
    error: Optional[str] = None


# (args, timeout_s) -> (text, ok) or QueryResult
Invoke = Callable[[Sequence[str], float], Union[QueryResult, Tuple[str, bool]]]


def _decode(out: Union[str, bytes, None]) -> str:
    if out is None:
        return ""
    if isinstance(out, bytes):
        out = out.decode("utf-8", errors="replace")
    return out.strip()


class CommandInvoker:
    """Runs ``<command> <args...>`` and returns combined stdout/stderr.

    The child is killed when ``timeout`` expires; whatever it printed before
    that is kept in ``text``.
    """

    def __init__(self, command: str = "vcgencmd") -> None:
        self.command = command

    def available(self) -> bool:
        return shutil.which(self.command) is not None

    def __call__(self, args: Sequence[str], timeout: float) -> QueryResult:
        argv = [self.command, *args]
        cmdline = " ".join(argv)
        logger.debug("exec: %s", cmdline)
        if timeout <= 0:
            return self._failed(cmdline, "deadline already expired", "")
        try:
            proc = subprocess.run(
                argv,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            return self._failed(cmdline, f"timed out after {timeout:.3f}s", _decode(exc.output))
        except OSError as exc:
            return self._failed(cmdline, str(exc), "")
        text = _decode(proc.stdout)
        if proc.returncode != 0:
            return self._failed(cmdline, f"exit status {proc.returncode}", text)
        logger.debug("exec ok: %s -> %r", cmdline, text)
        return QueryResult(text, True)

    @staticmethod
    def _failed(cmdline: str, reason: str, text: str) -> QueryResult:
        # include combined output in the error
        err = f"exec failed: {cmdline}: {reason}; output: {text!r}"
        logger.warning(err)
        return QueryResult(text, False, err)
