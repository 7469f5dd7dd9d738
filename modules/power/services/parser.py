"""Parsers for the single-line outputs of ``vcgencmd``.

Each function handles exactly one micro-format and raises ``ParseError``
when the line does not match it.
"""
from __future__ import annotations
import re
from decimal import Decimal, ROUND_HALF_UP
from typing import NamedTuple

_DECIMAL = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)")
_INTEGER = re.compile(r"\d+")
_HEX = re.compile(r"[0-9a-fA-F]+")

_U64_MAX = (1 << 64) - 1

# current-state bits; the "has occurred" bits (16..19) are not decoded
UNDERVOLTAGE_BIT = 1 << 0
FREQ_CAPPED_BIT = 1 << 1
THROTTLED_BIT = 1 << 2


class ParseError(ValueError):
    def __init__(self, measurement: str, raw: str, reason: str) -> None:
        super().__init__(f"parse {measurement}: {reason}; raw={raw!r}")
        self.measurement = measurement
        self.raw = raw
        self.reason = reason


class ThrottleState(NamedTuple):
    hex: str
    undervoltage: bool
    freq_capped: bool
    throttled: bool


def _strip_markers(measurement: str, raw: str, prefix: str, suffix: str) -> str:
    line = raw.strip()
    if not line.startswith(prefix):
        raise ParseError(measurement, raw, f"missing prefix {prefix!r}")
    if not line.endswith(suffix) or len(line) < len(prefix) + len(suffix):
        raise ParseError(measurement, raw, f"missing suffix {suffix!r}")
    return line[len(prefix):len(line) - len(suffix)]


def _decimal(measurement: str, raw: str, body: str) -> float:
    if not _DECIMAL.fullmatch(body):
        raise ParseError(measurement, raw, f"not a decimal number: {body!r}")
    return float(body)


def parse_temperature(raw: str) -> float:
    # expected "temp=53.2'C"
    body = _strip_markers("temperature", raw, "temp=", "'C")
    return _decimal("temperature", raw, body)


def parse_voltage(raw: str) -> float:
    # expected "volt=0.8625V"
    body = _strip_markers("voltage", raw, "volt=", "V")
    return _decimal("voltage", raw, body)


def parse_clock(raw: str) -> float:
    """``frequency(48)=1500398464`` -> ``1500.4`` (MHz, one decimal, half away from zero)."""
    parts = raw.strip().split("=")
    if len(parts) != 2:
        raise ParseError("clock", raw, "expected exactly one '='")
    hz = parts[1].strip()
    if not _INTEGER.fullmatch(hz):
        raise ParseError("clock", raw, f"not an integer: {hz!r}")
    mhz = Decimal(hz) / Decimal(1_000_000)
    return float(mhz.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def parse_throttle_bits(raw: str) -> ThrottleState:
    # e.g. "throttled=0x0" or "throttled=0x50005"
    hex_str = raw.strip()
    if hex_str.startswith("throttled="):
        hex_str = hex_str[len("throttled="):]
    digits = hex_str[2:] if hex_str.startswith("0x") else hex_str
    if not _HEX.fullmatch(digits):
        raise ParseError("throttle", raw, f"not a hex integer: {hex_str!r}")
    val = int(digits, 16)
    if val > _U64_MAX:
        raise ParseError("throttle", raw, "value out of 64-bit range")
    return ThrottleState(
        hex=hex_str,
        undervoltage=bool(val & UNDERVOLTAGE_BIT),
        freq_capped=bool(val & FREQ_CAPPED_BIT),
        throttled=bool(val & THROTTLED_BIT),
    )
