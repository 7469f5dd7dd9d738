"""
power-agent launcher
- central logging
- gateway app (power module + optional consumers)
- uvicorn
"""
from __future__ import annotations

import argparse
import os
import sys
from typing import Any, Dict, List, Optional, Tuple

import uvicorn

# Put the project root on sys.path when the script runs directly
ROOT = os.path.dirname(os.path.abspath(__file__))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)


def parse_listen(value: str) -> Tuple[str, int]:
    """``":8085"`` -> ("0.0.0.0", 8085); ``"127.0.0.1:9000"`` -> ("127.0.0.1", 9000)."""
    host, sep, port = value.rpartition(":")
    if not sep:
        raise argparse.ArgumentTypeError(f"listen address needs a port: {value!r}")
    try:
        return host or "0.0.0.0", int(port)
    except ValueError:
        raise argparse.ArgumentTypeError(f"bad port in {value!r}") from None


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Raspberry Pi power telemetry agent")
    p.add_argument("--listen", type=parse_listen, default=None, help="HTTP listen address, e.g. :8085")
    p.add_argument("--poll-interval", default=None, help="vcgencmd poll interval, e.g. 5s")
    p.add_argument("--poll-timeout", default=None, help="shared timeout per poll cycle, e.g. 800ms")
    p.add_argument("--debug", action="store_true", help="enable verbose debug logging")
    return p


def overrides_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    from modules.power.config_loader import parse_duration

    power: Dict[str, Any] = {}
    out: Dict[str, Any] = {}
    if args.listen:
        host, port = args.listen
        out["server"] = {"host": host, "port": port}
    try:
        if args.poll_interval:
            power.setdefault("poll", {})["interval_s"] = parse_duration(args.poll_interval)
        if args.poll_timeout:
            power.setdefault("poll", {})["timeout_ms"] = int(round(parse_duration(args.poll_timeout) * 1000))
    except ValueError as exc:
        raise SystemExit(f"invalid duration: {exc}")
    if args.debug:
        power["debug"] = True
    if power:
        out["power"] = power
    return out


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    # Start logging before anything else logs
    from modules.logwrapper import init_logging
    init_logging({"debug": True} if args.debug else None)

    from modules.gateway.xGatewayService import create_app
    from modules.gateway.config_loader import load_config

    overrides = overrides_from_args(args)
    cfg = load_config(overrides=overrides)
    app = create_app(overrides=overrides)

    host = str(cfg["server"]["host"])
    port = int(cfg["server"]["port"])
    uvicorn.run(app, host=host, port=port, log_config=None)


if __name__ == "__main__":
    main()
