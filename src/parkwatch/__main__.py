"""Run the parkwatch service: ``python -m parkwatch``."""

from __future__ import annotations

import argparse
import logging
import sys

from aiohttp import web

from parkwatch.config import ParkwatchConfig
from parkwatch.exceptions import ParkwatchConfigError
from parkwatch.server import create_app

_LOG = logging.getLogger("parkwatch")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="parkwatch", description="Parking lot state and broadcast service")
    parser.add_argument("--host", help="Bind address (default: PARKWATCH_HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, help="HTTP port (default: PORT or 3000)")
    parser.add_argument("--slots", type=int, dest="total_slots", help="Lot capacity")
    parser.add_argument(
        "--availability-policy",
        choices=("occupancy", "sensor"),
        help="Which source owns the available count",
    )
    parser.add_argument("--mqtt", action="store_true", default=None, dest="mqtt_enabled", help="Enable the MQTT bridge")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    overrides = {
        key: value
        for key, value in {
            "host": args.host,
            "port": args.port,
            "total_slots": args.total_slots,
            "availability_policy": args.availability_policy,
            "mqtt_enabled": args.mqtt_enabled,
        }.items()
        if value is not None
    }
    try:
        config = ParkwatchConfig.from_env(**overrides)
    except ParkwatchConfigError as exc:
        _LOG.error("Invalid configuration: %s", exc)
        return 2

    _LOG.info("Smart parking server on %s:%s (%d slots)", config.host, config.port, config.total_slots)
    _LOG.info("Health check: http://localhost:%s/health", config.port)
    _LOG.info("API endpoint: http://localhost:%s/update", config.port)
    web.run_app(create_app(config), host=config.host, port=config.port, print=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
