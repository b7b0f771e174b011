"""Command line entry point: ``python -m fleetsim``."""

from __future__ import annotations

import argparse
import logging
from typing import Any

from aiohttp import web

from fleetsim.api import create_app
from fleetsim.config import FleetConfig


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="fleetsim",
        description="Serve a simulated car fleet over HTTP.",
    )
    parser.add_argument("--host", help="Interface to bind (env FLEET_HOST)")
    parser.add_argument("--port", type=int, help="Port to listen on (env FLEET_PORT)")
    parser.add_argument("--target", type=int, dest="target_car_count", help="Fleet size to maintain")
    parser.add_argument("--interval", type=float, dest="update_interval", help="Seconds between position updates")
    parser.add_argument("--seed-url", dest="seed_url", help="Mock API collection URL to mirror the fleet to")
    parser.add_argument("--log-level", dest="log_level", help="Logging level (DEBUG, INFO, ...)")
    parser.add_argument(
        "--no-scheduler",
        dest="scheduler_enabled",
        action="store_false",
        default=None,
        help="Do not move cars periodically",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    overrides: dict[str, Any] = {key: value for key, value in vars(args).items() if value is not None}
    config = FleetConfig.from_env(**overrides)

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    web.run_app(create_app(config), host=config.host, port=config.port)


if __name__ == "__main__":
    main()
