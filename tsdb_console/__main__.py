"""
Run the management console.

Usage:
    python -m tsdb_console --api-url http://tsdb-host:8080 --port 8050
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import replace

import uvicorn

from tsdb_console import __version__
from tsdb_console.controller.view_state import build_controller
from tsdb_console.core.config import ConsoleConfig, set_config
from tsdb_console.core.logging import configure_logging
from tsdb_console.web.app import create_app


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="TSDB Management Console")
    parser.add_argument("--config", help="Path to a JSON config file")
    parser.add_argument("--host", help="Host to bind to (default: from config, 0.0.0.0)")
    parser.add_argument("--port", type=int, help="Port to run on (default: from config, 8050)")
    parser.add_argument("--api-url", help="Base URL of the database API")
    parser.add_argument("--no-access-log", action="store_true", help="Disable request logging")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> ConsoleConfig:
    """Resolve configuration from file/env, then apply command line overrides."""
    config = ConsoleConfig.from_file(args.config) if args.config else ConsoleConfig.from_env()
    if args.api_url:
        config.api = replace(config.api, base_url=args.api_url)
    if args.host or args.port:
        config.server = replace(
            config.server,
            host=args.host or config.server.host,
            port=args.port or config.server.port,
        )
    return config


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    config = load_config(args)
    set_config(config)
    configure_logging(config.logging.level, verbose=args.verbose, json_format=config.logging.json_format)

    controller = build_controller(config)
    app = create_app(controller, access_log=not args.no_access_log)

    print("\n" + "=" * 60)
    print(f"  TSDB Management Console v{__version__}")
    print("=" * 60)
    print(f"\n  Console URL: http://localhost:{config.server.port}/console/state")
    print(f"  API root:    {config.api.api_root}")
    if config.config_file_path:
        print(f"  Config file: {config.config_file_path}")
    print("\n  Press Ctrl+C to stop\n")

    uvicorn.run(
        app,
        host=config.server.host,
        port=config.server.port,
        log_level="debug" if args.verbose else "warning",
        access_log=False,
    )


if __name__ == "__main__":
    logging.captureWarnings(True)
    main()
