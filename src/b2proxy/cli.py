"""b2proxy CLI.

Usage:
    python -m b2proxy serve [--host HOST] [--port PORT] [--log-level LEVEL]
    python -m b2proxy config check

Configuration is read from the environment (see b2proxy.config); command
line options override the listen address and log level.

Exit codes:
    0: Success
    1: Configuration error / internal error
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from typing import Any

from b2proxy import __version__
from b2proxy.config import ProxyConfig, load_proxy_config
from b2proxy.errors import ConfigError

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _config_summary(config: ProxyConfig) -> dict[str, Any]:
    """Describe a configuration without exposing the key secret."""
    return {
        "bucket_id": config.bucket_id,
        "bucket_prefixes": sorted(config.bucket_map) if config.bucket_map is not None else None,
        "browser_cache_ttl": config.browser_cache_ttl,
        "cdn_cache_ttl": config.cdn_cache_ttl,
        "credentials_configured": bool(config.key_id and config.key),
        "host": config.host,
        "merge_pdf_versions": config.merge_pdf_versions,
        "port": config.port,
    }


def cmd_serve(args: argparse.Namespace, config: ProxyConfig) -> int:
    """Run the proxy with uvicorn until interrupted."""
    import uvicorn

    from b2proxy.api.main import create_app

    overrides: dict[str, Any] = {}
    if args.host is not None:
        overrides["host"] = args.host
    if args.port is not None:
        overrides["port"] = args.port
    if args.log_level is not None:
        overrides["log_level"] = args.log_level.upper()
    config = replace(config, **overrides)

    logging.basicConfig(level=config.log_level, format=LOG_FORMAT)

    app = create_app(config)
    logger.info("B2 Proxy server listening on %s:%d", config.host, config.port)
    logger.info("Health check available at http://%s:%d/health", config.host, config.port)

    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())
    return 0


def cmd_config_check(args: argparse.Namespace, config: ProxyConfig) -> int:
    """Print the effective configuration as JSON."""
    print(json.dumps(_config_summary(config), indent=2, sort_keys=True))
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="b2proxy",
        description="Read-through proxy for versioned Backblaze B2 objects",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP proxy")
    serve_parser.add_argument("--host", help="Listen address (default: $HOST or 0.0.0.0)")
    serve_parser.add_argument("--port", type=int, help="Listen port (default: $PORT or 3000)")
    serve_parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "debug", "info", "warning", "error"],
        help="Log level (default: $B2PROXY_LOG_LEVEL or INFO)",
    )

    config_parser = subparsers.add_parser("config", help="Configuration commands")
    config_subparsers = config_parser.add_subparsers(dest="config_command")
    config_subparsers.add_parser("check", help="Validate and print the configuration")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Exit codes:
        0: Success
        1: Configuration error
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        config = load_proxy_config()
    except ConfigError as e:
        print(f"Configuration error: {e.message}", file=sys.stderr)
        return 1

    if args.command == "serve":
        try:
            return cmd_serve(args, config)
        except ConfigError as e:
            print(f"Configuration error: {e.message}", file=sys.stderr)
            return 1

    if args.command == "config":
        if getattr(args, "config_command", None) == "check":
            return cmd_config_check(args, config)
        parser.parse_args(["config", "--help"])
        return 0

    return 0


if __name__ == "__main__":
    sys.exit(main())
