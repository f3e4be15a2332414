"""bitbucket-mcp entry point.

Loads and validates configuration, then serves the Bitbucket tools over MCP.
Usage: bitbucket-mcp [--config config.yaml] [--transport stdio] [--check].
"""

import argparse
import logging
import sys
from pathlib import Path

import yaml
from pydantic import ValidationError

from bitbucket_mcp.adapters import BitbucketAdapter
from bitbucket_mcp.config import LoggingConfig, load_config
from bitbucket_mcp.errors import ConfigError
from bitbucket_mcp.logging import BitbucketMCPLogging
from bitbucket_mcp.operations import BitbucketOperations
from bitbucket_mcp.server import build_server

TRANSPORTS = ("stdio", "sse", "streamable-http")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="bitbucket-mcp",
        description="MCP server exposing Bitbucket pull requests and pipelines",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=Path("config.yaml"),
        help="Path to YAML config file (optional; env vars are enough)",
    )
    parser.add_argument(
        "--transport",
        choices=TRANSPORTS,
        default=None,
        help="MCP transport (defaults to server.transport from config, stdio)",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only load and validate config, then exit",
    )
    return parser.parse_args(argv if argv is not None else sys.argv[1:])


def main(argv: list[str] | None = None) -> int:
    """Entry point: validate config, build adapter and serve."""
    args = parse_args(argv)
    log = logging.getLogger("bitbucket_mcp.main")
    try:
        config = load_config(args.config)
    except (ValidationError, OSError, yaml.YAMLError) as e:
        # config.logging is unavailable; fall back to defaults
        BitbucketMCPLogging(LoggingConfig()).setup()
        log.error("Cannot load configuration: %s", e)
        return 1
    BitbucketMCPLogging(config.logging).setup()

    try:
        config.validate_required()
    except ConfigError as e:
        log.error("Invalid configuration: %s", e)
        return 1

    if args.check:
        print("Config OK:", config.bitbucket.repository_path)
        return 0

    transport = args.transport or config.server.transport
    if transport not in TRANSPORTS:
        log.error("Unknown transport: %s", transport)
        return 1

    adapter = BitbucketAdapter(config.bitbucket)
    server = build_server(BitbucketOperations(adapter, config.bitbucket), name=config.server.name)
    log.info("Serving %s for %s over %s", config.server.name, config.bitbucket.repository_path, transport)
    try:
        server.run(transport=transport)
    except KeyboardInterrupt:
        return 0
    except Exception as e:
        log.exception("Fatal error: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
