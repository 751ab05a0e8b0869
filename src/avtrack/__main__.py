"""Entry point for AVTRACK server."""

import logging

from importlib.metadata import PackageNotFoundError, version

from avtrack.logging_config import setup_logging
from avtrack.server import server

logger = logging.getLogger("avtrack")


def main() -> int:
    """Main entry point for AVTRACK server."""
    setup_logging()

    try:
        logger.info(f"Starting AVTRACK v{version('avtrack')}...")
    except PackageNotFoundError:
        logger.info("Starting AVTRACK (development install)...")

    try:
        logger.info("Starting MCP server...")
        server.run()
        return 0

    except Exception as e:
        logger.error(f"Server failed to start: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    exit(main())
