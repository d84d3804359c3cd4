"""Protean Engine runner for the warehousing domain.

Processes events asynchronously in production: the outbox processor
publishes warehouse, adjustment and transfer events, and stream
subscriptions feed the activity log projector and the catalogue product
handler.

Usage:
    python src/server.py
    python src/server.py --test-mode   # drain pending messages, then exit
"""

import argparse
import asyncio

import structlog
from protean.server.engine import Engine

from warehousing.utils.logging import configure_logging

logger = structlog.get_logger(__name__)


async def run(test_mode=False):
    from warehousing.domain import warehousing

    warehousing.init()
    logger.info("Starting warehousing engine", test_mode=test_mode)
    await Engine(warehousing, test_mode=test_mode).run()


def main():
    parser = argparse.ArgumentParser(description="Storefront Warehousing engine runner")
    parser.add_argument(
        "--test-mode",
        action="store_true",
        help="Process pending messages once and exit",
    )
    args = parser.parse_args()

    configure_logging()
    asyncio.run(run(test_mode=args.test_mode))


if __name__ == "__main__":
    main()
