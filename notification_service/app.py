"""
NotificationService: a pool of workers consuming the order log, user notify
and seller notify queues and rendering each payload.
"""

import asyncio
import logging

from common import setup_logging

from broker.config import CONSUMER_COUNT, RABBIT_URL
from broker.connection import connect
from notification_service.worker import start_workers

logger = logging.getLogger(__name__)


async def main() -> None:
    connection = await connect(RABBIT_URL)
    async with connection:
        workers = await start_workers(connection, CONSUMER_COUNT)
        logger.info("NotificationService running %d consumers", len(workers))
        await asyncio.gather(*(worker.run() for worker in workers))


def run() -> None:
    setup_logging("notification-service")
    asyncio.run(main())


if __name__ == "__main__":
    run()
