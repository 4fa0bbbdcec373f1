"""Connect to RabbitMQ, retrying while the broker is still starting."""

import asyncio
import logging

import aio_pika

from broker.config import CONNECT_ATTEMPTS, CONNECT_DELAY, RABBIT_URL

logger = logging.getLogger(__name__)


async def connect(
    url: str = RABBIT_URL,
    attempts: int = CONNECT_ATTEMPTS,
    delay: float = CONNECT_DELAY,
) -> aio_pika.abc.AbstractRobustConnection:
    """Open a robust connection. Raises RuntimeError after `attempts` failures."""
    for attempt in range(attempts):
        try:
            return await aio_pika.connect_robust(url)
        except Exception as e:
            logger.warning("RabbitMQ connect attempt %s failed: %s", attempt + 1, e)
            await asyncio.sleep(delay)
    raise RuntimeError("Could not connect to RabbitMQ")
