"""
Order consumers: each worker listens on all three order queues at once.

Every subscribed queue feeds the same inbox (one broker consumer per queue,
one asyncio.Queue per worker). The worker takes deliveries off the inbox in
arrival order, so no queue is favoured and an idle queue never holds up the
others. Each delivery is settled through `message.process()`: acked after the
handler returns, rejected without requeue when it cannot be decoded or handled.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Iterable

import aio_pika
from pydantic import ValidationError

from broker.config import CONSUMER_COUNT, EXCHANGE, PREFETCH_COUNT
from broker.topology import setup_topology
from notification_service.handlers import DEFAULT_SUBSCRIPTIONS, Subscription

logger = logging.getLogger(__name__)


class OrderConsumer:
    def __init__(
        self,
        worker_id: int,
        channel: aio_pika.abc.AbstractChannel,
        subscriptions: Iterable[Subscription] = DEFAULT_SUBSCRIPTIONS,
    ) -> None:
        self.worker_id = worker_id
        self.channel = channel
        self.subscriptions = tuple(subscriptions)
        self.processed = 0
        self.skipped = 0
        self._inbox: asyncio.Queue[tuple[Subscription, aio_pika.abc.AbstractIncomingMessage]] = asyncio.Queue()
        self._consumers: list[tuple[aio_pika.abc.AbstractQueue, str]] = []

    async def subscribe(self) -> None:
        """Start a manual-ack consumer on every subscribed queue (which must already exist)."""
        for sub in self.subscriptions:
            queue = await self.channel.get_queue(sub.queue)
            tag = await queue.consume(functools.partial(self._enqueue, sub), no_ack=False)
            self._consumers.append((queue, tag))
        logger.info(
            "Consumer %d consuming %s",
            self.worker_id,
            ", ".join(sub.queue for sub in self.subscriptions),
        )

    async def _enqueue(self, sub: Subscription, message: aio_pika.abc.AbstractIncomingMessage) -> None:
        await self._inbox.put((sub, message))

    async def run(self) -> None:
        """Dispatch deliveries forever; cancel the task to stop."""
        while True:
            sub, message = await self._inbox.get()
            try:
                await self.dispatch(sub, message)
            except Exception:
                logger.exception("Consumer %d dropped a delivery from %s", self.worker_id, sub.queue)

    async def dispatch(self, sub: Subscription, message: aio_pika.abc.AbstractIncomingMessage) -> bool:
        try:
            async with message.process(requeue=False, ignore_processed=True):
                try:
                    payload = sub.model.model_validate_json(message.body)
                except ValidationError as e:
                    logger.warning(
                        "Consumer %d failed to deserialize %s from %s: %s",
                        self.worker_id,
                        sub.model.__name__,
                        sub.queue,
                        e.errors()[0]["msg"],
                    )
                    await message.reject(requeue=False)
                    self.skipped += 1
                    return False
                sub.handler(self.worker_id, payload)
        except Exception:
            # Handler errors and failed ack/reject alike; the loop keeps going
            logger.exception("Consumer %d failed to handle delivery from %s", self.worker_id, sub.queue)
            self.skipped += 1
            return False

        self.processed += 1
        return True

    async def close(self) -> None:
        """Cancel the broker consumers. Deliveries already in the inbox are left undispatched."""
        for queue, tag in self._consumers:
            await queue.cancel(tag)
        self._consumers.clear()


async def start_workers(
    connection: aio_pika.abc.AbstractConnection,
    count: int = CONSUMER_COUNT,
    *,
    exchange_name: str = EXCHANGE,
    prefetch_count: int = PREFETCH_COUNT,
    subscriptions: Iterable[Subscription] = DEFAULT_SUBSCRIPTIONS,
) -> list[OrderConsumer]:
    """Open one channel per worker, ensure topology, subscribe. Errors here are fatal."""
    if count < 1:
        raise ValueError(f"consumer count must be at least 1, got {count!r}")
    subscriptions = tuple(subscriptions)
    workers = []
    for worker_id in range(1, count + 1):
        channel = await connection.channel()
        await channel.set_qos(prefetch_count=prefetch_count)
        await setup_topology(channel, exchange_name)
        worker = OrderConsumer(worker_id, channel, subscriptions)
        await worker.subscribe()
        workers.append(worker)
    return workers
