"""
Fan-out publisher: one Order in, three projections out.

Each projection is serialized and published on its own routing key. The three
publishes are independent: a failure in one never prevents the others.
"""

from __future__ import annotations

import logging

import aio_pika
from pydantic import BaseModel

from broker.config import ORDER_LOG, SELLER_NOTIFY, USER_NOTIFY
from common.models import BuyerNotice, LogEntry, Order, SellerNotice

logger = logging.getLogger(__name__)

CONTENT_TYPE = "application/json"


class PublishError(Exception):
    """The transport failed to publish one message."""

    def __init__(self, routing_key: str, reason: str) -> None:
        super().__init__(f"Failed to publish to {routing_key!r}: {reason}")
        self.routing_key = routing_key


def serialize(projection_cls: type[BaseModel], order: Order) -> bytes:
    """Build and encode one projection. Returns b"" (and logs) if that fails."""
    try:
        return projection_cls.from_order(order).model_dump_json().encode()
    except ValueError as e:
        logger.warning("Failed to serialize %s for order %s: %s", projection_cls.__name__, order.id, e)
        return b""


class OrderPublisher:
    """Publishes order projections to the order exchange (declared by the caller)."""

    def __init__(self, exchange: aio_pika.abc.AbstractExchange) -> None:
        self.exchange = exchange

    async def _publish(self, routing_key: str, body: bytes) -> None:
        try:
            await self.exchange.publish(
                aio_pika.Message(body=body, content_type=CONTENT_TYPE),
                routing_key=routing_key,
            )
        except Exception as e:
            raise PublishError(routing_key, repr(e)) from e

    async def publish_log(self, order: Order) -> None:
        await self._publish(ORDER_LOG.routing_key, serialize(LogEntry, order))

    async def publish_buyer_notice(self, order: Order) -> None:
        await self._publish(USER_NOTIFY.routing_key, serialize(BuyerNotice, order))

    async def publish_seller_notice(self, order: Order) -> None:
        await self._publish(SELLER_NOTIFY.routing_key, serialize(SellerNotice, order))

    async def fan_out(self, order: Order) -> dict[str, bool]:
        """
        Attempt all three publishes for `order`, in a fixed order.

        Failures are logged and not retried. Returns routing key -> success.
        """
        results: dict[str, bool] = {}
        for routing_key, publish in (
            (ORDER_LOG.routing_key, self.publish_log),
            (USER_NOTIFY.routing_key, self.publish_buyer_notice),
            (SELLER_NOTIFY.routing_key, self.publish_seller_notice),
        ):
            try:
                await publish(order)
            except PublishError as e:
                logger.warning("Order %s: %s", order.id, e)
                results[routing_key] = False
            else:
                results[routing_key] = True
        return results
