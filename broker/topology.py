"""Declare the order exchange, queues and bindings."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

import aio_pika
from aio_pika import ExchangeType
from aio_pika.exceptions import AMQPError, ChannelInvalidStateError
from pydantic import BaseModel, ConfigDict

from broker.config import EXCHANGE, ROUTES, Route

logger = logging.getLogger(__name__)

_BROKER_ERRORS = (AMQPError, ChannelInvalidStateError, asyncio.TimeoutError)


class TopologyError(Exception):
    """The broker refused an exchange/queue declaration or a binding."""


class QueueConfig(BaseModel):
    """
    Queue declaration toggles. Everything defaults to off; pass only what differs:

    >>> QueueConfig(durable=True)
    QueueConfig(durable=True, auto_delete=False, exclusive=False, no_wait=False)
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    durable: bool = False
    auto_delete: bool = False
    exclusive: bool = False
    no_wait: bool = False

    def with_overrides(self, **toggles: bool) -> QueueConfig:
        """Return a copy with the given toggles replaced (unknown names are rejected)."""
        return self.model_validate({**self.model_dump(), **toggles})


class TopologyConfigurator:
    """
    Declares topology on one channel. Every call is idempotent on the broker
    side; a declaration that conflicts with an existing entity raises
    TopologyError instead of overwriting it.
    """

    def __init__(self, channel: aio_pika.abc.AbstractChannel, exchange_name: str = EXCHANGE) -> None:
        self.channel = channel
        self.exchange_name = exchange_name
        self.exchange: aio_pika.abc.AbstractExchange | None = None
        self.queues: dict[str, aio_pika.abc.AbstractQueue] = {}

    async def declare_exchange(
        self,
        name: str | None = None,
        kind: ExchangeType | str = ExchangeType.DIRECT,
        durable: bool = True,
    ) -> aio_pika.abc.AbstractExchange:
        name = name or self.exchange_name
        try:
            exchange = await self.channel.declare_exchange(name, kind, durable=durable)
        except _BROKER_ERRORS as e:
            raise TopologyError(f"Failed to declare exchange {name!r}: {e!r}") from e
        if name == self.exchange_name:
            self.exchange = exchange
        return exchange

    async def declare_queue(
        self,
        name: str,
        config: QueueConfig | None = None,
    ) -> aio_pika.abc.AbstractQueue | None:
        """
        Declare a queue with `config` (all toggles off by default).

        With no_wait the broker sends no confirmation, so the declaration
        goes through the underlying AMQP channel and None is returned.
        """
        config = config or QueueConfig()
        try:
            if config.no_wait:
                underlay = await self.channel.get_underlay_channel()
                await underlay.queue_declare(
                    queue=name,
                    durable=config.durable,
                    exclusive=config.exclusive,
                    auto_delete=config.auto_delete,
                    nowait=True,
                )
                return None
            queue = await self.channel.declare_queue(
                name,
                durable=config.durable,
                exclusive=config.exclusive,
                auto_delete=config.auto_delete,
            )
        except _BROKER_ERRORS as e:
            raise TopologyError(f"Failed to declare queue {name!r}: {e!r}") from e
        self.queues[name] = queue
        return queue

    async def bind_queue(self, queue_name: str, routing_key: str, exchange_name: str | None = None) -> None:
        exchange_name = exchange_name or self.exchange_name
        try:
            queue = self.queues.get(queue_name)
            if queue is None:
                # Declared elsewhere (or with no_wait): look it up passively
                queue = await self.channel.get_queue(queue_name)
                self.queues[queue_name] = queue
            await queue.bind(exchange_name, routing_key=routing_key)
        except _BROKER_ERRORS as e:
            raise TopologyError(
                f"Failed to bind queue {queue_name!r} to {exchange_name!r} with key {routing_key!r}: {e!r}"
            ) from e


async def setup_topology(
    channel: aio_pika.abc.AbstractChannel,
    exchange_name: str = EXCHANGE,
    routes: Iterable[Route] = ROUTES,
    queue_config: QueueConfig | None = None,
) -> TopologyConfigurator:
    """Declare exchange, then every queue, then every binding. Returns the configurator."""
    queue_config = queue_config or QueueConfig(durable=True)
    routes = tuple(routes)
    topology = TopologyConfigurator(channel, exchange_name)
    await topology.declare_exchange()
    for route in routes:
        await topology.declare_queue(route.queue, queue_config)
    for route in routes:
        await topology.bind_queue(route.queue, route.routing_key)
    logger.info("Broker topology declared on exchange %s (%d queues)", exchange_name, len(routes))
    return topology
