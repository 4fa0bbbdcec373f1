"""
Dispatch loop: take orders from the source and fan each one out, until stopped.

Shutdown: the moment `stop_event` is set the source is told to stop. A fan-out
already in progress runs to completion, then orders keep being drained and
published until the source confirms it has returned, so a source blocked on a
full queue can always finish. Every order the source emitted is fanned out
before dispatch_orders returns.
"""

from __future__ import annotations

import asyncio
import logging

from common.models import Order
from order_service.generator import OrderSource
from order_service.publisher import OrderPublisher

logger = logging.getLogger(__name__)


async def _stop_source_on(stop_event: asyncio.Event, source: OrderSource) -> None:
    await stop_event.wait()
    logger.info("Publisher is shutting down")
    source.stop()


async def _next_order(source: OrderSource, until: asyncio.Future) -> Order | None:
    """The next queued order, or None once `until` completes first."""
    getter = asyncio.ensure_future(source.orders.get())
    try:
        await asyncio.wait({getter, until}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        # A getter left behind would swallow the next order
        getter.cancel()
    if getter.done() and not getter.cancelled():
        return getter.result()
    return None


async def dispatch_orders(source: OrderSource, publisher: OrderPublisher, stop_event: asyncio.Event) -> int:
    """Run until `stop_event` is set and the source has drained. Returns orders dispatched."""
    dispatched = 0
    stopper = asyncio.ensure_future(_stop_source_on(stop_event, source))
    try:
        while not stopper.done():
            order = await _next_order(source, stopper)
            if order is not None:
                await publisher.fan_out(order)
                dispatched += 1
        dispatched += await _drain(source, publisher)
    finally:
        stopper.cancel()

    logger.info("Shutdown complete, %d orders dispatched", dispatched)
    return dispatched


async def _drain(source: OrderSource, publisher: OrderPublisher) -> int:
    drained = 0
    closed = asyncio.ensure_future(source.wait_closed())
    try:
        while not closed.done():
            order = await _next_order(source, closed)
            if order is not None:
                await publisher.fan_out(order)
                drained += 1
    finally:
        closed.cancel()
    while not source.orders.empty():
        await publisher.fan_out(source.orders.get_nowait())
        drained += 1
    return drained
