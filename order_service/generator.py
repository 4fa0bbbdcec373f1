"""
Order source: simulates buyers placing orders at a fixed rate.

Orders are sent on an asyncio.Queue. The queue is bounded (one slot by
default), so nobody draining it stalls generation. stop() is observed both
while waiting on the send and during the pause between orders.
"""

from __future__ import annotations

import asyncio
import logging
import random
import uuid
from collections.abc import Callable

from common.ids import new_order_id
from common.models import Order
from common.timeutils import utc_now

logger = logging.getLogger(__name__)

ITEMS = (
    "Laptop", "Pillow", "Headphones", "CoffeeMug", "Backpack",
    "Notebook", "Smartphone", "DeskLamp", "WaterBottle", "MousePad",
)
SHOPS = (
    "Tech Haven", "Cozy Corner", "Gadget Galaxy", "Elegant Emporium", "Urban Outfitters",
    "The Book Nook", "Fashion Forward", "Gourmet Delights", "Trendy Treasures", "Chic Boutique",
)
BUYERS = (
    "Alice Johnson", "Bob Smith", "Carol Davis", "David Wilson", "Emma Brown",
    "Frank Harris", "Grace Lee", "Henry Martin", "Ivy Clark", "Jack Turner",
)
ADDRESSES = (
    "Springfield", "Shelbyville", "Capital City", "Rivertown", "Lakewood",
    "Metropolis", "Gotham", "Star City", "Central City", "Sunnydale",
)
MIN_PRICE = 20
MAX_PRICE = 119


class OrderSource:
    """Generates `rate` orders per second until stop() is called."""

    def __init__(
        self,
        rate: float,
        *,
        rng: random.Random | None = None,
        seed: int | None = None,
        id_factory: Callable[[], uuid.UUID] = uuid.uuid4,
        maxsize: int = 1,
    ) -> None:
        if rate <= 0:
            raise ValueError(f"rate must be positive, got {rate!r}")
        self.rate = rate
        self.interval = 1.0 / rate
        self._rng = rng or random.Random(seed)
        self._id_factory = id_factory
        self.orders: asyncio.Queue[Order] = asyncio.Queue(maxsize=maxsize)
        self.emitted = 0
        self._stopping = asyncio.Event()
        self._closed = asyncio.Event()
        self._task: asyncio.Task[None] | None = None
        self._running = False

    def new_order(self) -> Order:
        rng = self._rng
        return Order(
            id=new_order_id(self._id_factory),
            item=rng.choice(ITEMS),
            price=rng.randint(MIN_PRICE, MAX_PRICE),
            shop=rng.choice(SHOPS),
            buyer=rng.choice(BUYERS),
            address=rng.choice(ADDRESSES),
            created_at=utc_now(),
        )

    def start(self) -> asyncio.Task[None]:
        """Schedule run() on the running loop. Calling it again returns the same task."""
        if self._task is None:
            self._task = asyncio.create_task(self.run(), name="order-source")
        return self._task

    def stop(self) -> None:
        self._stopping.set()
        if not self._running:
            # Never started: nothing to wait for
            self._closed.set()

    @property
    def stopping(self) -> bool:
        return self._stopping.is_set()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    async def wait_closed(self) -> None:
        """Wait until the generation loop has returned."""
        await self._closed.wait()

    async def run(self) -> None:
        self._running = True
        try:
            while not self._stopping.is_set():
                order = self.new_order()
                if not await self._send(order):
                    break
                self.emitted += 1
                logger.info("New order has been created\n%s", order)
                if await self._pause():
                    break
        finally:
            self._closed.set()
            logger.info("Order source stopped after %d orders", self.emitted)

    async def _send(self, order: Order) -> bool:
        """Put `order` on the queue unless stop() wins the race. True if sent."""
        put = asyncio.ensure_future(self.orders.put(order))
        stopped = asyncio.ensure_future(self._stopping.wait())
        try:
            await asyncio.wait({put, stopped}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            put.cancel()
            raise
        finally:
            stopped.cancel()
        if put.done() and not put.cancelled():
            return True
        put.cancel()
        return False

    async def _pause(self) -> bool:
        """Sleep one interval. True if stop() was called meanwhile."""
        try:
            await asyncio.wait_for(self._stopping.wait(), timeout=self.interval)
        except asyncio.TimeoutError:
            return False
        return True
