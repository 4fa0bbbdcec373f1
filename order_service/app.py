"""
OrderService: generates orders and fans each one out to the order log, user
notify and seller notify queues. Stops cleanly on SIGINT/SIGTERM.
"""

import asyncio
import logging
import signal

from common import setup_logging

from broker.config import EXCHANGE, GENERATE_RATE, RABBIT_URL
from broker.connection import connect
from broker.topology import setup_topology
from order_service.dispatcher import dispatch_orders
from order_service.generator import OrderSource
from order_service.publisher import OrderPublisher

logger = logging.getLogger(__name__)


async def main() -> None:
    # Setup errors propagate: never generate against an unready topology
    connection = await connect(RABBIT_URL)
    async with connection:
        channel = await connection.channel()
        topology = await setup_topology(channel, EXCHANGE)
        publisher = OrderPublisher(topology.exchange)

        stop_event = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, stop_event.set)

        source = OrderSource(GENERATE_RATE)
        source.start()
        logger.info("OrderService generating %s orders/s on %s", GENERATE_RATE, EXCHANGE)
        await dispatch_orders(source, publisher, stop_event)


def run() -> None:
    setup_logging("order-service")
    asyncio.run(main())


if __name__ == "__main__":
    run()
