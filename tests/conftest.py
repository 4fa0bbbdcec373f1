"""
Shared pytest fixtures for the order pipeline tests.

Everything runs against the in-memory broker in tests/fakes.py, so no
RabbitMQ is needed.
"""

import uuid

import pytest

from broker.topology import setup_topology
from common.models import Order
from common.timeutils import utc_now
from order_service.publisher import OrderPublisher

from tests.fakes import FakeBroker, FakeChannel, FakeConnection


@pytest.fixture
def broker() -> FakeBroker:
    """Fresh in-memory broker for each test."""
    return FakeBroker()


@pytest.fixture
def channel(broker: FakeBroker) -> FakeChannel:
    return FakeChannel(broker)


@pytest.fixture
def connection(broker: FakeBroker) -> FakeConnection:
    return FakeConnection(broker)


@pytest.fixture
async def topology(channel: FakeChannel):
    """Exchange, three durable queues and their bindings, declared."""
    return await setup_topology(channel)


@pytest.fixture
async def publisher(topology) -> OrderPublisher:
    return OrderPublisher(topology.exchange)


@pytest.fixture
def alice_order() -> Order:
    """Alice buys a laptop for 55."""
    return Order(
        id=uuid.uuid4(),
        item="Laptop",
        price=55,
        shop="Tech Haven",
        buyer="Alice Johnson",
        address="Springfield",
        created_at=utc_now(),
    )
