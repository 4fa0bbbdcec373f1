"""Tests for the fan-out publisher."""

import json

import pytest

from broker.config import EXCHANGE, ORDER_LOG, SELLER_NOTIFY, USER_NOTIFY
from common.models import Order
from order_service.publisher import OrderPublisher, PublishError

from tests.fakes import FailingExchange


def bodies(broker, route) -> list[dict]:
    state = broker.queues[route.queue]
    return [json.loads(message.body) for _, message in state.messages]


class TestFanOut:
    async def test_three_projections_routed_to_three_queues(self, broker, publisher, alice_order):
        results = await publisher.fan_out(alice_order)

        assert results == {
            ORDER_LOG.routing_key: True,
            USER_NOTIFY.routing_key: True,
            SELLER_NOTIFY.routing_key: True,
        }
        assert [key for key, _ in broker.published] == [
            ORDER_LOG.routing_key,
            USER_NOTIFY.routing_key,
            SELLER_NOTIFY.routing_key,
        ]
        for route in (ORDER_LOG, USER_NOTIFY, SELLER_NOTIFY):
            assert len(broker.queues[route.queue].messages) == 1

    async def test_alice_laptop_payloads(self, broker, publisher, alice_order):
        await publisher.fan_out(alice_order)

        (log,) = bodies(broker, ORDER_LOG)
        (buyer,) = bodies(broker, USER_NOTIFY)
        (seller,) = bodies(broker, SELLER_NOTIFY)
        order_id = str(alice_order.id)

        assert log["order_id"] == buyer["order_id"] == seller["order_id"] == order_id
        assert log["buyer"] == "Alice Johnson"
        assert log["price"] == 55
        assert "created_at" in log
        assert buyer == {"order_id": order_id, "item": "Laptop"}
        assert seller == {"order_id": order_id, "buyer": "Alice Johnson", "address": "Springfield"}

    async def test_messages_are_json(self, broker, publisher, alice_order):
        await publisher.publish_buyer_notice(alice_order)
        _, message = broker.queues[USER_NOTIFY.queue].messages[0]
        assert message.content_type == "application/json"

    async def test_each_order_fans_out_independently(self, broker, publisher, alice_order):
        other = alice_order.model_copy(update={"buyer": "Bob Smith"})
        await publisher.fan_out(alice_order)
        await publisher.fan_out(other)
        assert len(broker.published) == 6
        assert [entry["buyer"] for entry in bodies(broker, ORDER_LOG)] == ["Alice Johnson", "Bob Smith"]


class TestFailures:
    async def test_transport_failure_does_not_block_other_projections(self, broker, topology, alice_order, caplog):
        exchange = FailingExchange(broker, EXCHANGE, failing_keys={USER_NOTIFY.routing_key})
        publisher = OrderPublisher(exchange)

        with caplog.at_level("WARNING"):
            results = await publisher.fan_out(alice_order)

        assert exchange.attempts == [ORDER_LOG.routing_key, USER_NOTIFY.routing_key, SELLER_NOTIFY.routing_key]
        assert results[USER_NOTIFY.routing_key] is False
        assert results[ORDER_LOG.routing_key] is True
        assert results[SELLER_NOTIFY.routing_key] is True
        assert len(broker.queues[USER_NOTIFY.queue].messages) == 0
        assert len(broker.queues[SELLER_NOTIFY.queue].messages) == 1
        assert "notify.users" in caplog.text

    async def test_single_publish_raises_publish_error(self, broker, topology, alice_order):
        exchange = FailingExchange(broker, EXCHANGE, failing_keys={ORDER_LOG.routing_key})
        publisher = OrderPublisher(exchange)

        with pytest.raises(PublishError) as exc_info:
            await publisher.publish_log(alice_order)
        assert exc_info.value.routing_key == ORDER_LOG.routing_key
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    async def test_unroutable_publish_is_reported(self, broker, channel, alice_order):
        exchange = await channel.declare_exchange(EXCHANGE, durable=True)
        publisher = OrderPublisher(exchange)

        results = await publisher.fan_out(alice_order)
        assert results == {key: False for key in results}
        assert len(results) == 3

    async def test_serialization_failure_publishes_empty_payload(self, broker, publisher, alice_order, caplog):
        broken = Order.model_construct(**{**alice_order.model_dump(), "price": object()})

        with caplog.at_level("WARNING"):
            results = await publisher.fan_out(broken)

        assert all(results.values())
        _, log_message = broker.queues[ORDER_LOG.queue].messages[0]
        assert log_message.body == b""
        assert "Failed to serialize LogEntry" in caplog.text
        (buyer,) = bodies(broker, USER_NOTIFY)
        assert buyer["item"] == "Laptop"
        (seller,) = bodies(broker, SELLER_NOTIFY)
        assert seller["order_id"] == str(alice_order.id)
