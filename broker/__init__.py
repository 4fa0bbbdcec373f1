"""Shared RabbitMQ broker config, connection and topology setup."""

from broker.config import (
    EXCHANGE,
    ORDER_LOG,
    ROUTES,
    SELLER_NOTIFY,
    USER_NOTIFY,
    Route,
)

__all__ = [
    "EXCHANGE",
    "ORDER_LOG",
    "USER_NOTIFY",
    "SELLER_NOTIFY",
    "ROUTES",
    "Route",
]
