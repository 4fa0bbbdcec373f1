"""
Shared common module for the order producer and the notification consumers.

Broker-agnostic; no aio_pika dependency. Uses Pydantic v2 for schemas.
"""

from common.ids import NIL_ORDER_ID, new_order_id
from common.logging import setup_logging
from common.models import BuyerNotice, LogEntry, Order, SellerNotice
from common.timeutils import to_rfc3339, utc_now

__all__ = [
    "NIL_ORDER_ID",
    "new_order_id",
    "setup_logging",
    "Order",
    "LogEntry",
    "BuyerNotice",
    "SellerNotice",
    "utc_now",
    "to_rfc3339",
]
