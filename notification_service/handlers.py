"""Per-queue payload handlers: render each received projection to the log."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, NamedTuple

from pydantic import BaseModel

from broker.config import ORDER_LOG, SELLER_NOTIFY, USER_NOTIFY
from common.models import BuyerNotice, LogEntry, SellerNotice
from common.timeutils import to_rfc3339

logger = logging.getLogger(__name__)

Handler = Callable[[int, Any], None]


class Subscription(NamedTuple):
    """A queue to consume, the model its payloads decode to, and what to do with them."""

    queue: str
    model: type[BaseModel]
    handler: Handler


def render_log_entry(worker_id: int, entry: LogEntry) -> None:
    logger.info(
        "Log for order (consumer %d): order_id=%s buyer=%s price=%d created_at=%s",
        worker_id,
        entry.order_id,
        entry.buyer,
        entry.price,
        to_rfc3339(entry.created_at),
    )


def render_buyer_notice(worker_id: int, notice: BuyerNotice) -> None:
    logger.info(
        "Log for user notification (consumer %d): order_id=%s item=%s",
        worker_id,
        notice.order_id,
        notice.item,
    )


def render_seller_notice(worker_id: int, notice: SellerNotice) -> None:
    logger.info(
        "Log for seller notification (consumer %d): order_id=%s buyer=%s address=%s",
        worker_id,
        notice.order_id,
        notice.buyer,
        notice.address,
    )


DEFAULT_SUBSCRIPTIONS = (
    Subscription(ORDER_LOG.queue, LogEntry, render_log_entry),
    Subscription(USER_NOTIFY.queue, BuyerNotice, render_buyer_notice),
    Subscription(SELLER_NOTIFY.queue, SellerNotice, render_seller_notice),
)
