"""
Order ID generation.

Provides new_order_id(). Generation never aborts the caller: if the id
factory fails, the nil UUID is returned and a warning is logged.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable

logger = logging.getLogger(__name__)

NIL_ORDER_ID = uuid.UUID(int=0)


def new_order_id(factory: Callable[[], uuid.UUID] = uuid.uuid4) -> uuid.UUID:
    """
    Generate a new order ID (UUID4 by default).

    Falls back to NIL_ORDER_ID when the factory raises, so a broken
    entropy source degrades ids instead of stopping order generation.

    >>> new_order_id().version
    4
    >>> def broken():
    ...     raise OSError("no entropy")
    >>> new_order_id(broken) == NIL_ORDER_ID
    True
    """
    try:
        return factory()
    except Exception as e:
        logger.warning("Failed to create order id, using nil UUID: %s", e)
        return NIL_ORDER_ID
