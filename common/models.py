"""
Pydantic v2 data models for generated orders and their notification projections.

An Order is the source event. Each Order is projected into three narrower
messages, one per downstream queue: LogEntry (audit), BuyerNotice and
SellerNotice. All models are immutable. Order forbids extra fields; the
projections ignore unknown keys so consumers keep accepting payloads from a
producer that has added fields.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from common.timeutils import to_rfc3339


# -----------------------------------------------------------------------------
# Source event
# -----------------------------------------------------------------------------


class Order(BaseModel):
    """A placed order, created by the order source and never mutated."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: UUID
    item: str
    price: int = Field(..., gt=0, description="Price must be positive")
    shop: str
    buyer: str
    address: str
    created_at: datetime

    def __str__(self) -> str:
        return (
            f"Order ID: {self.id}\n"
            f"Item: {self.item}\n"
            f"Price: {self.price}\n"
            f"Shop: {self.shop}\n"
            f"Buyer: {self.buyer}\n"
            f"Address: {self.address}\n"
            f"Created At: {to_rfc3339(self.created_at)}"
        )


# -----------------------------------------------------------------------------
# Projections (one per routing key)
# -----------------------------------------------------------------------------


class LogEntry(BaseModel):
    """Audit record for an order (routing key log.orders)."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    order_id: UUID
    buyer: str
    price: int
    created_at: datetime

    @classmethod
    def from_order(cls, order: Order) -> LogEntry:
        return cls(
            order_id=order.id,
            buyer=order.buyer,
            price=order.price,
            created_at=order.created_at,
        )


class BuyerNotice(BaseModel):
    """Buyer-facing notification (routing key notify.users)."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    order_id: UUID
    item: str

    @classmethod
    def from_order(cls, order: Order) -> BuyerNotice:
        return cls(order_id=order.id, item=order.item)


class SellerNotice(BaseModel):
    """Seller-facing notification (routing key notify.sellers)."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    order_id: UUID
    buyer: str
    address: str

    @classmethod
    def from_order(cls, order: Order) -> SellerNotice:
        return cls(order_id=order.id, buyer=order.buyer, address=order.address)
