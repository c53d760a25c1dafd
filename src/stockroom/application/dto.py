"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from stockroom.domain.model.batch import Batch
from stockroom.domain.model.order import Order


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: what the customer asked for (product id + quantity)."""

    product_id: str
    quantity: int


@dataclass(frozen=True)
class AllocationDTO:
    batch_id: str
    qty_taken: int


@dataclass(frozen=True)
class OrderLineDTO:
    product_id: str
    product_name: str
    quantity: int
    unit_price: str  # formatted, e.g. "Rs. 15.00"
    line_total: str
    allocations: list[AllocationDTO]


@dataclass(frozen=True)
class StatusChangeDTO:
    status: str
    at: str
    actor: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: int
    user_id: str
    status: str
    lines: list[OrderLineDTO]
    total: str
    created_at: str
    shipping_address: str
    history: list[StatusChangeDTO]


@dataclass(frozen=True)
class BatchDTO:
    id: str
    product_id: str
    supplier_id: str
    batch_number: str
    quantity_received: int
    quantity_remaining: int
    expiry_date: str
    received_at: str
    cost_price: str
    selling_price: str
    status: str


@dataclass(frozen=True)
class CartLineDTO:
    product_id: str
    product_name: str
    quantity: int
    unit_price: str
    line_total: str


@dataclass(frozen=True)
class CartDTO:
    user_id: str
    lines: list[CartLineDTO]
    total: str


@dataclass(frozen=True)
class StockLevelDTO:
    product_id: str
    product_name: str
    total_remaining: int
    threshold: int
    is_low: bool


# --- Mapping ------------------------------------------------------------------


def order_to_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        user_id=order.user_id,
        status=order.status.value,
        lines=[
            OrderLineDTO(
                product_id=line.product_id,
                product_name=line.product_name,
                quantity=line.quantity.value,
                unit_price=str(line.unit_price),
                line_total=str(line.line_total),
                allocations=[AllocationDTO(a.batch_id, a.qty_taken) for a in line.allocations],
            )
            for line in order.lines
        ],
        total=str(order.total),
        created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
        shipping_address=order.shipping_address,
        history=[
            StatusChangeDTO(
                status=h.status.value,
                at=h.at.strftime("%Y-%m-%d %H:%M UTC"),
                actor=h.actor,
            )
            for h in order.status_history
        ],
    )


def batch_to_dto(batch: Batch, today: date) -> BatchDTO:
    return BatchDTO(
        id=batch.id,
        product_id=batch.product_id,
        supplier_id=batch.supplier_id,
        batch_number=batch.batch_number,
        quantity_received=batch.quantity_received,
        quantity_remaining=batch.quantity_remaining,
        expiry_date=batch.expiry_date.isoformat(),
        received_at=batch.received_at.strftime("%Y-%m-%d %H:%M UTC"),
        cost_price=str(batch.cost_price),
        selling_price=str(batch.selling_price),
        status=batch.status(today).value,
    )
