"""Order aggregate: the customer-facing side of an allocation.

The Order owns its lines and their allocation records. Allocation records
hold batch ids only; the batches themselves belong to the Batch Ledger.
All lifecycle rules live in the transition table below.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from stockroom.domain.exceptions import InvalidTransitionError, ValidationError
from stockroom.domain.model.value_objects import Money, Quantity


class OrderStatus(Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"

    @staticmethod
    def parse(raw: str) -> OrderStatus:
        try:
            return OrderStatus(raw.strip().upper())
        except ValueError:
            valid = ", ".join(s.value for s in OrderStatus)
            raise ValidationError(f"Invalid order status '{raw}' (expected one of: {valid})")

    @property
    def is_terminal(self) -> bool:
        return not TRANSITIONS[self]


TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


@dataclass(frozen=True)
class LineRequest:
    """A product and quantity the customer wants, before allocation."""

    product_id: str
    quantity: int


@dataclass(frozen=True)
class Allocation:
    """Units of one order line taken from one batch."""

    batch_id: str
    qty_taken: int


@dataclass
class OrderLine:
    """One product on an order, with the price captured at checkout."""

    product_id: str
    product_name: str
    quantity: Quantity
    unit_price: Money  # locked at checkout
    allocations: list[Allocation] = field(default_factory=list)

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value

    @property
    def allocated_quantity(self) -> int:
        return sum(a.qty_taken for a in self.allocations)

    @property
    def is_fully_allocated(self) -> bool:
        return self.allocated_quantity == self.quantity.value


@dataclass(frozen=True)
class StatusChange:
    status: OrderStatus
    at: datetime
    actor: str


@dataclass
class Order:
    """Aggregate root for customer orders.

    Use ``Order.place()`` for new orders. The plain constructor exists so
    repositories can reconstitute persisted orders without re-validating.
    """

    id: int | None
    user_id: str
    lines: list[OrderLine]
    status: OrderStatus = OrderStatus.PENDING
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    status_history: list[StatusChange] = field(default_factory=list)
    shipping_address: str = ""
    version: int = 0

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def place(
        user_id: str,
        lines: list[OrderLine],
        actor: str,
        at: datetime,
        shipping_address: str = "",
    ) -> Order:
        """Build a PENDING order from fully allocated lines."""
        if not lines:
            raise ValidationError("Order must contain at least one line")
        for line in lines:
            if not line.is_fully_allocated:
                raise ValidationError(
                    f"Line for {line.product_name} is allocated "
                    f"{line.allocated_quantity} of {line.quantity.value}"
                )

        return Order(
            id=None,
            user_id=user_id,
            lines=list(lines),
            status=OrderStatus.PENDING,
            created_at=at,
            status_history=[StatusChange(OrderStatus.PENDING, at, actor)],
            shipping_address=shipping_address.strip(),
        )

    # --- State transitions ----------------------------------------------------

    def check_transition(self, target: OrderStatus) -> bool:
        """Validate an edge against the transition table.

        Returns False when the order already sits in a non-terminal
        ``target`` (a retried request), True when the edge is a real move.
        Terminal orders reject everything, including their own status.
        """
        if self.status.is_terminal:
            raise InvalidTransitionError(self.status.value, target.value)
        if target == self.status:
            return False
        if target not in TRANSITIONS[self.status]:
            raise InvalidTransitionError(self.status.value, target.value)
        return True

    def transition_to(self, target: OrderStatus, actor: str, at: datetime) -> bool:
        """Move to ``target`` and record it. Returns False on a no-op."""
        if not self.check_transition(target):
            return False
        self.status = target
        self.status_history.append(StatusChange(target, at, actor))
        return True

    # --- Computed properties --------------------------------------------------

    @property
    def total(self) -> Money:
        result = Money.zero()
        for line in self.lines:
            result = result + line.line_total
        return result

    @property
    def allocations(self) -> list[Allocation]:
        return [a for line in self.lines for a in line.allocations]

    def is_owned_by(self, user_id: str) -> bool:
        return self.user_id == user_id
