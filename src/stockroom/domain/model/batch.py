"""Batch aggregate: one physical receipt of stock for a product.

The Batch Ledger is the sole owner of Batch objects. Orders only ever
hold a batch id, never the batch itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from stockroom.domain.exceptions import InsufficientStockError, ValidationError
from stockroom.domain.model.value_objects import Money, Quantity


class BatchStatus(Enum):
    """Derived at read time from the stored fields; never persisted."""

    ACTIVE = "active"
    EXPIRED = "expired"
    EXHAUSTED = "exhausted"

    @staticmethod
    def parse(raw: str) -> BatchStatus:
        try:
            return BatchStatus(raw.strip().lower())
        except ValueError:
            valid = ", ".join(s.value for s in BatchStatus)
            raise ValidationError(f"Invalid batch status '{raw}' (expected one of: {valid})")


@dataclass
class Batch:
    """Aggregate root for a stock receipt.

    Invariants:
    - ``0 <= quantity_remaining <= quantity_received``
    - ``expiry_date`` never changes after creation
    - expired / exhausted are computed, not stored

    ``version`` is bumped by the repository on every successful write and
    is used for optimistic concurrency checks.
    """

    id: str
    product_id: str
    supplier_id: str
    batch_number: str
    quantity_received: int
    quantity_remaining: int
    expiry_date: date
    received_at: datetime
    cost_price: Money
    selling_price: Money
    manufacturing_date: date | None = None
    version: int = 0

    # --- Factory (used for NEW batches only) ----------------------------------

    @staticmethod
    def receive(
        batch_id: str,
        product_id: str,
        supplier_id: str,
        batch_number: str,
        quantity: int,
        expiry_date: date,
        cost_price: Money,
        selling_price: Money,
        received_at: datetime,
        manufacturing_date: date | None = None,
    ) -> Batch:
        """Create a freshly received batch, enforcing intake rules."""
        qty = Quantity(quantity).value
        if not batch_number or not batch_number.strip():
            raise ValidationError("Batch number is required")
        if expiry_date < received_at.date():
            raise ValidationError(
                f"Expiry date {expiry_date.isoformat()} is already in the past"
            )
        if manufacturing_date is not None and manufacturing_date >= expiry_date:
            raise ValidationError("Expiry date must be after manufacturing date")

        return Batch(
            id=batch_id,
            product_id=product_id,
            supplier_id=supplier_id,
            batch_number=batch_number.strip(),
            quantity_received=qty,
            quantity_remaining=qty,
            expiry_date=expiry_date,
            received_at=received_at,
            cost_price=cost_price,
            selling_price=selling_price,
            manufacturing_date=manufacturing_date,
        )

    # --- Derived state --------------------------------------------------------

    def is_expired(self, today: date) -> bool:
        return self.expiry_date < today

    @property
    def is_exhausted(self) -> bool:
        return self.quantity_remaining == 0

    @property
    def is_untouched(self) -> bool:
        return self.quantity_remaining == self.quantity_received

    def is_eligible(self, today: date) -> bool:
        """True if the batch may be allocated from."""
        return not self.is_expired(today) and not self.is_exhausted

    def status(self, today: date) -> BatchStatus:
        # an empty batch is exhausted whether or not it has also expired
        if self.is_exhausted:
            return BatchStatus.EXHAUSTED
        if self.is_expired(today):
            return BatchStatus.EXPIRED
        return BatchStatus.ACTIVE

    def fefo_key(self) -> tuple[date, datetime, str]:
        """Sort key: soonest expiry first, then oldest receipt."""
        return (self.expiry_date, self.received_at, self.id)

    # --- Mutation -------------------------------------------------------------

    def apply_delta(self, delta: int) -> None:
        """Consume (negative) or restore (positive) remaining units."""
        if delta == 0:
            raise ValidationError("Adjustment delta must be non-zero")
        new_remaining = self.quantity_remaining + delta
        if new_remaining < 0:
            raise InsufficientStockError(
                self.product_id, requested=-delta, available=self.quantity_remaining
            )
        if new_remaining > self.quantity_received:
            raise ValidationError(
                f"Cannot restore {delta} to batch {self.batch_number}; "
                f"only {self.quantity_received - self.quantity_remaining} were taken"
            )
        self.quantity_remaining = new_remaining

    def update_details(
        self,
        batch_number: str | None = None,
        cost_price: Money | None = None,
        selling_price: Money | None = None,
    ) -> None:
        """Edit descriptive fields. Quantities and expiry are not editable."""
        if batch_number is not None:
            if not batch_number.strip():
                raise ValidationError("Batch number is required")
            self.batch_number = batch_number.strip()
        if cost_price is not None:
            self.cost_price = cost_price
        if selling_price is not None:
            self.selling_price = selling_price
