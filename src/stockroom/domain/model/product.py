"""Product aggregate.

Products live independently of batches and orders. The stock a product
has on hand is never stored here: the Batch Ledger derives it from the
product's batches on every read.
"""

from __future__ import annotations

from dataclasses import dataclass

from stockroom.domain.exceptions import ValidationError
from stockroom.domain.model.value_objects import Money


@dataclass
class Product:
    """A product in the catalog.

    ``low_stock_threshold`` of None means the global default applies.
    """

    id: str
    name: str
    price: Money
    brand: str = ""
    low_stock_threshold: int | None = None

    def update_price(self, new_price: Money) -> None:
        """Change the product price.

        Existing orders keep the price captured at checkout.
        """
        if new_price.amount <= 0:
            raise ValidationError("Product price must be greater than zero")
        self.price = new_price

    def set_threshold(self, threshold: int | None) -> None:
        if threshold is not None and threshold < 0:
            raise ValidationError("Low-stock threshold cannot be negative")
        self.low_stock_threshold = threshold

    def threshold_or(self, default: int) -> int:
        if self.low_stock_threshold is None:
            return default
        return self.low_stock_threshold


@dataclass(frozen=True)
class Supplier:
    id: str
    name: str
    email: str = ""
