"""Cart aggregate: an advisory shopping list.

A cart holds no allocation and no stock; it is only turned into real
allocations when the customer checks out.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from stockroom.domain.exceptions import EntityNotFoundError
from stockroom.domain.model.value_objects import Quantity


@dataclass
class CartLine:
    product_id: str
    quantity: int


@dataclass
class Cart:
    user_id: str
    lines: list[CartLine] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def quantity_of(self, product_id: str) -> int:
        line = self._find_line(product_id)
        return line.quantity if line is not None else 0

    def add(self, product_id: str, quantity: int) -> int:
        """Add units of a product, merging with an existing line.

        Returns the resulting quantity on the line.
        """
        qty = Quantity(quantity).value
        line = self._find_line(product_id)
        if line is None:
            self.lines.append(CartLine(product_id, qty))
            return qty
        line.quantity += qty
        return line.quantity

    def set_quantity(self, product_id: str, quantity: int) -> None:
        qty = Quantity(quantity).value
        line = self._find_line(product_id)
        if line is None:
            raise EntityNotFoundError(f"Product '{product_id}' is not in the cart")
        line.quantity = qty

    def remove(self, product_id: str) -> None:
        line = self._find_line(product_id)
        if line is None:
            raise EntityNotFoundError(f"Product '{product_id}' is not in the cart")
        self.lines.remove(line)

    def clear(self) -> None:
        self.lines.clear()

    def _find_line(self, product_id: str) -> CartLine | None:
        for line in self.lines:
            if line.product_id == product_id:
                return line
        return None
