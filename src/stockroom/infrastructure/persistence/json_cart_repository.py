"""JSON-file-backed implementation of CartRepository."""

from __future__ import annotations

from pathlib import Path

from stockroom.domain.model.cart import Cart, CartLine
from stockroom.domain.repository.cart_repository import CartRepository
from stockroom.infrastructure.persistence.json_file import JsonFile


class JsonCartRepository(CartRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    def get_for_user(self, user_id: str) -> Cart | None:
        for raw in self._file.load():
            if raw["user_id"] == user_id:
                return Cart(
                    user_id=raw["user_id"],
                    lines=[CartLine(l["product_id"], l["quantity"]) for l in raw["lines"]],
                )
        return None

    def save(self, cart: Cart) -> None:
        with self._file.locked():
            records = [r for r in self._file.load() if r["user_id"] != cart.user_id]
            records.append({
                "user_id": cart.user_id,
                "lines": [
                    {"product_id": l.product_id, "quantity": l.quantity} for l in cart.lines
                ],
            })
            self._file.persist(records)

    def delete(self, user_id: str) -> None:
        with self._file.locked():
            records = [r for r in self._file.load() if r["user_id"] != user_id]
            self._file.persist(records)
