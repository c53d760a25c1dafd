"""JSON-file-backed implementation of OrderRepository."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from pathlib import Path

from stockroom.domain.exceptions import StaleVersionError
from stockroom.domain.model.order import (
    Allocation,
    Order,
    OrderLine,
    OrderStatus,
    StatusChange,
)
from stockroom.domain.model.value_objects import Money, Quantity
from stockroom.domain.repository.order_repository import OrderRepository
from stockroom.infrastructure.persistence.json_file import JsonFile


class JsonOrderRepository(OrderRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    # --- OrderRepository interface --------------------------------------------

    def next_id(self) -> int:
        orders = self._file.load()
        if not orders:
            return 1
        return max(o["id"] for o in orders) + 1

    def get_by_id(self, order_id: int) -> Order | None:
        for raw in self._file.load():
            if raw["id"] == order_id:
                return self._to_domain(raw)
        return None

    def list_by_user(self, user_id: str) -> list[Order]:
        orders = [self._to_domain(r) for r in self._file.load() if r["user_id"] == user_id]
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    def list_by_status(self, status: OrderStatus) -> list[Order]:
        orders = [self._to_domain(r) for r in self._file.load() if r["status"] == status.value]
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    def add(self, order: Order) -> None:
        with self._file.locked():
            orders = self._file.load()
            order.id = self.next_id()
            orders.append(self._to_raw(order))
            self._file.persist(orders)

    def update(self, order: Order, expected_version: int) -> None:
        with self._file.locked():
            orders = self._file.load()
            for i, raw in enumerate(orders):
                if raw["id"] == order.id:
                    if raw.get("version", 0) != expected_version:
                        raise StaleVersionError(
                            f"Order #{order.id} is at version {raw.get('version', 0)}, "
                            f"expected {expected_version}"
                        )
                    order.version = expected_version + 1
                    orders[i] = self._to_raw(order)
                    self._file.persist(orders)
                    return
            raise StaleVersionError(f"Order #{order.id} no longer exists")

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        return {
            "id": order.id,
            "user_id": order.user_id,
            "status": order.status.value,
            "created_at": order.created_at.isoformat(),
            "shipping_address": order.shipping_address,
            "version": order.version,
            "lines": [
                {
                    "product_id": line.product_id,
                    "product_name": line.product_name,
                    "quantity": line.quantity.value,
                    "unit_price": str(line.unit_price.amount),
                    "currency": line.unit_price.currency,
                    "allocations": [
                        {"batch_id": a.batch_id, "qty_taken": a.qty_taken}
                        for a in line.allocations
                    ],
                }
                for line in order.lines
            ],
            "status_history": [
                {"status": h.status.value, "at": h.at.isoformat(), "actor": h.actor}
                for h in order.status_history
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        lines = [
            OrderLine(
                product_id=line["product_id"],
                product_name=line["product_name"],
                quantity=Quantity(line["quantity"]),
                unit_price=Money(Decimal(line["unit_price"]), line.get("currency", "LKR")),
                allocations=[
                    Allocation(batch_id=a["batch_id"], qty_taken=a["qty_taken"])
                    for a in line.get("allocations", [])
                ],
            )
            for line in raw["lines"]
        ]
        history = [
            StatusChange(
                status=OrderStatus(h["status"]),
                at=datetime.fromisoformat(h["at"]),
                actor=h["actor"],
            )
            for h in raw.get("status_history", [])
        ]
        return Order(
            id=raw["id"],
            user_id=raw["user_id"],
            lines=lines,
            status=OrderStatus(raw["status"]),
            created_at=datetime.fromisoformat(raw["created_at"]),
            status_history=history,
            shipping_address=raw.get("shipping_address", ""),
            version=raw.get("version", 0),
        )
