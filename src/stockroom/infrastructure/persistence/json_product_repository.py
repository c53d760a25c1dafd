"""JSON-file-backed implementations of ProductRepository and SupplierRepository."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path

from stockroom.domain.model.product import Product, Supplier
from stockroom.domain.model.value_objects import Money
from stockroom.domain.repository.product_repository import (
    ProductRepository,
    SupplierRepository,
)
from stockroom.infrastructure.persistence.json_file import JsonFile


class JsonProductRepository(ProductRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: str) -> Product | None:
        return self._load().get(product_id)

    def get_by_name(self, name: str) -> Product | None:
        for product in self._load().values():
            if product.name.lower() == name.lower():
                return product
        return None

    def list_all(self) -> list[Product]:
        return list(self._load().values())

    def save(self, product: Product) -> None:
        with self._file.locked():
            products = self._load()
            products[product.id] = product
            self._persist(products)

    # --- Serialization helpers ------------------------------------------------

    def _load(self) -> dict[str, Product]:
        return {
            item["id"]: Product(
                id=item["id"],
                name=item["name"],
                price=Money(Decimal(item["price"]), item.get("currency", "LKR")),
                brand=item.get("brand", ""),
                low_stock_threshold=item.get("low_stock_threshold"),
            )
            for item in self._file.load()
        }

    def _persist(self, products: dict[str, Product]) -> None:
        self._file.persist([
            {
                "id": p.id,
                "name": p.name,
                "brand": p.brand,
                "price": str(p.price.amount),
                "currency": p.price.currency,
                "low_stock_threshold": p.low_stock_threshold,
            }
            for p in products.values()
        ])


class JsonSupplierRepository(SupplierRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    def get_by_id(self, supplier_id: str) -> Supplier | None:
        for raw in self._file.load():
            if raw["id"] == supplier_id:
                return Supplier(id=raw["id"], name=raw["name"], email=raw.get("email", ""))
        return None

    def list_all(self) -> list[Supplier]:
        return [
            Supplier(id=raw["id"], name=raw["name"], email=raw.get("email", ""))
            for raw in self._file.load()
        ]

    def save(self, supplier: Supplier) -> None:
        with self._file.locked():
            records = [r for r in self._file.load() if r["id"] != supplier.id]
            records.append({"id": supplier.id, "name": supplier.name, "email": supplier.email})
            self._file.persist(records)
