"""Application services: Add Product and Add Supplier use cases (admin)."""

from __future__ import annotations

from stockroom.domain.exceptions import ValidationError
from stockroom.domain.model.principal import Principal
from stockroom.domain.model.product import Product, Supplier
from stockroom.domain.model.value_objects import Money
from stockroom.domain.repository.product_repository import (
    ProductRepository,
    SupplierRepository,
)


def _next_numeric_id(existing_ids: list[str]) -> str:
    numeric = [int(i) for i in existing_ids if i.isdigit()]
    return str(max(numeric) + 1) if numeric else "1"


class AddProductHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(
        self,
        principal: Principal,
        name: str,
        price: str,
        brand: str = "",
        low_stock_threshold: int | None = None,
    ) -> Product:
        """Add a new product to the catalog."""
        principal.require_admin()
        if not name or not name.strip():
            raise ValidationError("Product name is required")

        if self._product_repo.get_by_name(name.strip()) is not None:
            raise ValidationError(f"Product '{name}' already exists")

        product = Product(
            id=_next_numeric_id([p.id for p in self._product_repo.list_all()]),
            name=name.strip(),
            price=Money.of(price),
            brand=brand.strip(),
        )
        product.set_threshold(low_stock_threshold)
        self._product_repo.save(product)
        return product


class AddSupplierHandler:

    def __init__(self, supplier_repo: SupplierRepository) -> None:
        self._supplier_repo = supplier_repo

    def handle(self, principal: Principal, name: str, email: str = "") -> Supplier:
        principal.require_admin()
        if not name or not name.strip():
            raise ValidationError("Supplier name is required")
        supplier = Supplier(
            id=_next_numeric_id([s.id for s in self._supplier_repo.list_all()]),
            name=name.strip(),
            email=email.strip(),
        )
        self._supplier_repo.save(supplier)
        return supplier
