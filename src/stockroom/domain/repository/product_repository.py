"""Abstract repositories for the catalog side: products and suppliers.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations live in the infrastructure layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockroom.domain.model.product import Product, Supplier


class ProductRepository(ABC):

    @abstractmethod
    def get_by_id(self, product_id: str) -> Product | None:
        """Return a product by its ID, or None if not found."""

    @abstractmethod
    def get_by_name(self, name: str) -> Product | None:
        """Return a product by its exact name, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Product]:
        """Return every product in the catalog."""

    @abstractmethod
    def save(self, product: Product) -> None:
        """Persist a new or updated product."""


class SupplierRepository(ABC):

    @abstractmethod
    def get_by_id(self, supplier_id: str) -> Supplier | None:
        """Return a supplier by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Supplier]:
        """Return every supplier."""

    @abstractmethod
    def save(self, supplier: Supplier) -> None:
        """Persist a new or updated supplier."""
