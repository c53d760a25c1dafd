"""Abstract repository for Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockroom.domain.model.order import Order, OrderStatus


class OrderRepository(ABC):

    @abstractmethod
    def next_id(self) -> int:
        """Generate the next unique order ID."""

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def list_by_user(self, user_id: str) -> list[Order]:
        """Return a user's orders, newest first."""

    @abstractmethod
    def list_by_status(self, status: OrderStatus) -> list[Order]:
        """Return every order currently in ``status``, newest first."""

    @abstractmethod
    def add(self, order: Order) -> None:
        """Persist a new order, assigning its ID."""

    @abstractmethod
    def update(self, order: Order, expected_version: int) -> None:
        """Persist a status change and bump the order's version.

        Raises StaleVersionError if the stored version is not
        ``expected_version``.
        """
