"""Abstract repository for the low-stock "already notified" latches."""

from __future__ import annotations

from abc import ABC, abstractmethod


class LowStockLatchRepository(ABC):
    """One latch per product, kept across process restarts.

    ``set`` and ``clear`` are test-and-set operations: each reports whether
    it changed anything, and two callers racing on the same product see
    exactly one of them succeed.
    """

    @abstractmethod
    def is_set(self, product_id: str) -> bool:
        ...

    @abstractmethod
    def set(self, product_id: str) -> bool:
        """Latch the product. Returns False if it was already latched."""

    @abstractmethod
    def clear(self, product_id: str) -> bool:
        """Release the latch. Returns False if it was not latched."""
