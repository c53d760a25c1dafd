"""Abstract repository for the Batch aggregate.

Writes to an existing batch are optimistic: ``update`` and ``delete`` take
the version the caller read and fail with StaleVersionError if the stored
record has moved on since.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockroom.domain.model.batch import Batch


class BatchRepository(ABC):

    @abstractmethod
    def next_id(self) -> str:
        """Generate a new unique batch ID."""

    @abstractmethod
    def get_by_id(self, batch_id: str) -> Batch | None:
        """Return a batch by its ID, or None if not found."""

    @abstractmethod
    def list_by_product(self, product_id: str) -> list[Batch]:
        """Return every batch of a product, in no particular order."""

    @abstractmethod
    def list_all(self) -> list[Batch]:
        """Return every batch."""

    @abstractmethod
    def add(self, batch: Batch) -> None:
        """Persist a newly received batch."""

    @abstractmethod
    def update(self, batch: Batch, expected_version: int) -> None:
        """Persist changes to a batch and bump its version.

        Raises StaleVersionError if the stored version is not
        ``expected_version``.
        """

    @abstractmethod
    def delete(self, batch_id: str, expected_version: int) -> None:
        """Remove a batch. Raises StaleVersionError on a version mismatch."""
