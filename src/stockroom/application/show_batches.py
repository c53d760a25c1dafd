"""Application services: batch queries."""

from __future__ import annotations

from stockroom.application.dto import BatchDTO, batch_to_dto
from stockroom.domain.exceptions import EntityNotFoundError
from stockroom.domain.repository.product_repository import ProductRepository
from stockroom.domain.service.batch_ledger import BatchLedger


class ShowBatchesHandler:

    def __init__(self, ledger: BatchLedger, product_repo: ProductRepository) -> None:
        self._ledger = ledger
        self._product_repo = product_repo

    def get(self, batch_id: str) -> BatchDTO:
        return batch_to_dto(self._ledger.get_batch(batch_id), self._ledger.today())

    def for_product(self, product_id: str) -> list[BatchDTO]:
        """Every batch of a product, newest receipt first."""
        if self._product_repo.get_by_id(product_id) is None:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")
        today = self._ledger.today()
        return [batch_to_dto(b, today) for b in self._ledger.product_batches(product_id)]

    def by_status(self, status: str) -> list[BatchDTO]:
        """Batches that are currently active, expired or exhausted."""
        today = self._ledger.today()
        return [batch_to_dto(b, today) for b in self._ledger.batches_by_status(status)]
