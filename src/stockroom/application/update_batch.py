"""Application services: Update Batch and Delete Batch use cases (admin)."""

from __future__ import annotations

from stockroom.application.dto import BatchDTO, batch_to_dto
from stockroom.domain.model.principal import Principal
from stockroom.domain.model.value_objects import Money
from stockroom.domain.service.batch_ledger import BatchLedger


class UpdateBatchHandler:

    def __init__(self, ledger: BatchLedger) -> None:
        self._ledger = ledger

    def handle(
        self,
        principal: Principal,
        batch_id: str,
        batch_number: str | None = None,
        cost_price: str | None = None,
        selling_price: str | None = None,
    ) -> BatchDTO:
        """Edit a batch's number or prices. Quantities and expiry stay fixed."""
        principal.require_admin()
        batch = self._ledger.update_batch(
            batch_id,
            batch_number=batch_number,
            cost_price=Money.of(cost_price) if cost_price is not None else None,
            selling_price=Money.of(selling_price) if selling_price is not None else None,
        )
        return batch_to_dto(batch, self._ledger.today())


class DeleteBatchHandler:

    def __init__(self, ledger: BatchLedger) -> None:
        self._ledger = ledger

    def handle(self, principal: Principal, batch_id: str) -> None:
        """Delete a batch nobody has allocated from yet."""
        principal.require_admin()
        self._ledger.delete_batch(batch_id)
