"""Application service: Receive Stock use case (admin).

Records a new batch in the ledger. Only admins may receive stock.
"""

from __future__ import annotations

from datetime import date

from stockroom.application.dto import BatchDTO, batch_to_dto
from stockroom.domain.model.principal import Principal
from stockroom.domain.model.value_objects import Money
from stockroom.domain.service.batch_ledger import BatchLedger


class ReceiveStockHandler:

    def __init__(self, ledger: BatchLedger) -> None:
        self._ledger = ledger

    def handle(
        self,
        principal: Principal,
        product_id: str,
        quantity: int,
        expiry_date: date,
        supplier_id: str,
        cost_price: str,
        selling_price: str | None = None,
        batch_number: str | None = None,
        manufacturing_date: date | None = None,
    ) -> BatchDTO:
        principal.require_admin()
        batch = self._ledger.create_batch(
            product_id=product_id,
            quantity=quantity,
            expiry_date=expiry_date,
            supplier_id=supplier_id,
            cost_price=Money.of(cost_price),
            selling_price=Money.of(selling_price) if selling_price is not None else None,
            batch_number=batch_number,
            manufacturing_date=manufacturing_date,
        )
        return batch_to_dto(batch, self._ledger.today())
