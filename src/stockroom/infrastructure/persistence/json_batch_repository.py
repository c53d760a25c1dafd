"""JSON-file-backed implementation of BatchRepository."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path

from stockroom.domain.exceptions import StaleVersionError
from stockroom.domain.model.batch import Batch
from stockroom.domain.model.value_objects import Money
from stockroom.domain.repository.batch_repository import BatchRepository
from stockroom.infrastructure.persistence.json_file import JsonFile


class JsonBatchRepository(BatchRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    # --- BatchRepository interface --------------------------------------------

    def next_id(self) -> str:
        return uuid.uuid4().hex[:12]

    def get_by_id(self, batch_id: str) -> Batch | None:
        for raw in self._file.load():
            if raw["id"] == batch_id:
                return self._to_domain(raw)
        return None

    def list_by_product(self, product_id: str) -> list[Batch]:
        return [
            self._to_domain(raw)
            for raw in self._file.load()
            if raw["product_id"] == product_id
        ]

    def list_all(self) -> list[Batch]:
        return [self._to_domain(raw) for raw in self._file.load()]

    def add(self, batch: Batch) -> None:
        with self._file.locked():
            records = self._file.load()
            records.append(self._to_raw(batch))
            self._file.persist(records)

    def update(self, batch: Batch, expected_version: int) -> None:
        with self._file.locked():
            records = self._file.load()
            index = self._index_checked(records, batch.id, expected_version)
            batch.version = expected_version + 1
            records[index] = self._to_raw(batch)
            self._file.persist(records)

    def delete(self, batch_id: str, expected_version: int) -> None:
        with self._file.locked():
            records = self._file.load()
            index = self._index_checked(records, batch_id, expected_version)
            del records[index]
            self._file.persist(records)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _index_checked(records: list[dict], batch_id: str, expected_version: int) -> int:
        for i, raw in enumerate(records):
            if raw["id"] == batch_id:
                if raw.get("version", 0) != expected_version:
                    raise StaleVersionError(
                        f"Batch {batch_id} is at version {raw.get('version', 0)}, "
                        f"expected {expected_version}"
                    )
                return i
        raise StaleVersionError(f"Batch {batch_id} no longer exists")

    @staticmethod
    def _to_raw(batch: Batch) -> dict:
        return {
            "id": batch.id,
            "product_id": batch.product_id,
            "supplier_id": batch.supplier_id,
            "batch_number": batch.batch_number,
            "quantity_received": batch.quantity_received,
            "quantity_remaining": batch.quantity_remaining,
            "expiry_date": batch.expiry_date.isoformat(),
            "manufacturing_date": (
                batch.manufacturing_date.isoformat() if batch.manufacturing_date else None
            ),
            "received_at": batch.received_at.isoformat(),
            "cost_price": str(batch.cost_price.amount),
            "selling_price": str(batch.selling_price.amount),
            "currency": batch.cost_price.currency,
            "version": batch.version,
        }

    @staticmethod
    def _to_domain(raw: dict) -> Batch:
        currency = raw.get("currency", "LKR")
        mfg = raw.get("manufacturing_date")
        return Batch(
            id=raw["id"],
            product_id=raw["product_id"],
            supplier_id=raw["supplier_id"],
            batch_number=raw["batch_number"],
            quantity_received=raw["quantity_received"],
            quantity_remaining=raw["quantity_remaining"],
            expiry_date=date.fromisoformat(raw["expiry_date"]),
            manufacturing_date=date.fromisoformat(mfg) if mfg else None,
            received_at=datetime.fromisoformat(raw["received_at"]),
            cost_price=Money(Decimal(raw["cost_price"]), currency),
            selling_price=Money(Decimal(raw["selling_price"]), currency),
            version=raw.get("version", 0),
        )
