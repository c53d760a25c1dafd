"""JSON-file-backed implementation of LowStockLatchRepository."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from stockroom.domain.repository.latch_repository import LowStockLatchRepository
from stockroom.infrastructure.persistence.json_file import JsonFile


class JsonLowStockLatchRepository(LowStockLatchRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    def is_set(self, product_id: str) -> bool:
        return any(r["product_id"] == product_id for r in self._file.load())

    def set(self, product_id: str) -> bool:
        with self._file.locked():
            records = self._file.load()
            if any(r["product_id"] == product_id for r in records):
                return False
            records.append({
                "product_id": product_id,
                "latched_at": datetime.now(timezone.utc).isoformat(),
            })
            self._file.persist(records)
            return True

    def clear(self, product_id: str) -> bool:
        with self._file.locked():
            records = self._file.load()
            kept = [r for r in records if r["product_id"] != product_id]
            if len(kept) == len(records):
                return False
            self._file.persist(kept)
            return True
