"""Domain service: Batch Ledger.

The ledger is the only component allowed to create, mutate or delete
batches. Every change to a batch's remaining quantity goes through
``adjust_remaining``, which serializes writers per batch and reports the
product's new stock level to subscribed observers once the write is done.

A product's stock on hand is never stored; ``total_remaining`` sums the
product's eligible batches on every call.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from datetime import date, datetime, timezone

from stockroom.config.logging import get_logger
from stockroom.domain.exceptions import (
    ConflictError,
    EntityNotFoundError,
    StaleVersionError,
    ValidationError,
)
from stockroom.domain.model.batch import Batch, BatchStatus
from stockroom.domain.model.value_objects import Money
from stockroom.domain.repository.batch_repository import BatchRepository
from stockroom.domain.repository.product_repository import (
    ProductRepository,
    SupplierRepository,
)
from stockroom.domain.service.locking import KeyedLocks

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class StockObserver(ABC):

    @abstractmethod
    def on_mutation(self, product_id: str, total_remaining: int) -> None:
        """Called after every successful change to a product's stock."""


class BatchLedger:

    def __init__(
        self,
        batch_repo: BatchRepository,
        product_repo: ProductRepository,
        supplier_repo: SupplierRepository,
        clock: Clock = utc_now,
        max_retries: int = 3,
        lock_timeout: float = 5.0,
    ) -> None:
        self._batch_repo = batch_repo
        self._product_repo = product_repo
        self._supplier_repo = supplier_repo
        self._clock = clock
        self._max_retries = max_retries
        self._locks = KeyedLocks(timeout=lock_timeout)
        self._publish_locks = KeyedLocks(timeout=lock_timeout)
        self._observers: list[StockObserver] = []

    def subscribe(self, observer: StockObserver) -> None:
        self._observers.append(observer)

    def now(self) -> datetime:
        return self._clock()

    def today(self) -> date:
        return self._clock().date()

    @contextmanager
    def hold(self, batch_ids: Iterable[str]) -> Iterator[None]:
        """Lock several batches at once, in batch-id order."""
        with self._locks.hold(batch_ids):
            yield

    # --- Commands -------------------------------------------------------------

    def create_batch(
        self,
        product_id: str,
        quantity: int,
        expiry_date: date,
        supplier_id: str,
        cost_price: Money,
        selling_price: Money | None = None,
        batch_number: str | None = None,
        manufacturing_date: date | None = None,
    ) -> Batch:
        """Record a stock receipt for a product."""
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")
        if self._supplier_repo.get_by_id(supplier_id) is None:
            raise EntityNotFoundError(f"Supplier with ID '{supplier_id}' not found")

        batch_id = self._batch_repo.next_id()
        if batch_number is None:
            batch_number = f"B-{batch_id}"
        self._ensure_unique_number(product_id, batch_number, exclude_id=None)

        batch = Batch.receive(
            batch_id=batch_id,
            product_id=product_id,
            supplier_id=supplier_id,
            batch_number=batch_number,
            quantity=quantity,
            expiry_date=expiry_date,
            cost_price=cost_price,
            selling_price=selling_price if selling_price is not None else product.price,
            received_at=self.now(),
            manufacturing_date=manufacturing_date,
        )
        self._batch_repo.add(batch)
        logger.info(
            "batch_received",
            batch_id=batch.id,
            product_id=product_id,
            quantity=batch.quantity_received,
            expiry_date=expiry_date.isoformat(),
        )
        self._publish(product_id)
        return batch

    def adjust_remaining(self, batch_id: str, delta: int) -> Batch:
        """Apply a signed change to a batch's remaining quantity.

        Negative deltas consume stock, positive ones restore it. Raises
        EntityNotFoundError, InsufficientStockError (would go below zero),
        ValidationError (would exceed the received quantity) or
        ConflictError (retry ceiling hit on concurrent writes).
        """
        with self._locks.hold([batch_id]):
            batch = self._write_with_retry(batch_id, lambda b: b.apply_delta(delta))
        logger.info(
            "batch_remaining_adjusted",
            batch_id=batch_id,
            product_id=batch.product_id,
            delta=delta,
            remaining=batch.quantity_remaining,
        )
        self._publish(batch.product_id)
        return batch

    def update_batch(
        self,
        batch_id: str,
        batch_number: str | None = None,
        cost_price: Money | None = None,
        selling_price: Money | None = None,
    ) -> Batch:
        """Edit a batch's descriptive fields."""

        def _edit(batch: Batch) -> None:
            if batch_number is not None:
                self._ensure_unique_number(batch.product_id, batch_number, exclude_id=batch.id)
            batch.update_details(batch_number, cost_price, selling_price)

        with self._locks.hold([batch_id]):
            return self._write_with_retry(batch_id, _edit)

    def delete_batch(self, batch_id: str) -> None:
        """Remove a batch that has never been allocated from."""
        with self._locks.hold([batch_id]):
            for _ in range(self._max_retries):
                batch = self.get_batch(batch_id)
                if not batch.is_untouched:
                    raise ConflictError(
                        f"Batch {batch.batch_number} has been allocated from "
                        f"({batch.quantity_remaining} of {batch.quantity_received} left) "
                        f"and cannot be deleted"
                    )
                try:
                    self._batch_repo.delete(batch_id, batch.version)
                except StaleVersionError:
                    logger.warning("batch_version_conflict", batch_id=batch_id, op="delete")
                    continue
                break
            else:
                raise ConflictError(f"Batch {batch_id} kept changing; delete abandoned")

        logger.info("batch_deleted", batch_id=batch_id, product_id=batch.product_id)
        self._publish(batch.product_id)

    # --- Queries --------------------------------------------------------------

    def get_batch(self, batch_id: str) -> Batch:
        batch = self._batch_repo.get_by_id(batch_id)
        if batch is None:
            raise EntityNotFoundError(f"Batch '{batch_id}' not found")
        return batch

    def product_batches(self, product_id: str) -> list[Batch]:
        """Every batch of a product, newest receipt first."""
        batches = self._batch_repo.list_by_product(product_id)
        return sorted(batches, key=lambda b: (b.received_at, b.id), reverse=True)

    def active_batches(self, product_id: str) -> list[Batch]:
        """Eligible batches of a product in FEFO order.

        Soonest expiry first; equal expiries go oldest receipt first.
        """
        today = self.today()
        eligible = [
            b for b in self._batch_repo.list_by_product(product_id)
            if b.is_eligible(today)
        ]
        return sorted(eligible, key=Batch.fefo_key)

    def batches_by_status(self, status: BatchStatus | str) -> list[Batch]:
        if isinstance(status, str):
            status = BatchStatus.parse(status)
        today = self.today()
        matching = [b for b in self._batch_repo.list_all() if b.status(today) == status]
        return sorted(matching, key=Batch.fefo_key)

    def total_remaining(self, product_id: str) -> int:
        return sum(b.quantity_remaining for b in self.active_batches(product_id))

    # --- Internal helpers -----------------------------------------------------

    def _write_with_retry(self, batch_id: str, change: Callable[[Batch], None]) -> Batch:
        for attempt in range(1, self._max_retries + 1):
            batch = self.get_batch(batch_id)
            expected = batch.version
            change(batch)
            try:
                self._batch_repo.update(batch, expected)
            except StaleVersionError:
                logger.warning("batch_version_conflict", batch_id=batch_id, attempt=attempt)
                continue
            return batch
        raise ConflictError(
            f"Batch {batch_id} changed concurrently {self._max_retries} times; giving up"
        )

    def _ensure_unique_number(
        self, product_id: str, batch_number: str, exclude_id: str | None
    ) -> None:
        wanted = batch_number.strip()
        for other in self._batch_repo.list_by_product(product_id):
            if other.id != exclude_id and other.batch_number == wanted:
                raise ValidationError(
                    f"Batch number '{wanted}' already exists for product '{product_id}'"
                )

    def _publish(self, product_id: str) -> None:
        if not self._observers:
            return
        # The total is read and delivered under one per-product lock so
        # observers see readings in the order they were taken.
        try:
            with self._publish_locks.hold([product_id]):
                total = self.total_remaining(product_id)
                for observer in self._observers:
                    try:
                        observer.on_mutation(product_id, total)
                    except Exception:
                        # stock is already committed; an observer must never undo that
                        logger.exception(
                            "stock_observer_failed",
                            product_id=product_id,
                            observer=type(observer).__name__,
                        )
        except ConflictError:
            logger.warning("stock_publish_skipped", product_id=product_id)
