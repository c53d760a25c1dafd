"""Domain service: Allocation Engine.

Satisfies a requested quantity of a product from its batches using
First-Expiry-First-Out. Allocation is all-or-nothing:

1. Plan: walk the active batches in FEFO order and decide how much to
   take from each. Fails with InsufficientStockError before touching
   anything if the batches cannot cover the request.
2. Commit: lock the planned batches (in batch-id order), confirm the
   plan still holds, then decrement each batch. A plan invalidated by a
   concurrent writer is recomputed.
"""

from __future__ import annotations

from stockroom.config.logging import get_logger
from stockroom.domain.exceptions import (
    ConflictError,
    DomainException,
    EntityNotFoundError,
    InsufficientStockError,
)
from stockroom.domain.model.order import Allocation
from stockroom.domain.model.value_objects import Quantity
from stockroom.domain.service.batch_ledger import BatchLedger

logger = get_logger(__name__)


class AllocationEngine:

    def __init__(self, ledger: BatchLedger, max_retries: int = 3) -> None:
        self._ledger = ledger
        self._max_retries = max_retries

    def available(self, product_id: str) -> int:
        """Units that could be allocated right now."""
        return self._ledger.total_remaining(product_id)

    def plan(self, product_id: str, quantity: int) -> list[Allocation]:
        """Compute a FEFO allocation without mutating anything."""
        needed = Quantity(quantity).value
        batches = self._ledger.active_batches(product_id)

        available = sum(b.quantity_remaining for b in batches)
        if available < needed:
            raise InsufficientStockError(product_id, requested=needed, available=available)

        plan: list[Allocation] = []
        for batch in batches:
            if needed == 0:
                break
            take = min(batch.quantity_remaining, needed)
            plan.append(Allocation(batch_id=batch.id, qty_taken=take))
            needed -= take
        return plan

    def allocate(self, product_id: str, quantity: int) -> list[Allocation]:
        """Take ``quantity`` units of a product from its batches.

        Returns the committed allocations in FEFO order. Raises
        InsufficientStockError (nothing is changed) or ConflictError if the
        plan kept getting invalidated by concurrent allocations.
        """
        for attempt in range(1, self._max_retries + 1):
            try:
                plan = self.plan(product_id, quantity)
            except InsufficientStockError as exc:
                logger.info(
                    "allocation_rejected",
                    product_id=product_id,
                    requested=exc.requested,
                    available=exc.available,
                )
                raise

            with self._ledger.hold(a.batch_id for a in plan):
                if not self._still_holds(plan):
                    logger.warning(
                        "allocation_plan_stale", product_id=product_id, attempt=attempt
                    )
                    continue
                committed = self._commit(plan)

            logger.info(
                "allocation_committed",
                product_id=product_id,
                quantity=quantity,
                batches=[a.batch_id for a in committed],
            )
            return committed

        raise ConflictError(
            f"Stock for product '{product_id}' changed concurrently "
            f"{self._max_retries} times; allocation abandoned"
        )

    def deallocate(self, allocations: list[Allocation]) -> None:
        """Put previously allocated units back on their batches.

        All-or-nothing like ``allocate``: if one batch cannot take its
        units back, the units already restored to the others are taken
        again before the error propagates.
        """
        done: list[Allocation] = []
        try:
            for allocation in allocations:
                self._ledger.adjust_remaining(allocation.batch_id, allocation.qty_taken)
                done.append(allocation)
        except DomainException:
            if done:
                try:
                    self.reclaim(done)
                except DomainException:
                    logger.exception(
                        "deallocation_compensation_failed",
                        batches=[a.batch_id for a in done],
                    )
            raise
        if allocations:
            logger.info(
                "allocation_reversed",
                batches=[a.batch_id for a in allocations],
                quantity=sum(a.qty_taken for a in allocations),
            )

    def reclaim(self, allocations: list[Allocation]) -> None:
        """Take back exactly the units of an earlier ``deallocate``.

        Used to undo a reversal whose owning write lost a race. Expiry is
        not checked since the units were already committed to the order.
        """
        with self._ledger.hold(a.batch_id for a in allocations):
            for allocation in allocations:
                batch = self._ledger.get_batch(allocation.batch_id)
                if batch.quantity_remaining < allocation.qty_taken:
                    raise ConflictError(
                        f"Batch {batch.batch_number} no longer holds the "
                        f"{allocation.qty_taken} units released from it"
                    )
            self._commit(allocations)

    # --- Internal helpers -----------------------------------------------------

    def _still_holds(self, plan: list[Allocation]) -> bool:
        today = self._ledger.today()
        for allocation in plan:
            try:
                batch = self._ledger.get_batch(allocation.batch_id)
            except EntityNotFoundError:
                return False
            if not batch.is_eligible(today) or batch.quantity_remaining < allocation.qty_taken:
                return False
        return True

    def _commit(self, plan: list[Allocation]) -> list[Allocation]:
        done: list[Allocation] = []
        try:
            for allocation in plan:
                self._ledger.adjust_remaining(allocation.batch_id, -allocation.qty_taken)
                done.append(allocation)
        except DomainException:
            self.deallocate(done)
            raise
        return done
