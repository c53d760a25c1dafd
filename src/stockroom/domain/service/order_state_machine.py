"""Domain service: Order State Machine.

Turns requested lines into an allocated order and drives every later
status change. Two guarantees matter here:

- an order is never stored half-allocated: if any line cannot be
  allocated, the lines already allocated in the same call are reversed
  before the failure is reported;
- cancellation returns stock exactly once: the status is re-read under
  the order's lock, so a cancel racing a shipment sees whichever landed
  first and fails with InvalidTransitionError if that was the shipment.
"""

from __future__ import annotations

from stockroom.config.logging import get_logger
from stockroom.domain.exceptions import (
    ConflictError,
    DomainException,
    EntityNotFoundError,
    InsufficientStockError,
    OrderCreationFailed,
    StaleVersionError,
    ValidationError,
)
from stockroom.domain.model.order import LineRequest, Order, OrderLine, OrderStatus
from stockroom.domain.model.principal import Principal
from stockroom.domain.model.value_objects import Quantity
from stockroom.domain.repository.order_repository import OrderRepository
from stockroom.domain.repository.product_repository import ProductRepository
from stockroom.domain.service.allocation_engine import AllocationEngine
from stockroom.domain.service.batch_ledger import Clock, utc_now
from stockroom.domain.service.locking import KeyedLocks

logger = get_logger(__name__)


class OrderStateMachine:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        engine: AllocationEngine,
        clock: Clock = utc_now,
        max_retries: int = 3,
        max_lines: int = 50,
        lock_timeout: float = 5.0,
    ) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo
        self._engine = engine
        self._clock = clock
        self._max_retries = max_retries
        self._max_lines = max_lines
        self._locks = KeyedLocks(timeout=lock_timeout)

    # --- Creation -------------------------------------------------------------

    def create_order(
        self,
        user_id: str,
        requests: list[LineRequest],
        actor: str | None = None,
        shipping_address: str = "",
    ) -> Order:
        """Allocate every line in submission order and store a PENDING order.

        Raises ValidationError / EntityNotFoundError before any stock is
        touched, and OrderCreationFailed (carrying the first
        InsufficientStockError) after rolling back earlier lines.
        """
        if not requests:
            raise ValidationError("Order must contain at least one line")
        if len(requests) > self._max_lines:
            raise ValidationError(f"Maximum {self._max_lines} lines per order")

        products = []
        for request in requests:
            Quantity(request.quantity)
            product = self._product_repo.get_by_id(request.product_id)
            if product is None:
                raise EntityNotFoundError(f"Product with ID '{request.product_id}' not found")
            products.append(product)

        lines: list[OrderLine] = []
        try:
            for index, (request, product) in enumerate(zip(requests, products)):
                try:
                    allocations = self._engine.allocate(request.product_id, request.quantity)
                except InsufficientStockError as exc:
                    raise OrderCreationFailed(exc, index) from exc
                lines.append(
                    OrderLine(
                        product_id=product.id,
                        product_name=product.name,
                        quantity=Quantity(request.quantity),
                        unit_price=product.price,  # <-- price snapshot
                        allocations=allocations,
                    )
                )

            now = self._clock()
            order = Order.place(
                user_id=user_id,
                lines=lines,
                actor=actor or user_id,
                at=now,
                shipping_address=shipping_address,
            )
            self._order_repo.add(order)
        except Exception:
            self._rollback(user_id, lines)
            raise

        logger.info(
            "order_created",
            order_id=order.id,
            user_id=user_id,
            lines=len(order.lines),
            total=str(order.total.amount),
        )
        return order

    # --- Transitions ----------------------------------------------------------

    def transition(
        self, order_id: int, target: OrderStatus | str, actor: Principal
    ) -> Order:
        """Move an order to ``target``.

        Cancelling is open to the order's owner and to admins; every other
        move is admin-only. Re-sending the status an active order already
        has is a no-op.
        """
        if isinstance(target, str):
            target = OrderStatus.parse(target)

        with self._locks.hold([str(order_id)]):
            for attempt in range(1, self._max_retries + 1):
                order = self.get_order(order_id)
                if target == OrderStatus.CANCELLED:
                    actor.require_owner_or_admin(order.user_id)
                else:
                    actor.require_admin()

                expected = order.version
                previous = order.status
                if not order.check_transition(target):
                    return order

                allocations = order.allocations if target == OrderStatus.CANCELLED else []
                self._engine.deallocate(allocations)
                order.transition_to(target, actor.user_id, self._clock())
                try:
                    self._order_repo.update(order, expected)
                except StaleVersionError:
                    logger.warning("order_version_conflict", order_id=order_id, attempt=attempt)
                    self._engine.reclaim(allocations)
                    continue

                logger.info(
                    "order_transitioned",
                    order_id=order_id,
                    from_status=previous.value,
                    to_status=target.value,
                    actor=actor.user_id,
                )
                return order

        raise ConflictError(
            f"Order #{order_id} changed concurrently {self._max_retries} times; giving up"
        )

    def cancel(self, order_id: int, actor: Principal) -> Order:
        return self.transition(order_id, OrderStatus.CANCELLED, actor)

    # --- Queries --------------------------------------------------------------

    def get_order(self, order_id: int) -> Order:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        return order

    # --- Internal helpers -----------------------------------------------------

    def _rollback(self, user_id: str, lines: list[OrderLine]) -> None:
        # Runs while the creation error is propagating; a line that cannot
        # be restored is logged so that error is the one the caller sees.
        for line in reversed(lines):
            try:
                self._engine.deallocate(line.allocations)
            except DomainException:
                logger.exception(
                    "order_rollback_line_failed",
                    user_id=user_id,
                    product_id=line.product_id,
                )
        logger.warning(
            "order_creation_rolled_back",
            user_id=user_id,
            reversed_lines=len(lines),
        )
