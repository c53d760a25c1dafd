"""Unit tests for order creation, transitions and cancellation."""

from datetime import date

import pytest

from stockroom.domain.exceptions import (
    ConflictError,
    EntityNotFoundError,
    ForbiddenError,
    InsufficientStockError,
    InvalidTransitionError,
    OrderCreationFailed,
    ValidationError,
)
from stockroom.domain.model.order import Allocation, LineRequest, OrderStatus
from stockroom.domain.model.principal import Principal, Role
from stockroom.domain.model.value_objects import Money
from stockroom.domain.service.order_state_machine import OrderStateMachine
from tests.fakes import World

ADMIN = Principal("root", Role.ADMIN)
ALICE = Principal("alice")
BOB = Principal("bob")


@pytest.fixture
def world():
    return World()


class TestCreateOrder:

    def test_allocates_every_line_and_snapshots_price(self, world):
        b1 = world.receive("p1", quantity=5, expiry=date(2024, 1, 1))
        b2 = world.receive("p1", quantity=5, expiry=date(2024, 2, 1))
        b3 = world.receive("p2", quantity=4)

        order = world.state_machine.create_order(
            "alice",
            [LineRequest("p1", 7), LineRequest("p2", 1)],
            shipping_address="  12 Galle Road  ",
        )

        assert order.id == 1
        assert order.status == OrderStatus.PENDING
        assert order.lines[0].allocations == [Allocation(b1.id, 5), Allocation(b2.id, 2)]
        assert order.lines[1].allocations == [Allocation(b3.id, 1)]
        assert order.total == Money.of("127.50")
        assert order.shipping_address == "12 Galle Road"
        assert [h.actor for h in order.status_history] == ["alice"]

        world.products.get_by_id("p1").update_price(Money.of("99.00"))
        stored = world.state_machine.get_order(order.id)
        assert stored.lines[0].unit_price == Money.of("12.50")

    def test_failure_rolls_back_earlier_lines(self, world):
        b1 = world.receive("p1", quantity=10)
        world.receive("p2", quantity=2)

        with pytest.raises(OrderCreationFailed) as exc_info:
            world.state_machine.create_order(
                "alice", [LineRequest("p1", 4), LineRequest("p2", 3)]
            )

        assert exc_info.value.line_index == 1
        assert isinstance(exc_info.value.cause, InsufficientStockError)
        assert exc_info.value.cause.available == 2
        assert world.remaining(b1.id) == 10
        assert world.orders.list_by_user("alice") == []

    def test_storage_failure_rolls_back(self, world, monkeypatch):
        b1 = world.receive("p1", quantity=10)

        def broken_add(order):
            raise ConflictError("disk full")

        monkeypatch.setattr(world.orders, "add", broken_add)

        with pytest.raises(ConflictError):
            world.state_machine.create_order("alice", [LineRequest("p1", 4)])
        assert world.remaining(b1.id) == 10

    def test_failed_rollback_keeps_the_creation_error(self, world, monkeypatch):
        world.receive("p1", quantity=10)
        world.receive("p2", quantity=2)
        real = world.ledger.adjust_remaining

        def restore_fails(batch_id, delta):
            if delta > 0:
                raise ConflictError("write lost")
            return real(batch_id, delta)

        monkeypatch.setattr(world.ledger, "adjust_remaining", restore_fails)

        with pytest.raises(OrderCreationFailed) as exc_info:
            world.state_machine.create_order(
                "alice", [LineRequest("p1", 4), LineRequest("p2", 3)]
            )

        assert exc_info.value.line_index == 1
        assert isinstance(exc_info.value.cause, InsufficientStockError)
        assert world.orders.list_by_user("alice") == []

    def test_empty_order_rejected(self, world):
        with pytest.raises(ValidationError, match="at least one line"):
            world.state_machine.create_order("alice", [])

    def test_line_limit(self, world):
        world.receive("p1", quantity=100)
        machine = OrderStateMachine(
            world.orders, world.products, world.engine, clock=world.clock, max_lines=2
        )
        with pytest.raises(ValidationError, match="Maximum 2 lines"):
            machine.create_order("alice", [LineRequest("p1", 1)] * 3)
        assert world.engine.available("p1") == 100

    def test_unknown_product_rejected_before_allocation(self, world):
        b1 = world.receive("p1", quantity=10)
        with pytest.raises(EntityNotFoundError):
            world.state_machine.create_order(
                "alice", [LineRequest("p1", 2), LineRequest("ghost", 1)]
            )
        assert world.remaining(b1.id) == 10

    def test_bad_quantity_rejected(self, world):
        world.receive("p1")
        with pytest.raises(ValidationError):
            world.state_machine.create_order("alice", [LineRequest("p1", 0)])


class TestTransitions:

    @pytest.fixture
    def order(self, world):
        world.receive("p1", quantity=20)
        return world.state_machine.create_order("alice", [LineRequest("p1", 5)])

    def test_happy_path_to_delivered(self, world, order):
        for target in ("PROCESSING", "SHIPPED", "DELIVERED"):
            world.state_machine.transition(order.id, target, ADMIN)

        stored = world.state_machine.get_order(order.id)
        assert stored.status == OrderStatus.DELIVERED
        assert [h.status for h in stored.status_history] == [
            OrderStatus.PENDING,
            OrderStatus.PROCESSING,
            OrderStatus.SHIPPED,
            OrderStatus.DELIVERED,
        ]
        assert world.engine.available("p1") == 15

    def test_skipping_a_step_is_rejected(self, world, order):
        with pytest.raises(InvalidTransitionError):
            world.state_machine.transition(order.id, OrderStatus.SHIPPED, ADMIN)

    def test_same_status_is_a_no_op(self, world, order):
        world.state_machine.transition(order.id, "PROCESSING", ADMIN)
        again = world.state_machine.transition(order.id, "processing", ADMIN)
        assert again.status == OrderStatus.PROCESSING
        assert len(again.status_history) == 2

    def test_unknown_status_string(self, world, order):
        with pytest.raises(ValidationError, match="Invalid order status"):
            world.state_machine.transition(order.id, "LOST", ADMIN)

    def test_customers_cannot_advance_orders(self, world, order):
        with pytest.raises(ForbiddenError):
            world.state_machine.transition(order.id, "PROCESSING", ALICE)

    def test_unknown_order(self, world):
        with pytest.raises(EntityNotFoundError, match="Order #42"):
            world.state_machine.transition(42, "PROCESSING", ADMIN)

    def test_stale_write_is_retried(self, world, order):
        world.orders.fail_next_updates = 1
        moved = world.state_machine.transition(order.id, "PROCESSING", ADMIN)
        assert moved.status == OrderStatus.PROCESSING

    def test_retry_ceiling(self, world, order):
        world.orders.fail_next_updates = 3
        with pytest.raises(ConflictError, match="giving up"):
            world.state_machine.transition(order.id, "PROCESSING", ADMIN)
        assert world.state_machine.get_order(order.id).status == OrderStatus.PENDING


class TestCancellation:

    @pytest.fixture
    def order(self, world):
        self.b1 = world.receive("p1", quantity=5, expiry=date(2024, 1, 1))
        self.b2 = world.receive("p1", quantity=5, expiry=date(2024, 2, 1))
        return world.state_machine.create_order("alice", [LineRequest("p1", 7)])

    def test_cancel_restores_exact_batches(self, world, order):
        world.state_machine.cancel(order.id, ALICE)

        assert world.remaining(self.b1.id) == 5
        assert world.remaining(self.b2.id) == 5
        assert world.state_machine.get_order(order.id).status == OrderStatus.CANCELLED

    def test_second_cancel_fails_and_returns_nothing_more(self, world, order):
        world.state_machine.cancel(order.id, ALICE)
        with pytest.raises(InvalidTransitionError):
            world.state_machine.cancel(order.id, ALICE)
        assert world.engine.available("p1") == 10

    def test_cancel_from_processing(self, world, order):
        world.state_machine.transition(order.id, "PROCESSING", ADMIN)
        world.state_machine.cancel(order.id, ADMIN)
        assert world.engine.available("p1") == 10

    def test_shipped_order_cannot_be_cancelled(self, world, order):
        world.state_machine.transition(order.id, "PROCESSING", ADMIN)
        world.state_machine.transition(order.id, "SHIPPED", ADMIN)
        with pytest.raises(InvalidTransitionError):
            world.state_machine.cancel(order.id, ADMIN)
        assert world.engine.available("p1") == 3

    def test_other_customers_cannot_cancel(self, world, order):
        with pytest.raises(ForbiddenError):
            world.state_machine.cancel(order.id, BOB)
        assert world.engine.available("p1") == 3

    def test_cancel_survives_a_stale_write(self, world, order):
        world.orders.fail_next_updates = 1

        world.state_machine.cancel(order.id, ALICE)

        assert world.remaining(self.b1.id) == 5
        assert world.remaining(self.b2.id) == 5

    def test_cancel_gives_up_without_leaking_stock(self, world, order):
        world.orders.fail_next_updates = 3

        with pytest.raises(ConflictError):
            world.state_machine.cancel(order.id, ALICE)

        assert world.engine.available("p1") == 3
        assert world.state_machine.get_order(order.id).status == OrderStatus.PENDING

    def test_failed_restore_leaves_order_and_stock_untouched(self, world, order, monkeypatch):
        real = world.ledger.adjust_remaining
        failures = [ConflictError("write lost")]

        def restore_fails_once_on_b2(batch_id, delta):
            if batch_id == self.b2.id and delta > 0 and failures:
                raise failures.pop()
            return real(batch_id, delta)

        monkeypatch.setattr(world.ledger, "adjust_remaining", restore_fails_once_on_b2)

        with pytest.raises(ConflictError, match="write lost"):
            world.state_machine.cancel(order.id, ALICE)

        assert world.state_machine.get_order(order.id).status == OrderStatus.PENDING
        assert world.remaining(self.b1.id) == 0
        assert world.remaining(self.b2.id) == 3

        world.state_machine.cancel(order.id, ALICE)

        assert world.remaining(self.b1.id) == 5
        assert world.remaining(self.b2.id) == 5

    def test_cancel_restores_stock_to_an_expired_batch(self, world, order):
        world.clock.set_date(date(2024, 1, 15))
        world.state_machine.cancel(order.id, ALICE)
        assert world.remaining(self.b1.id) == 5
        assert world.engine.available("p1") == 5
