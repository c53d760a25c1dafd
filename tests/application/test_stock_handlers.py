"""Integration tests for the admin stock use cases and stock queries."""

from datetime import date

import pytest

from stockroom.application.receive_stock import ReceiveStockHandler
from stockroom.application.show_batches import ShowBatchesHandler
from stockroom.application.show_stock import SendLowStockAlertHandler, ShowStockLevelsHandler
from stockroom.application.update_batch import DeleteBatchHandler, UpdateBatchHandler
from stockroom.domain.exceptions import (
    ConflictError,
    EntityNotFoundError,
    ForbiddenError,
    ValidationError,
)
from stockroom.domain.model.principal import Principal, Role
from tests.fakes import World

ADMIN = Principal("root", Role.ADMIN)
ALICE = Principal("alice")


@pytest.fixture
def world():
    return World()


class TestReceiveStock:

    def test_admin_receives_a_batch(self, world):
        handler = ReceiveStockHandler(world.ledger)

        dto = handler.handle(
            ADMIN, "p1", 50, date(2024, 6, 1), "s1", "4.75",
            batch_number="LOT-100", manufacturing_date=date(2023, 6, 1),
        )

        assert dto.batch_number == "LOT-100"
        assert dto.quantity_remaining == 50
        assert dto.cost_price == "Rs. 4.75"
        assert dto.selling_price == "Rs. 12.50"
        assert dto.status == "active"

    def test_customers_cannot_receive_stock(self, world):
        with pytest.raises(ForbiddenError):
            ReceiveStockHandler(world.ledger).handle(
                ALICE, "p1", 5, date(2024, 6, 1), "s1", "1.00"
            )
        assert world.batches.list_all() == []

    def test_manufacturing_date_must_precede_expiry(self, world):
        with pytest.raises(ValidationError, match="manufacturing"):
            ReceiveStockHandler(world.ledger).handle(
                ADMIN, "p1", 5, date(2024, 6, 1), "s1", "1.00",
                manufacturing_date=date(2024, 7, 1),
            )

    def test_bad_price(self, world):
        with pytest.raises(ValidationError, match="Invalid money"):
            ReceiveStockHandler(world.ledger).handle(
                ADMIN, "p1", 5, date(2024, 6, 1), "s1", "cheap"
            )


class TestBatchMaintenance:

    def test_update_batch_prices(self, world):
        batch = world.receive()
        dto = UpdateBatchHandler(world.ledger).handle(ADMIN, batch.id, selling_price="13.00")
        assert dto.selling_price == "Rs. 13.00"

    def test_delete_untouched_batch(self, world):
        batch = world.receive()
        DeleteBatchHandler(world.ledger).handle(ADMIN, batch.id)
        assert world.batches.get_by_id(batch.id) is None

    def test_delete_allocated_batch_conflicts(self, world):
        batch = world.receive()
        world.engine.allocate("p1", 1)
        with pytest.raises(ConflictError):
            DeleteBatchHandler(world.ledger).handle(ADMIN, batch.id)

    def test_only_admins_maintain_batches(self, world):
        batch = world.receive()
        with pytest.raises(ForbiddenError):
            UpdateBatchHandler(world.ledger).handle(ALICE, batch.id, batch_number="X")
        with pytest.raises(ForbiddenError):
            DeleteBatchHandler(world.ledger).handle(ALICE, batch.id)


class TestBatchQueries:

    def test_for_product_and_by_status(self, world):
        old = world.receive(expiry=date(2023, 12, 20))
        world.clock.set_date(date(2023, 12, 2))
        new = world.receive()
        world.clock.set_date(date(2023, 12, 21))
        handler = ShowBatchesHandler(world.ledger, world.products)

        assert [b.id for b in handler.for_product("p1")] == [new.id, old.id]
        assert [b.id for b in handler.by_status("expired")] == [old.id]
        assert handler.get(old.id).status == "expired"

    def test_unknown_product(self, world):
        with pytest.raises(EntityNotFoundError):
            ShowBatchesHandler(world.ledger, world.products).for_product("ghost")

    def test_unknown_status(self, world):
        with pytest.raises(ValidationError):
            ShowBatchesHandler(world.ledger, world.products).by_status("mouldy")


class TestStockLevels:

    def test_levels_and_manual_alert(self, world):
        world.receive("p1", quantity=25)
        world.receive("p2", quantity=4)
        world.dispatcher.alerts.clear()

        levels = {
            lvl.product_id: lvl
            for lvl in ShowStockLevelsHandler(world.ledger, world.products, world.monitor).handle()
        }
        assert levels["p1"].total_remaining == 25
        assert not levels["p1"].is_low
        assert levels["p2"].is_low

        sent = SendLowStockAlertHandler(world.ledger, world.products, world.monitor).handle(ADMIN)
        assert [i.product_id for i in sent] == ["p2"]
        assert len(world.dispatcher.alerts) == 1

    def test_manual_alert_is_admin_only(self, world):
        with pytest.raises(ForbiddenError):
            SendLowStockAlertHandler(world.ledger, world.products, world.monitor).handle(ALICE)
