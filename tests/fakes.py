"""In-memory fakes for testing.

The repositories implement the same abstract interfaces as the JSON
repositories but keep everything in a dict. Entities are copied on the
way in and out so tests see the same isolation a real store gives.
"""

from __future__ import annotations

import copy
import threading
from datetime import date, datetime, timezone
from decimal import Decimal

from stockroom.domain.exceptions import StaleVersionError
from stockroom.domain.model.batch import Batch
from stockroom.domain.model.cart import Cart
from stockroom.domain.model.order import Order, OrderStatus
from stockroom.domain.model.product import Product, Supplier
from stockroom.domain.model.value_objects import Money
from stockroom.domain.repository.batch_repository import BatchRepository
from stockroom.domain.repository.cart_repository import CartRepository
from stockroom.domain.repository.latch_repository import LowStockLatchRepository
from stockroom.domain.repository.order_repository import OrderRepository
from stockroom.domain.repository.product_repository import (
    ProductRepository,
    SupplierRepository,
)
from stockroom.domain.service.allocation_engine import AllocationEngine
from stockroom.domain.service.batch_ledger import BatchLedger
from stockroom.domain.service.low_stock_monitor import (
    AlertDispatcher,
    LowStockItem,
    LowStockMonitor,
    LowStockNotifier,
)
from stockroom.domain.service.order_state_machine import OrderStateMachine


class FakeBatchRepository(BatchRepository):

    def __init__(self) -> None:
        self._store: dict[str, Batch] = {}
        self._next_id = 1
        self._lock = threading.Lock()
        self.fail_next_updates = 0  # simulate writers in another process

    def next_id(self) -> str:
        with self._lock:
            batch_id = f"b{self._next_id}"
            self._next_id += 1
            return batch_id

    def get_by_id(self, batch_id: str) -> Batch | None:
        batch = self._store.get(batch_id)
        return copy.deepcopy(batch) if batch is not None else None

    def list_by_product(self, product_id: str) -> list[Batch]:
        return [copy.deepcopy(b) for b in self._store.values() if b.product_id == product_id]

    def list_all(self) -> list[Batch]:
        return [copy.deepcopy(b) for b in self._store.values()]

    def add(self, batch: Batch) -> None:
        self._store[batch.id] = copy.deepcopy(batch)

    def update(self, batch: Batch, expected_version: int) -> None:
        with self._lock:
            if self.fail_next_updates > 0:
                self.fail_next_updates -= 1
                raise StaleVersionError(f"Batch {batch.id} changed")
            self._check(batch.id, expected_version)
            batch.version = expected_version + 1
            self._store[batch.id] = copy.deepcopy(batch)

    def delete(self, batch_id: str, expected_version: int) -> None:
        with self._lock:
            self._check(batch_id, expected_version)
            del self._store[batch_id]

    def _check(self, batch_id: str, expected_version: int) -> None:
        stored = self._store.get(batch_id)
        if stored is None or stored.version != expected_version:
            raise StaleVersionError(f"Batch {batch_id} changed")


class FakeOrderRepository(OrderRepository):

    def __init__(self) -> None:
        self._store: dict[int, Order] = {}
        self._next_id = 1
        self.fail_next_updates = 0

    def next_id(self) -> int:
        return self._next_id

    def get_by_id(self, order_id: int) -> Order | None:
        order = self._store.get(order_id)
        return copy.deepcopy(order) if order is not None else None

    def list_by_user(self, user_id: str) -> list[Order]:
        orders = [copy.deepcopy(o) for o in self._store.values() if o.user_id == user_id]
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    def list_by_status(self, status: OrderStatus) -> list[Order]:
        orders = [copy.deepcopy(o) for o in self._store.values() if o.status == status]
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    def add(self, order: Order) -> None:
        order.id = self._next_id
        self._next_id += 1
        self._store[order.id] = copy.deepcopy(order)

    def update(self, order: Order, expected_version: int) -> None:
        if self.fail_next_updates > 0:
            self.fail_next_updates -= 1
            raise StaleVersionError(f"Order #{order.id} changed")
        stored = self._store.get(order.id)
        if stored is None or stored.version != expected_version:
            raise StaleVersionError(f"Order #{order.id} changed")
        order.version = expected_version + 1
        self._store[order.id] = copy.deepcopy(order)


class FakeProductRepository(ProductRepository):

    def __init__(self, products: list[Product] | None = None) -> None:
        self._store: dict[str, Product] = {}
        for p in products or []:
            self._store[p.id] = p

    def get_by_id(self, product_id: str) -> Product | None:
        return self._store.get(product_id)

    def get_by_name(self, name: str) -> Product | None:
        for p in self._store.values():
            if p.name.lower() == name.lower():
                return p
        return None

    def list_all(self) -> list[Product]:
        return list(self._store.values())

    def save(self, product: Product) -> None:
        self._store[product.id] = product


class FakeSupplierRepository(SupplierRepository):

    def __init__(self, suppliers: list[Supplier] | None = None) -> None:
        self._store = {s.id: s for s in suppliers or []}

    def get_by_id(self, supplier_id: str) -> Supplier | None:
        return self._store.get(supplier_id)

    def list_all(self) -> list[Supplier]:
        return list(self._store.values())

    def save(self, supplier: Supplier) -> None:
        self._store[supplier.id] = supplier


class FakeCartRepository(CartRepository):

    def __init__(self) -> None:
        self._store: dict[str, Cart] = {}

    def get_for_user(self, user_id: str) -> Cart | None:
        cart = self._store.get(user_id)
        return copy.deepcopy(cart) if cart is not None else None

    def save(self, cart: Cart) -> None:
        self._store[cart.user_id] = copy.deepcopy(cart)

    def delete(self, user_id: str) -> None:
        self._store.pop(user_id, None)


class FakeLowStockLatchRepository(LowStockLatchRepository):

    def __init__(self) -> None:
        self._latched: set[str] = set()
        self._lock = threading.Lock()

    def is_set(self, product_id: str) -> bool:
        return product_id in self._latched

    def set(self, product_id: str) -> bool:
        with self._lock:
            if product_id in self._latched:
                return False
            self._latched.add(product_id)
            return True

    def clear(self, product_id: str) -> bool:
        with self._lock:
            if product_id not in self._latched:
                return False
            self._latched.discard(product_id)
            return True


class RecordingDispatcher(AlertDispatcher):
    """Delivers synchronously and remembers every alert."""

    def __init__(self) -> None:
        self.alerts: list[list[LowStockItem]] = []

    def dispatch(self, items: list[LowStockItem]) -> None:
        self.alerts.append(list(items))


class RecordingNotifier(LowStockNotifier):

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent: list[list[LowStockItem]] = []

    def send_low_stock_alert(self, items: list[LowStockItem]) -> None:
        if self.fail:
            raise ConnectionError("mail relay unreachable")
        self.sent.append(list(items))


class FakeClock:
    """A settable clock; starts on 2023-12-01 unless told otherwise."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2023, 12, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def set_date(self, day: date) -> None:
        self.now = datetime(day.year, day.month, day.day, 9, 0, tzinfo=timezone.utc)


def make_product(product_id: str = "p1", name: str = "Paracetamol", price: str = "12.50",
                 threshold: int | None = None) -> Product:
    return Product(
        id=product_id,
        name=name,
        price=Money(Decimal(price)),
        low_stock_threshold=threshold,
    )


class World:
    """A fully wired core on top of the fakes."""

    def __init__(
        self,
        products: list[Product] | None = None,
        default_threshold: int = 10,
        clock: FakeClock | None = None,
        max_retries: int = 3,
        latches: LowStockLatchRepository | None = None,
    ) -> None:
        self.clock = clock or FakeClock()
        self.products = FakeProductRepository(
            products if products is not None
            else [make_product("p1", "Paracetamol"), make_product("p2", "Amoxicillin", "40.00")]
        )
        self.suppliers = FakeSupplierRepository([Supplier(id="s1", name="MedSupply")])
        self.batches = FakeBatchRepository()
        self.orders = FakeOrderRepository()
        self.carts = FakeCartRepository()
        self.latches = latches or FakeLowStockLatchRepository()
        self.dispatcher = RecordingDispatcher()

        self.ledger = BatchLedger(
            self.batches, self.products, self.suppliers,
            clock=self.clock, max_retries=max_retries,
        )
        self.monitor = LowStockMonitor(
            self.products, self.latches, self.dispatcher, default_threshold
        )
        self.ledger.subscribe(self.monitor)
        self.engine = AllocationEngine(self.ledger, max_retries=max_retries)
        self.state_machine = OrderStateMachine(
            self.orders, self.products, self.engine,
            clock=self.clock, max_retries=max_retries,
        )

    def receive(self, product_id: str = "p1", quantity: int = 10,
                expiry: date = date(2024, 6, 1), cost: str = "5.00",
                batch_number: str | None = None) -> Batch:
        return self.ledger.create_batch(
            product_id=product_id,
            quantity=quantity,
            expiry_date=expiry,
            supplier_id="s1",
            cost_price=Money.of(cost),
            batch_number=batch_number,
        )

    def remaining(self, batch_id: str) -> int:
        return self.ledger.get_batch(batch_id).quantity_remaining
