"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from dataclasses import dataclass

from stockroom.config.settings import Settings, get_settings
from stockroom.domain.service.allocation_engine import AllocationEngine
from stockroom.domain.service.batch_ledger import BatchLedger
from stockroom.domain.service.low_stock_monitor import LowStockMonitor, LowStockNotifier
from stockroom.domain.service.order_state_machine import OrderStateMachine
from stockroom.infrastructure.notification.alert_dispatcher import ThreadPoolAlertDispatcher
from stockroom.infrastructure.notification.notifiers import LogNotifier, WebhookNotifier
from stockroom.infrastructure.persistence.json_batch_repository import JsonBatchRepository
from stockroom.infrastructure.persistence.json_cart_repository import JsonCartRepository
from stockroom.infrastructure.persistence.json_latch_repository import (
    JsonLowStockLatchRepository,
)
from stockroom.infrastructure.persistence.json_order_repository import JsonOrderRepository
from stockroom.infrastructure.persistence.json_product_repository import (
    JsonProductRepository,
    JsonSupplierRepository,
)


@dataclass
class Services:
    products: JsonProductRepository
    suppliers: JsonSupplierRepository
    orders: JsonOrderRepository
    carts: JsonCartRepository
    ledger: BatchLedger
    engine: AllocationEngine
    monitor: LowStockMonitor
    dispatcher: ThreadPoolAlertDispatcher
    state_machine: OrderStateMachine


def build_notifier(settings: Settings) -> LowStockNotifier:
    if settings.alerts.webhook_url:
        return WebhookNotifier(settings.alerts.webhook_url, settings.alerts.timeout_seconds)
    return LogNotifier()


def build_services(settings: Settings | None = None) -> Services:
    settings = settings or get_settings()
    storage = settings.storage
    rules = settings.inventory

    products = JsonProductRepository(storage.data_dir / storage.products_file)
    suppliers = JsonSupplierRepository(storage.data_dir / storage.suppliers_file)
    batches = JsonBatchRepository(storage.data_dir / storage.batches_file)
    orders = JsonOrderRepository(storage.data_dir / storage.orders_file)
    carts = JsonCartRepository(storage.data_dir / storage.carts_file)
    latches = JsonLowStockLatchRepository(storage.data_dir / storage.latches_file)

    ledger = BatchLedger(
        batches,
        products,
        suppliers,
        max_retries=rules.max_retries,
        lock_timeout=rules.lock_timeout_seconds,
    )
    dispatcher = ThreadPoolAlertDispatcher(build_notifier(settings), settings.alerts.workers)
    monitor = LowStockMonitor(
        products, latches, dispatcher, rules.default_low_stock_threshold
    )
    ledger.subscribe(monitor)

    engine = AllocationEngine(ledger, max_retries=rules.max_retries)
    state_machine = OrderStateMachine(
        orders,
        products,
        engine,
        max_retries=rules.max_retries,
        max_lines=rules.max_order_lines,
        lock_timeout=rules.lock_timeout_seconds,
    )

    return Services(
        products=products,
        suppliers=suppliers,
        orders=orders,
        carts=carts,
        ledger=ledger,
        engine=engine,
        monitor=monitor,
        dispatcher=dispatcher,
        state_machine=state_machine,
    )
