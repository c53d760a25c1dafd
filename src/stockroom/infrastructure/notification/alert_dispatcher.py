"""Fire-and-forget delivery of low-stock alerts.

Alerts are handed to a small thread pool so the ledger call that
triggered them returns immediately. Delivery failures are logged and
dropped; stock levels never depend on an alert getting through.
"""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait

from stockroom.config.logging import get_logger
from stockroom.domain.service.low_stock_monitor import (
    AlertDispatcher,
    LowStockItem,
    LowStockNotifier,
)

logger = get_logger(__name__)


class ThreadPoolAlertDispatcher(AlertDispatcher):

    def __init__(self, notifier: LowStockNotifier, workers: int = 2) -> None:
        self._notifier = notifier
        self._executor = ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="low-stock-alert"
        )
        self._pending: set[Future] = set()
        self._lock = threading.Lock()

    def dispatch(self, items: list[LowStockItem]) -> None:
        try:
            future = self._executor.submit(self._deliver, list(items))
        except RuntimeError:
            # executor already shut down
            logger.warning("low_stock_alert_dropped", products=[i.product_id for i in items])
            return
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)

    def flush(self, timeout: float | None = None) -> bool:
        """Wait for queued alerts. Returns False if some are still running."""
        with self._lock:
            pending = set(self._pending)
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def shutdown(self, timeout: float | None = None) -> None:
        self.flush(timeout)
        self._executor.shutdown(wait=False, cancel_futures=True)

    def _deliver(self, items: list[LowStockItem]) -> None:
        products = [i.product_id for i in items]
        try:
            self._notifier.send_low_stock_alert(items)
        except Exception:
            logger.warning("low_stock_alert_failed", products=products, exc_info=True)
            return
        logger.info("low_stock_alert_delivered", products=products)

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)
