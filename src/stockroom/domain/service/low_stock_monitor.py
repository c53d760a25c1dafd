"""Domain service: Low-Stock Monitor.

Subscribed to the Batch Ledger, it sees each product's stock level after
every mutation and raises one alert when the level drops below the
product's threshold. A per-product latch keeps it quiet while stock stays
low; the latch clears once stock is back at or above the threshold.

Latches live in a repository so they survive restarts and are shared by
every process working on the same store.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from stockroom.config.logging import get_logger
from stockroom.domain.repository.latch_repository import LowStockLatchRepository
from stockroom.domain.repository.product_repository import ProductRepository
from stockroom.domain.service.batch_ledger import StockObserver

logger = get_logger(__name__)


@dataclass(frozen=True)
class LowStockItem:
    product_id: str
    name: str
    current_stock: int
    threshold: int


class LowStockNotifier(ABC):
    """The notification collaborator: delivers one low-stock alert."""

    @abstractmethod
    def send_low_stock_alert(self, items: list[LowStockItem]) -> None:
        """Deliver the alert, raising on failure."""


class AlertDispatcher(ABC):
    """Hands low-stock alerts to the notification collaborator.

    Implementations must return promptly and must not raise: delivery
    happens out of band and failures are logged there.
    """

    @abstractmethod
    def dispatch(self, items: list[LowStockItem]) -> None:
        """Queue one alert listing ``items``."""


class LowStockMonitor(StockObserver):

    def __init__(
        self,
        product_repo: ProductRepository,
        latch_repo: LowStockLatchRepository,
        dispatcher: AlertDispatcher,
        default_threshold: int = 10,
    ) -> None:
        self._product_repo = product_repo
        self._latch_repo = latch_repo
        self._dispatcher = dispatcher
        self._default_threshold = default_threshold

    def threshold_for(self, product_id: str) -> int:
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            return self._default_threshold
        return product.threshold_or(self._default_threshold)

    def is_latched(self, product_id: str) -> bool:
        return self._latch_repo.is_set(product_id)

    def on_mutation(self, product_id: str, total_remaining: int) -> None:
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            name, threshold = product_id, self._default_threshold
        else:
            name, threshold = product.name, product.threshold_or(self._default_threshold)

        if total_remaining >= threshold:
            if self._latch_repo.clear(product_id):
                logger.info("low_stock_latch_cleared", product_id=product_id, stock=total_remaining)
            return

        if self._latch_repo.set(product_id):
            logger.info(
                "low_stock_latch_set",
                product_id=product_id,
                stock=total_remaining,
                threshold=threshold,
            )
            self._dispatcher.dispatch(
                [LowStockItem(product_id, name, total_remaining, threshold)]
            )

    def sweep(self, stock_levels: dict[str, int]) -> list[LowStockItem]:
        """Alert on every product below threshold, ignoring the latches.

        Sends a single alert listing all of them; nothing is sent when no
        product is low. Latch state is left as it is.
        """
        low: list[LowStockItem] = []
        for product in self._product_repo.list_all():
            stock = stock_levels.get(product.id, 0)
            threshold = product.threshold_or(self._default_threshold)
            if stock < threshold:
                low.append(LowStockItem(product.id, product.name, stock, threshold))
        if low:
            self._dispatcher.dispatch(low)
        return low
