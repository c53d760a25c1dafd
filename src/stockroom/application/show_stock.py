"""Application services: stock levels and the manual low-stock sweep."""

from __future__ import annotations

from stockroom.application.dto import StockLevelDTO
from stockroom.domain.model.principal import Principal
from stockroom.domain.repository.product_repository import ProductRepository
from stockroom.domain.service.batch_ledger import BatchLedger
from stockroom.domain.service.low_stock_monitor import LowStockItem, LowStockMonitor


class ShowStockLevelsHandler:

    def __init__(
        self,
        ledger: BatchLedger,
        product_repo: ProductRepository,
        monitor: LowStockMonitor,
    ) -> None:
        self._ledger = ledger
        self._product_repo = product_repo
        self._monitor = monitor

    def handle(self) -> list[StockLevelDTO]:
        levels = []
        for product in self._product_repo.list_all():
            total = self._ledger.total_remaining(product.id)
            threshold = self._monitor.threshold_for(product.id)
            levels.append(
                StockLevelDTO(
                    product_id=product.id,
                    product_name=product.name,
                    total_remaining=total,
                    threshold=threshold,
                    is_low=total < threshold,
                )
            )
        return levels


class SendLowStockAlertHandler:

    def __init__(
        self,
        ledger: BatchLedger,
        product_repo: ProductRepository,
        monitor: LowStockMonitor,
    ) -> None:
        self._ledger = ledger
        self._product_repo = product_repo
        self._monitor = monitor

    def handle(self, principal: Principal) -> list[LowStockItem]:
        """Send one alert listing every product currently below threshold."""
        principal.require_admin()
        levels = {
            p.id: self._ledger.total_remaining(p.id) for p in self._product_repo.list_all()
        }
        return self._monitor.sweep(levels)
