"""Notification collaborators for low-stock alerts."""

from __future__ import annotations

import httpx

from stockroom.config.logging import get_logger
from stockroom.domain.service.low_stock_monitor import LowStockItem, LowStockNotifier

logger = get_logger(__name__)


class LogNotifier(LowStockNotifier):
    """Writes the alert to the application log. Used when no webhook is set."""

    def send_low_stock_alert(self, items: list[LowStockItem]) -> None:
        for item in items:
            logger.warning(
                "low_stock",
                product_id=item.product_id,
                name=item.name,
                current_stock=item.current_stock,
                threshold=item.threshold,
            )


class WebhookNotifier(LowStockNotifier):
    """POSTs the alert as JSON to an HTTP endpoint (mail relay, chat hook...)."""

    def __init__(
        self, url: str, timeout: float = 5.0, transport: httpx.BaseTransport | None = None
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._transport = transport

    def send_low_stock_alert(self, items: list[LowStockItem]) -> None:
        payload = {
            "subject": "Low Stock Alert",
            "products": [
                {
                    "product_id": item.product_id,
                    "name": item.name,
                    "current_stock": item.current_stock,
                    "threshold": item.threshold,
                }
                for item in items
            ],
        }
        with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
            response = client.post(self.url, json=payload)
            response.raise_for_status()
