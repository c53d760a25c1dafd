"""Tests for alert delivery: the thread-pool dispatcher and the notifiers."""

import json

import httpx
import pytest

from stockroom.domain.service.low_stock_monitor import LowStockItem
from stockroom.infrastructure.notification.alert_dispatcher import ThreadPoolAlertDispatcher
from stockroom.infrastructure.notification.notifiers import LogNotifier, WebhookNotifier
from tests.fakes import RecordingNotifier

ITEMS = [LowStockItem("1", "Paracetamol", 4, 10)]


class TestThreadPoolAlertDispatcher:

    def test_delivers_in_the_background(self):
        notifier = RecordingNotifier()
        dispatcher = ThreadPoolAlertDispatcher(notifier, workers=1)

        dispatcher.dispatch(ITEMS)

        assert dispatcher.flush(timeout=5)
        assert notifier.sent == [ITEMS]
        dispatcher.shutdown()

    def test_failing_notifier_is_contained(self):
        dispatcher = ThreadPoolAlertDispatcher(RecordingNotifier(fail=True), workers=1)

        dispatcher.dispatch(ITEMS)  # must not raise

        assert dispatcher.flush(timeout=5)
        dispatcher.shutdown()

    def test_dispatch_after_shutdown_is_dropped(self):
        notifier = RecordingNotifier()
        dispatcher = ThreadPoolAlertDispatcher(notifier)
        dispatcher.shutdown()

        dispatcher.dispatch(ITEMS)

        assert notifier.sent == []


class TestWebhookNotifier:

    def test_posts_json_payload(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return httpx.Response(204)

        notifier = WebhookNotifier(
            "https://hooks.example.test/stock", transport=httpx.MockTransport(handler)
        )
        notifier.send_low_stock_alert(ITEMS)

        assert seen == [{
            "subject": "Low Stock Alert",
            "products": [
                {"product_id": "1", "name": "Paracetamol", "current_stock": 4, "threshold": 10}
            ],
        }]

    def test_error_status_raises(self):
        notifier = WebhookNotifier(
            "https://hooks.example.test/stock",
            transport=httpx.MockTransport(lambda request: httpx.Response(502)),
        )
        with pytest.raises(httpx.HTTPStatusError):
            notifier.send_low_stock_alert(ITEMS)


def test_log_notifier_never_raises():
    LogNotifier().send_low_stock_alert(ITEMS)
