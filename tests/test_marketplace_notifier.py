# tests/test_marketplace_notifier.py
import pytest
import requests
from fastapi import BackgroundTasks
from sqlalchemy.exc import SQLAlchemyError

from posledger.shared.services import marketplace_notifier
from posledger.shared.services.marketplace_notifier import (
    HttpMarketplaceNotifier, NullMarketplaceNotifier, BackgroundMarketplaceNotifier,
    build_notifier, publish_stock_changes
)


class FakeResponse:
    def __init__(self, status_code=200):
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


class TestHttpMarketplaceNotifier:

    def test_posts_stock(self, monkeypatch):
        sent = []

        def fake_post(url, json=None, timeout=None):
            sent.append((url, json, timeout))
            return FakeResponse()

        monkeypatch.setattr(marketplace_notifier.requests, "post", fake_post)

        HttpMarketplaceNotifier("http://sync.local/stock", timeout=2.0).notify_stock("p1", 7)

        assert sent == [("http://sync.local/stock", {"product_id": "p1", "stock": 7}, 2.0)]

    def test_http_error_raises(self, monkeypatch):
        monkeypatch.setattr(marketplace_notifier.requests, "post", lambda *a, **kw: FakeResponse(502))

        with pytest.raises(requests.HTTPError):
            HttpMarketplaceNotifier("http://sync.local/stock").notify_stock("p1", 7)


class TestPublishStockChanges:
    """Best-effort: los errores se registran y no se propagan"""

    def test_one_call_per_product(self, notifier):
        publish_stock_changes(notifier, ["b", "a", "b"], lambda ids: {i: 3 for i in ids})

        assert notifier.calls == [("a", 3), ("b", 3)]

    def test_failing_notifier_is_swallowed(self, failing_notifier):
        publish_stock_changes(failing_notifier, ["a"], lambda ids: {"a": 1})

    def test_stock_read_failure_is_swallowed(self, notifier):
        def broken_read(ids):
            raise SQLAlchemyError("gone")

        publish_stock_changes(notifier, ["a"], broken_read)

        assert notifier.calls == []

    def test_without_notifier(self):
        publish_stock_changes(None, ["a"], lambda ids: {"a": 1})

    def test_background_defers_notification(self, notifier):
        tasks = BackgroundTasks()

        BackgroundMarketplaceNotifier(tasks, notifier).notify_stock("a", 5)

        assert notifier.calls == []
        assert len(tasks.tasks) == 1


class TestBuildNotifier:

    def test_without_url(self, monkeypatch):
        monkeypatch.setattr(marketplace_notifier.settings, "marketplace_notify_url", None)

        assert isinstance(build_notifier(), NullMarketplaceNotifier)

    def test_with_url(self):
        notifier = build_notifier("http://sync.local/stock")

        assert isinstance(notifier, HttpMarketplaceNotifier)
        assert notifier.url == "http://sync.local/stock"
