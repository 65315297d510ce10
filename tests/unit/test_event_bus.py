"""
Unit tests for EventBus.

Tests cover:
- Delivery order and exactly-once delivery
- Unsubscribe
- Isolation of failing handlers
"""

import logging

from cryptofolio.domain.models import Topic
from cryptofolio.domain.views import AssetDeleted
from cryptofolio.services import EventBus


class TestPublishSubscribe:
    """Basic delivery semantics."""

    def test_handlers_called_in_subscription_order(self):
        bus = EventBus()
        received: list[str] = []
        bus.subscribe(Topic.ASSET_DELETED, lambda p: received.append(f"first:{p.asset_id}"))
        bus.subscribe(Topic.ASSET_DELETED, lambda p: received.append(f"second:{p.asset_id}"))

        bus.publish(Topic.ASSET_DELETED, AssetDeleted(asset_id="a1"))

        assert received == ["first:a1", "second:a1"]

    def test_only_matching_topic_delivered(self):
        bus = EventBus()
        received = []
        bus.subscribe(Topic.ASSET_ADDED, received.append)

        bus.publish(Topic.ASSET_DELETED, AssetDeleted(asset_id="a1"))

        assert received == []

    def test_unsubscribe_stops_delivery(self):
        """
        GIVEN a subscribed handler
        WHEN I call the returned unsubscribe function
        THEN later publishes do not reach it
        """
        bus = EventBus()
        received = []
        unsubscribe = bus.subscribe(Topic.PORTFOLIO_REFRESHED, received.append)

        bus.publish(Topic.PORTFOLIO_REFRESHED, "one")
        unsubscribe()
        unsubscribe()
        bus.publish(Topic.PORTFOLIO_REFRESHED, "two")

        assert received == ["one"]
        assert bus.subscriber_count(Topic.PORTFOLIO_REFRESHED) == 0

    def test_handler_subscribing_during_publish_not_called_same_round(self):
        bus = EventBus()
        late = []

        def subscribe_another(_payload):
            bus.subscribe(Topic.SETTINGS_UPDATED, late.append)

        bus.subscribe(Topic.SETTINGS_UPDATED, subscribe_another)
        bus.publish(Topic.SETTINGS_UPDATED, "x")

        assert late == []


class TestHandlerFailures:
    """A failing handler never blocks the others."""

    def test_failing_handler_does_not_stop_delivery(self, caplog):
        """
        GIVEN three handlers where the middle one raises
        WHEN I publish
        THEN the first and third still receive the event and the error is logged
        """
        bus = EventBus()
        received = []

        def broken(_payload):
            raise RuntimeError("boom")

        bus.subscribe(Topic.ASSET_ADDED, lambda p: received.append("a"))
        bus.subscribe(Topic.ASSET_ADDED, broken)
        bus.subscribe(Topic.ASSET_ADDED, lambda p: received.append("c"))

        with caplog.at_level(logging.ERROR):
            bus.publish(Topic.ASSET_ADDED, None)

        assert received == ["a", "c"]
        assert "asset-added" in caplog.text
