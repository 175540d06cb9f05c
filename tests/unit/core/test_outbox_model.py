"""Unit tests for the OutboxEvent model.

Covers:
- Event creation with all required fields.
- Default status is PENDING.
- mark_as_published() / mark_as_failed(error) / mark_as_relayed() transitions.
- The ``for_aggregate`` and ``due_for_relay`` queryset helpers.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta
from datetime import timezone as dt_timezone

import pytest
from django.utils import timezone
from freezegun import freeze_time

from modules.core.models import EventStatus, OutboxEvent

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_event(**overrides) -> OutboxEvent:
    """Create and persist an OutboxEvent with sensible defaults."""
    defaults = {
        "event_type": "OrderPlaced",
        "payload": {"order_number": "ORD-ABC12345", "total_amount": "99.90"},
        "aggregate_id": "abc-123",
        "topic": "notifications",
    }
    defaults.update(overrides)
    return OutboxEvent.objects.create(**defaults)


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


class TestOutboxEventCreation:
    def test_create_event_with_defaults(self):
        event = _make_event()
        event.refresh_from_db()
        assert event.event_type == "OrderPlaced"
        assert event.aggregate_id == "abc-123"
        assert event.topic == "notifications"
        assert event.status == EventStatus.PENDING
        assert event.processed_at is None
        assert event.error_message is None
        assert event.retry_count == 0

    def test_id_is_uuid7(self):
        event = _make_event()
        assert isinstance(event.id, uuid.UUID)
        assert event.id.version == 7

    def test_payload_round_trips(self):
        event = _make_event(payload={"lines": [1, 2], "nested": {"k": "v"}})
        event.refresh_from_db()
        assert event.payload == {"lines": [1, 2], "nested": {"k": "v"}}


# ---------------------------------------------------------------------------
# Status Transitions
# ---------------------------------------------------------------------------


class TestOutboxEventTransitions:
    def test_mark_as_published(self):
        event = _make_event()
        event.mark_as_failed("smtp down")
        event.mark_as_published()
        event.refresh_from_db()

        assert event.status == EventStatus.PUBLISHED
        assert event.processed_at is not None
        assert event.error_message is None

    def test_mark_as_failed_increments_retry(self):
        event = _make_event()
        event.mark_as_failed("Error 1")
        event.mark_as_failed("Error 2")
        event.refresh_from_db()

        assert event.status == EventStatus.FAILED
        assert event.retry_count == 2
        assert event.error_message == "Error 2"

    def test_mark_as_failed_updates_updated_at(self):
        event = _make_event()
        original_updated_at = event.updated_at

        event.mark_as_failed("Something broke")
        event.refresh_from_db()

        assert event.updated_at > original_updated_at

    def test_mark_as_relayed_counts_attempt_and_keeps_status(self):
        with freeze_time("2026-01-01 12:00:00"):
            event = _make_event()
        stale = OutboxEvent.objects.get(pk=event.pk)
        event.mark_as_published()

        with freeze_time("2026-01-01 12:05:00"):
            stale.mark_as_relayed()

        event.refresh_from_db()
        assert event.status == EventStatus.PUBLISHED
        assert event.retry_count == 1
        assert stale.retry_count == 1
        assert stale.updated_at == datetime(2026, 1, 1, 12, 5, tzinfo=dt_timezone.utc)

    def test_str_representation(self):
        result = str(_make_event(aggregate_id="order-456"))
        assert "OrderPlaced" in result
        assert "PENDING" in result
        assert "order-456" in result


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


class TestOutboxEventQueries:
    def test_for_aggregate(self):
        mine = _make_event(aggregate_id="order-1")
        _make_event(aggregate_id="order-2")
        _make_event(aggregate_id="order-1", event_type="Other")

        assert list(OutboxEvent.objects.for_aggregate("OrderPlaced", "order-1")) == [
            mine
        ]

    def test_due_for_relay_respects_grace_period_status_and_retries(self):
        now = timezone.now()
        with freeze_time(now - timedelta(minutes=11)):
            stale_pending = _make_event(aggregate_id="stale-pending")
        with freeze_time(now - timedelta(minutes=10)):
            stale_failed = _make_event(aggregate_id="stale-failed")
            stale_failed.mark_as_failed("smtp down")
            published = _make_event(aggregate_id="published")
            published.mark_as_published()
            exhausted = _make_event(aggregate_id="exhausted")
            exhausted.retry_count = 5
            exhausted.save(update_fields=["retry_count"])
        _make_event(aggregate_id="fresh")

        due = OutboxEvent.objects.due_for_relay(
            "OrderPlaced",
            older_than=timezone.now() - timedelta(minutes=2),
            max_retries=5,
        )

        assert list(due) == [stale_pending, stale_failed]

    def test_recently_relayed_event_is_not_due(self):
        now = timezone.now()
        with freeze_time(now - timedelta(minutes=30)):
            event = _make_event()
        with freeze_time(now - timedelta(minutes=1)):
            event.mark_as_relayed()

        due = OutboxEvent.objects.due_for_relay(
            "OrderPlaced",
            older_than=now - timedelta(minutes=2),
            max_retries=5,
        )

        assert list(due) == []
