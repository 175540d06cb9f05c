"""Base abstract model and the transactional outbox.

Provides:
- ``BaseModel``: UUIDv7 primary key + created_at / updated_at timestamps.
- ``OutboxEvent``: durable record of a domain event, written in the same
  database transaction as the business rows that produced it.

``save()`` on ``BaseModel`` makes sure ``updated_at`` is part of
``update_fields`` (Django skips ``auto_now`` fields otherwise).
"""

from __future__ import annotations

from datetime import datetime

import uuid6
from django.db import models
from django.db.models import F
from django.utils import timezone

# ---------------------------------------------------------------------------
# BaseModel
# ---------------------------------------------------------------------------


class BaseModel(models.Model):
    """Abstract base with UUIDv7 PK and timestamp bookkeeping."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid6.uuid7,
        editable=False,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    def save(self, *args, **kwargs) -> None:
        """Ensure ``updated_at`` is refreshed even when ``update_fields`` is passed."""
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "updated_at" not in update_fields:
            kwargs["update_fields"] = list(update_fields) + ["updated_at"]
        super().save(*args, **kwargs)


# ---------------------------------------------------------------------------
# Transactional Outbox
# ---------------------------------------------------------------------------


class EventStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    PUBLISHED = "PUBLISHED", "Published"
    FAILED = "FAILED", "Failed"


class OutboxEventQuerySet(models.QuerySet):
    def for_aggregate(self, event_type: str, aggregate_id: str) -> OutboxEventQuerySet:
        return self.filter(event_type=event_type, aggregate_id=str(aggregate_id))

    def due_for_relay(
        self, event_type: str, older_than: datetime, max_retries: int
    ) -> OutboxEventQuerySet:
        """Undelivered events untouched since *older_than*.

        Every relay, failure or publish refreshes ``updated_at``, so an
        event waits a full grace period between two hand-offs.
        """
        return self.filter(
            event_type=event_type,
            status__in=[EventStatus.PENDING, EventStatus.FAILED],
            updated_at__lte=older_than,
            retry_count__lt=max_retries,
        ).order_by("created_at")


class OutboxEvent(BaseModel):
    """Transactional Outbox for reliable delivery of domain events.

    Workflow:
    1. A repository creates the ``OutboxEvent`` inside ``transaction.atomic()``
       together with the aggregate rows.
    2. A consumer (Celery task) performs the side effect and calls
       ``mark_as_published()``, or ``mark_as_failed(error)`` which bumps
       ``retry_count``.
    3. A periodic relay re-submits ``PENDING`` / ``FAILED`` rows untouched
       for a grace period; each hand-off counts against the retry budget
       (``mark_as_relayed()``).
    """

    event_type = models.CharField(max_length=100)
    payload = models.JSONField()
    aggregate_id = models.CharField(max_length=255)
    topic = models.CharField(max_length=100)
    status = models.CharField(
        max_length=20,
        choices=EventStatus.choices,
        default=EventStatus.PENDING,
    )
    processed_at = models.DateTimeField(null=True, blank=True, default=None)
    error_message = models.TextField(null=True, blank=True, default=None)  # noqa: DJ01
    retry_count = models.PositiveIntegerField(default=0)

    objects = OutboxEventQuerySet.as_manager()

    class Meta:
        db_table = "outbox_events"
        ordering = ["created_at"]
        indexes = [
            models.Index(
                fields=["event_type", "aggregate_id"],
                name="outbox_type_aggregate_idx",
            ),
            models.Index(
                fields=["status", "updated_at"],
                name="outbox_status_updated_idx",
            ),
        ]

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------

    def mark_as_published(self) -> None:
        """Mark event as successfully delivered."""
        self.status = EventStatus.PUBLISHED
        self.processed_at = timezone.now()
        self.error_message = None
        self.save(update_fields=["status", "processed_at", "error_message"])

    def mark_as_failed(self, error: str) -> None:
        """Mark event as failed and record the error."""
        self.status = EventStatus.FAILED
        self.error_message = error
        self.retry_count += 1
        self.save(update_fields=["status", "error_message", "retry_count"])

    def mark_as_relayed(self) -> None:
        """Count a re-submission by the relay and restart its grace period.

        Incremented in SQL: the delivery task may have settled the row
        since this instance was read.
        """
        OutboxEvent.objects.filter(pk=self.pk).update(
            retry_count=F("retry_count") + 1, updated_at=timezone.now()
        )
        self.refresh_from_db(fields=["retry_count", "updated_at"])

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        return f"{self.event_type} [{self.status}] ({self.aggregate_id})"
