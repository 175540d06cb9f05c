"""Domain event primitives.

Aggregates record events while a use case runs; the repository that
persists the aggregate drains them into the transactional outbox in the
same database transaction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List
from uuid import UUID

import uuid6


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DomainEvent:
    """Immutable fact about an aggregate; ``event_name`` is the class name."""

    aggregate_id: UUID
    event_id: UUID = field(default_factory=uuid6.uuid7)
    occurred_on: datetime = field(default_factory=_utcnow)
    event_name: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "event_name", type(self).__name__)


class DomainEventMixin:
    """Collects pending events on an aggregate root (not persisted)."""

    def add_domain_event(self, event: DomainEvent) -> None:
        self.__dict__.setdefault("_pending_events", []).append(event)

    def clear_domain_events(self) -> None:
        self.__dict__["_pending_events"] = []

    @property
    def domain_events(self) -> List[DomainEvent]:
        return list(self.__dict__.get("_pending_events", []))
