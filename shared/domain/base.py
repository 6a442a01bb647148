"""
Domain building blocks for bookings and payments

- Entity: identity-compared objects such as a booking
- ValueObject: immutable values such as Money, DateRange or a caller context
- Aggregate: entity that buffers domain events (BookingCreated, BookingPaid)
  until its unit of work commits
- DomainEvent: timestamped record of a state change, logged by the audit
  handlers

Base fields are keyword-only so that subclasses can declare required
fields without defaults.
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime
from typing import List
from uuid import UUID, uuid4


@dataclass(kw_only=True, eq=False)
class Entity(ABC):
    """
    Mutable object compared by id

    A booking re-read from storage equals the instance that created it.
    Subclasses must be declared with eq=False to keep identity equality.
    """
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return False
        return self.id == other.id

    def __hash__(self):
        return hash(self.id)

    def touch(self):
        """Refresh updated_at after a state change"""
        self.updated_at = datetime.now()


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Frozen dataclass compared field by field
    """


@dataclass(kw_only=True, eq=False)
class Aggregate(Entity):
    """
    Entity that records domain events

    The unit of work collects the events and publishes them only after
    its writes have committed.
    """
    _events: List['DomainEvent'] = field(default_factory=list, repr=False, init=False)

    def add_event(self, event: 'DomainEvent'):
        """Queue an event for publishing after commit"""
        self._events.append(event)

    def clear_events(self):
        """Drop queued events once a unit of work has collected them"""
        self._events.clear()

    @property
    def events(self) -> List['DomainEvent']:
        """Queued events, as a copy"""
        return self._events.copy()


@dataclass(kw_only=True)
class DomainEvent:
    """
    Something that happened to an aggregate

    Bookings and payments communicate through these events, and the
    audit handlers log them.
    """
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=datetime.now)
    aggregate_id: UUID | None = None

    def to_dict(self) -> dict:
        """Envelope fields shared by every event, for logging"""
        return {
            'event_id': str(self.event_id),
            'event_type': self.__class__.__name__,
            'occurred_at': self.occurred_at.isoformat(),
            'aggregate_id': str(self.aggregate_id) if self.aggregate_id else None,
        }
