"""
Booking Domain Events

Events that represent things that have happened in the booking domain.
These are published after successful transaction commits.
"""

from dataclasses import dataclass
from uuid import UUID

from shared.domain.base import DomainEvent
from shared.domain.value_objects import Money, DateRange


@dataclass(kw_only=True)
class BookingCreated(DomainEvent):
    """
    Event: A new booking was created (payment pending, status active)

    Triggers:
    - Hand the booking over to the payment flow
    - Audit log entry
    """
    booking_id: UUID
    asset_id: UUID
    user_id: int
    dates: DateRange
    total_price: Money


@dataclass(kw_only=True)
class BookingPaid(DomainEvent):
    """
    Event: Settlement succeeded and the booking is paid (PENDING -> PAID)

    Emitted in the same unit of work as the completed transaction row.
    """
    booking_id: UUID
    payment_id: UUID
    transaction_id: str
    amount: Money


@dataclass(kw_only=True)
class BookingStatusChanged(DomainEvent):
    """
    Event: An administrator moved the booking to a terminal status

    Triggers:
    - Audit log entry
    """
    booking_id: UUID
    old_status: str
    new_status: str
