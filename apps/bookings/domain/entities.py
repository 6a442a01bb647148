"""
Booking Domain Entities

Core business entities for the booking domain:
- DraftBooking: Priced reservation that has not been persisted yet
- Booking: Persisted aggregate, the only variant eligible for payment
- BookingStatus: Operational lifecycle driven by administrators
- PaymentStatus: Payment state driven by the payment flow
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

from shared.domain.base import Aggregate, ValueObject
from shared.domain.exceptions import DuplicateSettlementError, InvalidStatusTransitionError, ValidationError
from shared.domain.value_objects import Money, DateRange

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from apps.finances.domain.entities import PaymentTransaction


class BookingStatus(Enum):
    """
    Booking Status Finite State Machine

    State transitions:
    - ACTIVE -> COMPLETED (rental finished)
    - ACTIVE -> CANCELLED (cancelled by an administrator)

    COMPLETED and CANCELLED are terminal.
    """
    ACTIVE = 'active'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED})


class PaymentStatus(Enum):
    """Payment status tracking. Only PENDING -> PAID is allowed."""
    PENDING = 'pending'
    PAID = 'paid'


@dataclass(frozen=True)
class DraftBooking(ValueObject):
    """
    Priced reservation before it reaches storage

    Produced by the booking engine and handed to the gateway's
    insert_booking(); it has no identity and cannot be paid.
    """
    user_id: int
    asset_id: UUID
    dates: DateRange
    total_days: int
    total_price: Money

    def __post_init__(self):
        if self.total_days < 1:
            raise ValidationError("Total days must be at least 1")
        if self.total_days != len(self.dates):
            raise ValidationError(
                f"Total days ({self.total_days}) does not match date range {self.dates}"
            )


@dataclass(kw_only=True, eq=False)
class Booking(Aggregate):
    """
    Booking Aggregate Root

    A persisted reservation of an asset for an inclusive date range.

    Key invariants:
    - total_days == len(dates) >= 1
    - total_price is fixed at creation
    - payment_status becomes PAID only together with a completed transaction
    - COMPLETED and CANCELLED are terminal booking statuses
    """

    user_id: int
    asset_id: UUID
    dates: DateRange
    total_days: int
    total_price: Money
    payment_status: PaymentStatus = PaymentStatus.PENDING
    booking_status: BookingStatus = BookingStatus.ACTIVE

    @classmethod
    def from_draft(cls, draft: DraftBooking, booking_id: UUID) -> 'Booking':
        """Build the persisted variant once storage has assigned an id"""
        return cls(
            id=booking_id,
            user_id=draft.user_id,
            asset_id=draft.asset_id,
            dates=draft.dates,
            total_days=draft.total_days,
            total_price=draft.total_price,
        )

    @property
    def start_date(self) -> date:
        return self.dates.start_date

    @property
    def end_date(self) -> date:
        return self.dates.end_date

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID

    def ensure_payable(self):
        """Raise unless a new settlement may start for this booking"""
        if self.is_paid:
            raise DuplicateSettlementError(f"Booking {self.id} is already paid")

    def mark_paid(self, payment: 'PaymentTransaction'):
        """
        Flip payment status (PENDING -> PAID)

        Requires the completed transaction that settled this booking.
        Events: BookingPaid
        """
        from apps.bookings.domain.events import BookingPaid

        self.ensure_payable()
        if payment.booking_id != self.id:
            raise ValidationError(
                f"Transaction {payment.transaction_id} belongs to booking {payment.booking_id}, not {self.id}"
            )
        if not payment.is_completed:
            raise ValidationError(
                f"Transaction {payment.transaction_id} is {payment.transaction_status.value}, not completed"
            )
        if payment.amount != self.total_price:
            raise ValidationError(
                f"Transaction amount {payment.amount} does not match booking total {self.total_price}"
            )

        self.payment_status = PaymentStatus.PAID
        self.touch()

        self.add_event(BookingPaid(
            aggregate_id=self.id,
            booking_id=self.id,
            payment_id=payment.id,
            transaction_id=payment.transaction_id,
            amount=payment.amount,
        ))

    def transition_to(self, new_status: BookingStatus) -> bool:
        """
        Apply an operator-driven status change

        Returns False when the booking already has the requested status.
        Events: BookingStatusChanged
        """
        if new_status == self.booking_status:
            return False
        if new_status not in TERMINAL_STATUSES or self.booking_status.is_terminal:
            raise InvalidStatusTransitionError(self.booking_status.value, new_status.value)

        from apps.bookings.domain.events import BookingStatusChanged

        old_status = self.booking_status
        self.booking_status = new_status
        self.touch()

        self.add_event(BookingStatusChanged(
            aggregate_id=self.id,
            booking_id=self.id,
            old_status=old_status.value,
            new_status=new_status.value,
        ))
        return True

    def __str__(self):
        return f"Booking {self.id} ({self.booking_status.value}, {self.payment_status.value})"

    def __repr__(self):
        return (
            f"Booking(id={self.id}, asset_id={self.asset_id}, dates={self.dates}, "
            f"total_price={self.total_price!r}, payment_status={self.payment_status.value}, "
            f"booking_status={self.booking_status.value})"
        )

