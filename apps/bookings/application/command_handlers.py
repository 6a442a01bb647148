"""
Booking Command Handlers

These are the use cases for the booking domain.
They orchestrate domain operations within units of work.

Commands:
- CreateBookingCommand: Validate, price and persist a new booking
- TransitionBookingStatusCommand: Move a booking to completed/cancelled (admin)
"""

from dataclasses import dataclass
from datetime import date
from typing import Callable
from uuid import UUID
import logging

from shared.domain.context import CallerContext
from shared.domain.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from shared.domain.value_objects import DateRange
from apps.bookings.application.gateway import AbstractPersistenceGateway
from apps.bookings.domain.entities import Booking, BookingStatus, DraftBooking, TERMINAL_STATUSES
from apps.bookings.domain.events import BookingCreated
from apps.bookings.domain.pricing import PricingCalculator
from apps.catalog.domain.entities import RentableAsset

logger = logging.getLogger(__name__)


# ===== Commands =====

@dataclass
class CreateBookingCommand:
    """
    Command to create a new booking

    This is the primary entry point for creating bookings.
    """
    asset: RentableAsset
    caller: CallerContext
    start_date: date
    end_date: date


@dataclass
class TransitionBookingStatusCommand:
    """Command to apply an operator-driven status change"""
    caller: CallerContext
    booking_id: UUID
    new_status: BookingStatus | str


# ===== Command Handlers =====

class CreateBookingHandler:
    """
    Handler for CreateBooking command

    Steps:
    1. Validate the date range against today and the asset's availability
    2. Price the rental with PricingCalculator
    3. Insert the booking (payment pending, status active) in one unit of work
    4. Publish BookingCreated after commit

    Overlapping bookings for the same asset are not checked here.
    """

    def __init__(
        self,
        gateway: AbstractPersistenceGateway,
        calculator: PricingCalculator | None = None,
        today: Callable[[], date] = date.today,
    ):
        self.gateway = gateway
        self.calculator = calculator or PricingCalculator(currency=gateway.currency)
        self.today = today

    def handle(self, command: CreateBookingCommand) -> Booking:
        """
        Handle booking creation

        Returns: Created Booking aggregate

        Raises:
            ValidationError: If the dates or the asset are not bookable
            PersistenceError: If storage fails (nothing is left behind)
        """
        logger.info(
            f"Creating booking for asset {command.asset.id}, "
            f"user {command.caller.user_id}, dates {command.start_date} - {command.end_date}"
        )

        draft = self.prepare(command)

        with self.gateway.unit_of_work() as uow:
            booking_id = self.gateway.insert_booking(draft)
            booking = Booking.from_draft(draft, booking_id)

            booking.add_event(BookingCreated(
                aggregate_id=booking.id,
                booking_id=booking.id,
                asset_id=draft.asset_id,
                user_id=draft.user_id,
                dates=draft.dates,
                total_price=draft.total_price,
            ))
            uow.collect_events(booking)

        logger.info(f"Booking created successfully: {booking.id} ({booking.total_price})")

        return booking

    def prepare(self, command: CreateBookingCommand) -> DraftBooking:
        """Validate and price without touching storage"""
        if command.start_date < self.today():
            raise ValidationError(
                "Start date cannot be in the past",
                {"start_date": "Date is in the past."},
            )
        if command.end_date < command.start_date:
            raise ValidationError(
                "End date cannot be before start date",
                {"end_date": "End date must be on or after the start date."},
            )
        if not command.asset.available:
            raise ValidationError(f"Asset {command.asset.id} is not available for rent")

        dates = DateRange(command.start_date, command.end_date)
        total_days, total_price = self.calculator.quote(dates, command.asset.price_per_day)

        return DraftBooking(
            user_id=command.caller.user_id,
            asset_id=command.asset.id,
            dates=dates,
            total_days=total_days,
            total_price=total_price,
        )


class TransitionBookingStatusHandler:
    """
    Handler for operator-driven booking status changes

    Re-applying the status a booking already has is a no-op. Moving out of
    a terminal status is rejected. Payment status and transactions are
    never touched here.
    """

    def __init__(self, gateway: AbstractPersistenceGateway):
        self.gateway = gateway

    def handle(self, command: TransitionBookingStatusCommand) -> Booking:
        """
        Raises:
            PermissionDeniedError: Caller is not an administrator
            ValidationError: Target is not completed or cancelled
            NotFoundError: Unknown booking
            InvalidStatusTransitionError: Booking already has the other terminal status
        """
        try:
            new_status = BookingStatus(command.new_status)
        except ValueError:
            raise ValidationError(
                f"Unknown booking status: {command.new_status!r}",
                {"new_status": "Must be completed or cancelled."},
            ) from None

        logger.info(f"Transitioning booking {command.booking_id} to {new_status.value}")

        if not command.caller.is_admin:
            raise PermissionDeniedError("Only administrators can change booking status")
        if new_status not in TERMINAL_STATUSES:
            raise ValidationError(
                f"Cannot transition a booking to {new_status.value}",
                {"new_status": "Must be completed or cancelled."},
            )

        with self.gateway.unit_of_work() as uow:
            booking = self.gateway.get_booking(command.booking_id)
            if not booking:
                raise NotFoundError(f"Booking {command.booking_id} not found")

            if not booking.transition_to(new_status):
                logger.info(
                    f"Booking {booking.id} already {booking.booking_status.value}, nothing to do"
                )
                return booking

            self.gateway.update_booking_status(booking.id, booking.booking_status)
            uow.collect_events(booking)

        logger.info(f"Booking {booking.id} is now {booking.booking_status.value}")

        return booking
