"""
Booking event handlers

Audit trail for the booking lifecycle. Registered on the message bus in
BookingsConfig.ready() and run after the unit of work commits.
"""

import structlog

from apps.bookings.domain.events import BookingCreated, BookingPaid, BookingStatusChanged

logger = structlog.get_logger(__name__)


def log_booking_created(event: BookingCreated):
    logger.info(
        "booking.created",
        booking_id=str(event.booking_id),
        asset_id=str(event.asset_id),
        user_id=event.user_id,
        start_date=event.dates.start_date.isoformat(),
        end_date=event.dates.end_date.isoformat(),
        total_price=str(event.total_price.amount),
        currency=event.total_price.currency,
    )


def log_booking_paid(event: BookingPaid):
    logger.info(
        "booking.paid",
        booking_id=str(event.booking_id),
        transaction_id=event.transaction_id,
        amount=str(event.amount.amount),
        currency=event.amount.currency,
    )


def log_booking_status_changed(event: BookingStatusChanged):
    logger.info(
        "booking.status_changed",
        booking_id=str(event.booking_id),
        old_status=event.old_status,
        new_status=event.new_status,
    )


def register_handlers(bus):
    bus.register_event_handler(BookingCreated, log_booking_created)
    bus.register_event_handler(BookingPaid, log_booking_paid)
    bus.register_event_handler(BookingStatusChanged, log_booking_status_changed)
