from decimal import Decimal
from unittest import mock
from uuid import uuid4

from shared.application.message_bus import message_bus
from shared.domain.value_objects import Money
from apps.bookings.application import event_handlers
from apps.bookings.domain.events import BookingCreated, BookingPaid, BookingStatusChanged
from apps.finances.application import event_handlers as payment_handlers


def test_audit_handlers_are_registered_on_startup():
    handlers = message_bus._event_handlers

    assert event_handlers.log_booking_created in handlers[BookingCreated]
    assert event_handlers.log_booking_status_changed in handlers[BookingStatusChanged]
    assert event_handlers.log_booking_paid in handlers[BookingPaid]
    assert payment_handlers.log_payment_settled in handlers[BookingPaid]


def test_status_change_is_logged():
    booking_id = uuid4()

    with mock.patch.object(event_handlers, "logger") as logger:
        event_handlers.log_booking_status_changed(BookingStatusChanged(
            booking_id=booking_id,
            old_status="active",
            new_status="cancelled",
        ))

    logger.info.assert_called_once_with(
        "booking.status_changed",
        booking_id=str(booking_id),
        old_status="active",
        new_status="cancelled",
    )


def test_settlement_is_logged_without_card_data():
    with mock.patch.object(payment_handlers, "logger") as logger:
        payment_handlers.log_payment_settled(BookingPaid(
            booking_id=uuid4(),
            payment_id=uuid4(),
            transaction_id="txn_abc",
            amount=Money(Decimal("4500.00")),
        ))

    _, fields = logger.info.call_args
    assert fields["transaction_id"] == "txn_abc"
    assert fields["amount"] == "4500.00"
    assert not any("card" in key for key in fields)
