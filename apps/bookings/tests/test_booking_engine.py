from dataclasses import replace
from datetime import date
from decimal import Decimal
from unittest import mock

import pytest

from shared.application.message_bus import message_bus
from shared.domain.exceptions import PersistenceError, ValidationError
from shared.domain.value_objects import Money
from apps.bookings.application.command_handlers import CreateBookingCommand, CreateBookingHandler
from apps.bookings.domain.entities import BookingStatus, PaymentStatus
from apps.bookings.domain.events import BookingCreated
from apps.bookings.infrastructure.memory_gateway import InMemoryPersistenceGateway


@pytest.fixture
def handler(gateway, today):
    return CreateBookingHandler(gateway, today=lambda: today)


def _command(asset, caller, start, end):
    return CreateBookingCommand(asset=asset, caller=caller, start_date=start, end_date=end)


def test_create_booking_persists_pending_active_booking(handler, gateway, asset, customer):
    booking = handler.handle(_command(asset, customer, date(2026, 3, 12), date(2026, 3, 14)))

    assert booking.total_days == 3
    assert booking.total_price == Money(Decimal("4500.00"))
    assert booking.payment_status == PaymentStatus.PENDING
    assert booking.booking_status == BookingStatus.ACTIVE
    assert booking.user_id == customer.user_id

    stored = gateway.get_booking(booking.id)
    assert stored == booking
    assert stored.total_price == booking.total_price


def test_same_day_rental_is_one_day(handler, asset, customer, today):
    booking = handler.handle(_command(asset, customer, today, today))

    assert booking.total_days == 1
    assert booking.total_price == Money(Decimal("1500.00"))


def test_past_start_date_is_rejected(handler, gateway, asset, customer):
    with pytest.raises(ValidationError):
        handler.handle(_command(asset, customer, date(2026, 3, 1), date(2026, 3, 12)))

    assert gateway.list_bookings() == []


def test_end_before_start_is_rejected(handler, gateway, asset, customer):
    with pytest.raises(ValidationError):
        handler.handle(_command(asset, customer, date(2026, 3, 14), date(2026, 3, 12)))

    assert gateway.list_bookings() == []


def test_unavailable_asset_is_rejected(handler, gateway, asset, customer):
    parked = replace(asset, available=False)

    with pytest.raises(ValidationError):
        handler.handle(_command(parked, customer, date(2026, 3, 12), date(2026, 3, 14)))

    assert gateway.list_bookings() == []


def test_overlapping_bookings_are_accepted(handler, gateway, asset, customer):
    handler.handle(_command(asset, customer, date(2026, 3, 12), date(2026, 3, 14)))
    handler.handle(_command(asset, customer, date(2026, 3, 13), date(2026, 3, 15)))

    assert len(gateway.list_bookings()) == 2


def test_storage_failure_leaves_nothing_behind(handler, gateway, asset, customer):
    with mock.patch.object(gateway, "insert_booking", side_effect=PersistenceError("disk full")):
        with pytest.raises(PersistenceError):
            handler.handle(_command(asset, customer, date(2026, 3, 12), date(2026, 3, 14)))

    assert gateway.list_bookings() == []


def test_booking_created_is_published_after_commit(handler, asset, customer):
    received = []

    def on_created(event):
        received.append(event)

    message_bus.register_event_handler(BookingCreated, on_created)
    try:
        booking = handler.handle(_command(asset, customer, date(2026, 3, 12), date(2026, 3, 14)))
    finally:
        message_bus._event_handlers[BookingCreated].remove(on_created)

    assert [event.booking_id for event in received] == [booking.id]
    assert received[0].total_price == booking.total_price
    assert booking.events == []


def test_price_is_fixed_at_creation(handler, gateway, asset, customer):
    booking = handler.handle(_command(asset, customer, date(2026, 3, 12), date(2026, 3, 13)))
    gateway.add_asset(replace(asset, price_per_day=Decimal("9999")))

    assert gateway.get_booking(booking.id).total_price == Money(Decimal("3000.00"))


def test_prices_follow_configured_currency(settings, gateway, asset, customer, today):
    settings.PAYMENTS = {**settings.PAYMENTS, "CURRENCY": "USD"}
    handler = CreateBookingHandler(gateway, today=lambda: today)

    booking = handler.handle(_command(asset, customer, date(2026, 3, 12), date(2026, 3, 14)))

    assert booking.total_price == Money(Decimal("4500.00"), "USD")
    assert gateway.get_booking(booking.id).total_price == booking.total_price


def test_gateway_currency_overrides_settings(asset, customer, today):
    gateway = InMemoryPersistenceGateway(currency="EUR")
    gateway.add_asset(asset)
    handler = CreateBookingHandler(gateway, today=lambda: today)

    booking = handler.handle(_command(asset, customer, date(2026, 3, 12), date(2026, 3, 12)))

    assert booking.total_price == Money(Decimal("1500.00"), "EUR")
