"""ORM gateway against the test database."""

from datetime import date
from decimal import Decimal
from unittest import mock
from uuid import uuid4

import pytest
from django.db import DatabaseError

from shared.domain.context import Role
from shared.domain.exceptions import NotFoundError, PersistenceError
from shared.domain.value_objects import Money
from apps.bookings.application.command_handlers import (
    CreateBookingCommand,
    CreateBookingHandler,
    TransitionBookingStatusCommand,
    TransitionBookingStatusHandler,
)
from apps.bookings.application.queries import UNKNOWN_USER_LABEL, AssetFilter, BookingFilter, TransactionFilter
from apps.bookings.domain.entities import BookingStatus, PaymentStatus
from apps.bookings.models import Booking as BookingModel
from apps.catalog.models import Vehicle
from apps.finances.application.payment_flow import PaymentStateMachine
from apps.finances.domain.entities import PaymentTransaction, TransactionStatus
from apps.finances.models import PaymentTransaction as PaymentTransactionModel
from apps.users.models import Profile, caller_context_for_user

pytestmark = pytest.mark.django_db


def _completed_payment(booking):
    return PaymentTransaction(
        booking_id=booking.id,
        user_id=booking.user_id,
        amount=booking.total_price,
        card_last_four="4242",
        card_brand="Visa",
        transaction_status=TransactionStatus.COMPLETED,
    )


def test_create_booking_writes_row(db_booking, rider, vehicle):
    row = BookingModel.objects.get(pk=db_booking.id)

    assert row.user == rider
    assert row.vehicle == vehicle
    assert row.total_days == 3
    assert row.total_price == Decimal("4500.00")
    assert row.payment_status == "pending"
    assert row.booking_status == "active"


def test_get_booking_maps_row_to_domain(db_gateway, db_booking):
    booking = db_gateway.get_booking(db_booking.id)

    assert booking == db_booking
    assert booking.total_price == Money(Decimal("4500.00"), "INR")
    assert booking.dates == db_booking.dates
    assert db_gateway.get_booking(uuid4()) is None


def test_configured_currency_is_used_for_new_bookings(settings, db_gateway, rider, vehicle, today):
    settings.PAYMENTS = {**settings.PAYMENTS, "CURRENCY": "USD"}

    created = CreateBookingHandler(db_gateway, today=lambda: today).handle(CreateBookingCommand(
        asset=vehicle.to_domain(),
        caller=caller_context_for_user(rider),
        start_date=date(2026, 3, 12),
        end_date=date(2026, 3, 14),
    ))

    assert created.total_price == Money(Decimal("4500.00"), "USD")
    assert db_gateway.get_booking(created.id).total_price == created.total_price
    (view,) = db_gateway.list_bookings(BookingFilter(user_id=rider.pk))
    assert view.booking.total_price.currency == "USD"


def test_updates_of_unknown_booking_raise(db_gateway):
    with pytest.raises(NotFoundError):
        db_gateway.update_booking_payment_status(uuid4(), PaymentStatus.PAID)
    with pytest.raises(NotFoundError):
        db_gateway.update_booking_status(uuid4(), BookingStatus.CANCELLED)


def test_settlement_commits_transaction_and_paid_flag(db_gateway, db_booking, rider):
    flow = PaymentStateMachine(db_booking, caller_context_for_user(rider), db_gateway)
    booking = db_gateway.get_booking(db_booking.id)
    payment = _completed_payment(booking)

    flow._record_settlement(booking, payment)

    assert BookingModel.objects.get(pk=db_booking.id).payment_status == "paid"
    row = PaymentTransactionModel.objects.get(booking_id=db_booking.id)
    assert row.transaction_id == payment.transaction_id
    assert row.to_domain().amount == payment.amount
    assert booking.is_paid


def test_settlement_rolls_back_when_paid_flag_write_fails(db_gateway, db_booking, rider):
    flow = PaymentStateMachine(db_booking, caller_context_for_user(rider), db_gateway)
    booking = db_gateway.get_booking(db_booking.id)

    failure = PersistenceError("connection lost")
    with mock.patch.object(db_gateway, "update_booking_payment_status", side_effect=failure):
        with pytest.raises(PersistenceError):
            flow._record_settlement(booking, _completed_payment(booking))

    assert not PaymentTransactionModel.objects.exists()
    assert BookingModel.objects.get(pk=db_booking.id).payment_status == "pending"


def test_database_errors_become_persistence_errors(db_gateway, db_booking):
    with mock.patch.object(db_gateway, "_bookings", side_effect=DatabaseError("gone")):
        with pytest.raises(PersistenceError):
            db_gateway.get_booking(db_booking.id)


def test_duplicate_transaction_id_is_rejected(db_gateway, db_booking):
    payment = _completed_payment(db_booking)
    db_gateway.insert_transaction(payment)

    with pytest.raises(PersistenceError):
        with db_gateway.unit_of_work():
            db_gateway.insert_transaction(PaymentTransaction(
                booking_id=db_booking.id,
                user_id=db_booking.user_id,
                amount=db_booking.total_price,
                card_last_four="0002",
                card_brand="Visa",
                transaction_status=TransactionStatus.FAILED,
                transaction_id=payment.transaction_id,
            ))

    assert PaymentTransactionModel.objects.count() == 1


def test_transaction_for_unknown_booking(db_gateway, db_booking):
    payment = _completed_payment(db_booking)

    with pytest.raises(NotFoundError):
        db_gateway.insert_transaction(PaymentTransaction(
            booking_id=uuid4(),
            user_id=payment.user_id,
            amount=payment.amount,
            card_last_four="4242",
            card_brand="Visa",
            transaction_status=TransactionStatus.COMPLETED,
        ))


def test_list_bookings_joins_profile(db_gateway, db_booking, rider, django_user_model, vehicle, today):
    stranger = django_user_model.objects.create_user(username="nobody", password="pass")
    CreateBookingHandler(db_gateway, today=lambda: today).handle(CreateBookingCommand(
        asset=vehicle.to_domain(),
        caller=caller_context_for_user(stranger),
        start_date=date(2026, 3, 20),
        end_date=date(2026, 3, 20),
    ))

    views = db_gateway.list_bookings()

    assert len(views) == 2
    names = {view.booking.user_id: view.user_full_name for view in views}
    assert names[rider.pk] == "Asha Rao"
    assert names[stranger.pk] == UNKNOWN_USER_LABEL
    assert views[0].asset_brand == "Royal Enfield"

    (mine,) = db_gateway.list_bookings(BookingFilter(user_id=rider.pk))
    assert mine.booking.id == db_booking.id


def test_list_transactions_filters(db_gateway, db_booking):
    db_gateway.insert_transaction(_completed_payment(db_booking))

    assert len(db_gateway.list_transactions(TransactionFilter(booking_id=db_booking.id))) == 1
    assert db_gateway.list_transactions(TransactionFilter(transaction_status=TransactionStatus.FAILED)) == []


def test_list_assets_filters(db_gateway, vehicle):
    Vehicle.objects.create(
        name="Activa",
        brand="Honda",
        model="6G",
        vehicle_type="scooter",
        price_per_day=Decimal("500.00"),
        available=False,
    )

    assert [a.id for a in db_gateway.list_assets(AssetFilter(available=True))] == [vehicle.id]
    assert [a.name for a in db_gateway.list_assets(AssetFilter(search="activ"))] == ["Activa"]
    assert [a.name for a in db_gateway.list_assets(AssetFilter(brand="royal enfield"))] == ["Classic 350"]


def test_admin_transition_through_orm(db_gateway, db_booking, django_user_model):
    operator = django_user_model.objects.create_user(username="ops", password="pass")
    Profile.objects.create(user=operator, full_name="Ops", role=Role.ADMIN.value)

    TransitionBookingStatusHandler(db_gateway).handle(TransitionBookingStatusCommand(
        caller=caller_context_for_user(operator),
        booking_id=db_booking.id,
        new_status=BookingStatus.COMPLETED,
    ))

    row = BookingModel.objects.get(pk=db_booking.id)
    assert row.booking_status == "completed"
    assert row.payment_status == "pending"


def test_superuser_without_profile_acts_as_admin(django_user_model):
    root = django_user_model.objects.create_superuser(username="root", email="root@example.com", password="pass")

    assert caller_context_for_user(root).is_admin
