"""Payment flow against the ORM gateway.

The flow calls the gateway from worker threads via sync_to_async, so these
tests need real commits on the test database.
"""

import asyncio
from decimal import Decimal
from unittest import mock

import pytest

from shared.domain.exceptions import PersistenceError
from apps.bookings.models import Booking as BookingModel
from apps.finances.application.payment_flow import PaymentStateMachine, PaymentStep, SettlementRegistry
from apps.finances.models import PaymentTransaction as PaymentTransactionModel
from apps.finances.processors import SimulatedPaymentProcessor
from apps.users.models import caller_context_for_user

pytestmark = pytest.mark.django_db(transaction=True)


@pytest.fixture
def db_flow(db_booking, rider, db_gateway):
    return PaymentStateMachine(
        db_booking,
        caller_context_for_user(rider),
        db_gateway,
        processor=SimulatedPaymentProcessor(delay_seconds=0, declined_card_numbers=[]),
        registry=SettlementRegistry(),
        record_failed_attempts=True,
    )


def _review(flow):
    flow.update("card_number", "4242424242424242")
    flow.update("expiry_date", "1226")
    flow.update("cvv", "123")
    flow.update("cardholder_name", "Asha Rao")
    asyncio.run(flow.advance())
    flow.update("billing_address", "12 MG Road")
    flow.update("city", "Bengaluru")
    flow.update("zip_code", "560001")
    asyncio.run(flow.advance())
    assert flow.step == PaymentStep.REVIEW


def test_payment_settles_booking_row(db_flow, db_booking):
    _review(db_flow)

    assert asyncio.run(db_flow.advance()) == PaymentStep.SUCCEEDED

    assert BookingModel.objects.get(pk=db_booking.id).payment_status == "paid"
    (row,) = PaymentTransactionModel.objects.filter(booking_id=db_booking.id)
    assert row.transaction_status == "completed"
    assert row.amount == Decimal("4500.00")
    assert row.card_last_four == "4242"
    assert row.transaction_id == db_flow.transaction.transaction_id


def test_failed_paid_flag_write_rolls_back_transaction_row(db_flow, db_gateway, db_booking):
    _review(db_flow)

    with mock.patch.object(
        db_gateway,
        "update_booking_payment_status",
        side_effect=PersistenceError("write failed"),
    ):
        with pytest.raises(PersistenceError):
            asyncio.run(db_flow.advance())

    assert db_flow.step == PaymentStep.REVIEW
    assert BookingModel.objects.get(pk=db_booking.id).payment_status == "pending"
    rows = PaymentTransactionModel.objects.filter(booking_id=db_booking.id)
    assert not rows.filter(transaction_status="completed").exists()
    assert rows.filter(transaction_status="failed").count() == 1
