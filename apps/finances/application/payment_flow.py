"""
Payment Flow

Multi-step card payment for a persisted booking, modelled as a finite
state machine:

    COLLECTING_CARD -> COLLECTING_BILLING -> REVIEW -> SETTLING -> SUCCEEDED
                                               ^           |
                                               +-- failure-+

Everything before SETTLING is transient form state; abandoning the flow
leaves nothing in storage. SETTLING writes the completed transaction and
the booking's paid flag in one unit of work, so a booking is never paid
without its transaction.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass, fields
from enum import Enum
from uuid import UUID

from asgiref.sync import sync_to_async

from shared.domain.context import CallerContext
from shared.domain.exceptions import (
    DomainError,
    DuplicateSettlementError,
    InvalidStepError,
    NotFoundError,
    PaymentGatewayError,
    PermissionDeniedError,
    PersistenceError,
    ValidationError,
)
from apps.bookings.application.gateway import AbstractPersistenceGateway
from apps.bookings.domain.entities import Booking, PaymentStatus
from apps.finances.conf import payments_setting
from apps.finances.domain.card import (
    CARD_NUMBER_MAX_FORMATTED_LENGTH,
    CARD_NUMBER_MIN_DIGITS,
    CVV_MAX_LENGTH,
    CVV_MIN_LENGTH,
    EXPIRY_PATTERN,
    TEST_CARD_CVV,
    TEST_CARD_EXPIRY,
    TEST_CARDHOLDER,
    DemoCard,
    detect_card_brand,
    digits_only,
    format_card_number,
    format_expiry,
    last_four,
    mask_card_number,
)
from apps.finances.domain.entities import PaymentTransaction, TransactionStatus
from apps.finances.processors import AbstractPaymentProcessor, ChargeRequest, SimulatedPaymentProcessor

logger = logging.getLogger(__name__)


class PaymentStep(Enum):
    COLLECTING_CARD = 'collecting_card'
    COLLECTING_BILLING = 'collecting_billing'
    REVIEW = 'review'
    SETTLING = 'settling'
    SUCCEEDED = 'succeeded'


@dataclass
class PaymentForm:
    """Customer input; kept in memory only."""

    card_number: str = ''
    expiry_date: str = ''
    cvv: str = ''
    cardholder_name: str = ''
    email: str = ''
    billing_address: str = ''
    city: str = ''
    zip_code: str = ''

    def update(self, name: str, value: str) -> bool:
        """
        Apply typed input to a field.

        Returns False when the input is rejected and the field keeps its
        previous value (card number longer than 16 digits, CVV longer
        than 4 digits).
        """
        if name not in {f.name for f in fields(self)}:
            raise ValueError(f"Unknown payment form field: {name}")

        if name == 'card_number':
            value = format_card_number(value)
            if len(value) > CARD_NUMBER_MAX_FORMATTED_LENGTH:
                return False
        elif name == 'expiry_date':
            value = format_expiry(value)
        elif name == 'cvv':
            value = digits_only(value)
            if len(value) > CVV_MAX_LENGTH:
                return False

        setattr(self, name, value)
        return True

    def card_errors(self) -> dict[str, str]:
        errors = {}
        if len(digits_only(self.card_number)) < CARD_NUMBER_MIN_DIGITS:
            errors['card_number'] = f"Card number must have at least {CARD_NUMBER_MIN_DIGITS} digits."
        if not EXPIRY_PATTERN.match(self.expiry_date):
            errors['expiry_date'] = "Expiry date must be in MM/YY format."
        if not (self.cvv.isdigit() and CVV_MIN_LENGTH <= len(self.cvv) <= CVV_MAX_LENGTH):
            errors['cvv'] = f"CVV must be {CVV_MIN_LENGTH}-{CVV_MAX_LENGTH} digits."
        if not self.cardholder_name.strip():
            errors['cardholder_name'] = "Cardholder name is required."
        return errors

    def billing_errors(self) -> dict[str, str]:
        errors = {}
        if '@' not in self.email:
            errors['email'] = "Enter a valid email address."
        if not self.billing_address.strip():
            errors['billing_address'] = "Billing address is required."
        if not self.city.strip():
            errors['city'] = "City is required."
        if not self.zip_code.strip():
            errors['zip_code'] = "Postal code is required."
        return errors

    def wipe_card_secrets(self) -> None:
        self.card_number = ''
        self.expiry_date = ''
        self.cvv = ''


class SettlementRegistry:
    """
    Process-wide duplicate-submission guard keyed by booking id.

    Only one settlement per booking may be in flight at a time.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._in_flight: set[UUID] = set()

    def acquire(self, booking_id: UUID) -> None:
        with self._lock:
            if booking_id in self._in_flight:
                raise DuplicateSettlementError(
                    f"A payment for booking {booking_id} is already being processed"
                )
            self._in_flight.add(booking_id)

    def release(self, booking_id: UUID) -> None:
        with self._lock:
            self._in_flight.discard(booking_id)

    def is_in_flight(self, booking_id: UUID) -> bool:
        with self._lock:
            return booking_id in self._in_flight


settlement_registry = SettlementRegistry()


class PaymentStateMachine:
    """
    Drives one customer through paying one booking.

    Usage:
        flow = PaymentStateMachine(booking, caller, gateway)
        flow.update('card_number', '4242424242424242')
        ...
        await flow.advance()   # card -> billing
        await flow.advance()   # billing -> review
        await flow.advance()   # review -> settling -> succeeded
    """

    def __init__(
        self,
        booking: Booking,
        caller: CallerContext,
        gateway: AbstractPersistenceGateway,
        processor: AbstractPaymentProcessor | None = None,
        registry: SettlementRegistry | None = None,
        record_failed_attempts: bool | None = None,
    ):
        if not isinstance(booking, Booking):
            raise TypeError(f"Payment requires a persisted booking, got {type(booking).__name__}")
        if booking.user_id != caller.user_id:
            raise PermissionDeniedError("Only the customer who made the booking can pay for it")

        self.booking = booking
        self.caller = caller
        self.gateway = gateway
        self.processor = processor or SimulatedPaymentProcessor()
        self.registry = registry or settlement_registry
        if record_failed_attempts is None:
            record_failed_attempts = payments_setting("RECORD_FAILED_ATTEMPTS")
        self.record_failed_attempts = record_failed_attempts

        self.step = PaymentStep.COLLECTING_CARD
        self.form = PaymentForm(email=caller.email)
        self.transaction: PaymentTransaction | None = None

    # --- form input ---

    def update(self, name: str, value: str) -> bool:
        if self.step not in (PaymentStep.COLLECTING_CARD, PaymentStep.COLLECTING_BILLING):
            raise InvalidStepError(f"Form is read-only in step {self.step.value}")
        return self.form.update(name, value)

    def use_test_card(self, card: DemoCard) -> None:
        """Fill the card step from the demo card catalog"""
        if self.step != PaymentStep.COLLECTING_CARD:
            raise InvalidStepError("Demo cards can only be used on the card step")
        self.form.update('card_number', card.number)
        self.form.update('expiry_date', TEST_CARD_EXPIRY)
        self.form.update('cvv', TEST_CARD_CVV)
        self.form.update('cardholder_name', TEST_CARDHOLDER)

    def review_summary(self) -> dict:
        return {
            'payment_method': mask_card_number(self.form.card_number),
            'card_brand': detect_card_brand(self.form.card_number),
            'cardholder': self.form.cardholder_name,
            'billing_address': f"{self.form.billing_address}, {self.form.city} {self.form.zip_code}",
            'total': self.booking.total_price,
        }

    # --- transitions ---

    def can_advance(self) -> bool:
        if self.step == PaymentStep.COLLECTING_CARD:
            return not self.form.card_errors()
        if self.step == PaymentStep.COLLECTING_BILLING:
            return not self.form.billing_errors()
        return self.step == PaymentStep.REVIEW

    async def advance(self) -> PaymentStep:
        """
        Move to the next step

        Raises:
            ValidationError: Guard of the current step failed
            DuplicateSettlementError: Settlement already running or booking already paid
            PaymentGatewayError / PersistenceError: Settlement failed, back in REVIEW
            InvalidStepError: Flow already finished
        """
        if self.step == PaymentStep.COLLECTING_CARD:
            errors = self.form.card_errors()
            if errors:
                raise ValidationError("Card details are incomplete", errors)
            self.step = PaymentStep.COLLECTING_BILLING
        elif self.step == PaymentStep.COLLECTING_BILLING:
            errors = self.form.billing_errors()
            if errors:
                raise ValidationError("Billing details are incomplete", errors)
            self.step = PaymentStep.REVIEW
        elif self.step == PaymentStep.REVIEW:
            await self._settle()
        elif self.step == PaymentStep.SETTLING:
            raise DuplicateSettlementError(f"Payment for booking {self.booking.id} is already being processed")
        else:
            raise InvalidStepError("Payment already completed")
        return self.step

    def back(self) -> PaymentStep:
        if self.step == PaymentStep.COLLECTING_BILLING:
            self.step = PaymentStep.COLLECTING_CARD
        elif self.step == PaymentStep.REVIEW:
            self.step = PaymentStep.COLLECTING_BILLING
        else:
            raise InvalidStepError(f"Cannot go back from step {self.step.value}")
        return self.step

    def abandon(self) -> None:
        """Drop all entered data; nothing has been persisted before SETTLING"""
        if self.step == PaymentStep.SETTLING:
            raise InvalidStepError("Cannot abandon a payment while it is being processed")
        self.step = PaymentStep.COLLECTING_CARD
        self.form = PaymentForm(email=self.caller.email)

    # --- settlement ---

    async def _settle(self) -> None:
        errors = {**self.form.card_errors(), **self.form.billing_errors()}
        if errors:
            raise ValidationError("Payment details are incomplete", errors)

        booking_id = self.booking.id
        self.registry.acquire(booking_id)
        self.step = PaymentStep.SETTLING
        logger.info(f"Settling booking {booking_id} for {self.booking.total_price}")

        card_number = digits_only(self.form.card_number)
        try:
            current = await sync_to_async(self.gateway.get_booking)(booking_id)
            if current is None:
                raise NotFoundError(f"Booking {booking_id} not found")
            current.ensure_payable()

            request = ChargeRequest(
                booking_id=booking_id,
                amount=current.total_price,
                card_number=card_number,
                expiry_date=self.form.expiry_date,
                cvv=self.form.cvv,
                cardholder_name=self.form.cardholder_name.strip(),
                email=self.form.email,
            )
            result = await self._charge(request)

            payment = PaymentTransaction(
                booking_id=booking_id,
                user_id=current.user_id,
                amount=current.total_price,
                payment_method=payments_setting("PAYMENT_METHOD"),
                card_last_four=last_four(card_number),
                card_brand=detect_card_brand(card_number),
                transaction_status=TransactionStatus.COMPLETED,
                transaction_id=result.transaction_id,
            )
            await sync_to_async(self._record_settlement)(current, payment)
        except (PaymentGatewayError, PersistenceError) as e:
            logger.warning(f"Settlement of booking {booking_id} failed: {e}")
            self.step = PaymentStep.REVIEW
            await sync_to_async(self._record_failed_attempt)(card_number, str(e))
            raise
        else:
            self.booking = current
            self.transaction = payment
            self.step = PaymentStep.SUCCEEDED
            self.form.wipe_card_secrets()
            logger.info(f"Booking {booking_id} paid with transaction {payment.transaction_id}")
        finally:
            if self.step == PaymentStep.SETTLING:
                self.step = PaymentStep.REVIEW
            self.registry.release(booking_id)

    async def _charge(self, request: ChargeRequest):
        timeout = float(payments_setting("SETTLEMENT_TIMEOUT_SECONDS"))
        try:
            return await asyncio.wait_for(self.processor.charge(request), timeout=timeout)
        except asyncio.TimeoutError:
            raise PaymentGatewayError("Payment processor timed out", code="timeout") from None

    def _record_settlement(self, booking: Booking, payment: PaymentTransaction) -> None:
        """Transaction row and paid flag commit together or not at all"""
        with self.gateway.unit_of_work() as uow:
            self.gateway.insert_transaction(payment)
            self.gateway.update_booking_payment_status(booking.id, PaymentStatus.PAID)
            booking.mark_paid(payment)
            uow.collect_events(booking)

    def _record_failed_attempt(self, card_number: str, reason: str) -> None:
        """Audit row for a failed attempt; never touches the booking"""
        if not self.record_failed_attempts or len(card_number) < 4:
            return
        payment = PaymentTransaction(
            booking_id=self.booking.id,
            user_id=self.booking.user_id,
            amount=self.booking.total_price,
            payment_method=payments_setting("PAYMENT_METHOD"),
            card_last_four=last_four(card_number),
            card_brand=detect_card_brand(card_number),
            transaction_status=TransactionStatus.FAILED,
            failure_reason=reason[:255],
        )
        try:
            with self.gateway.unit_of_work():
                self.gateway.insert_transaction(payment)
        except DomainError as e:
            logger.error(f"Could not record failed payment attempt for booking {self.booking.id}: {e}")
