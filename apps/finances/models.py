"""Financial models for RideGO."""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import RegexValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import DEFAULT_CURRENCY, Money

from .domain.entities import DEFAULT_PAYMENT_METHOD
from .domain.entities import PaymentTransaction as PaymentTransactionEntity
from .domain.entities import TransactionStatus

LAST_FOUR_VALIDATOR = RegexValidator(
    regex=r"^\d{4}$",
    message=_("Only the last four digits of the card may be stored."),
)


class PaymentTransaction(models.Model):
    """Immutable record of one settlement attempt for a booking."""

    class Status(models.TextChoices):
        COMPLETED = TransactionStatus.COMPLETED.value, _("Completed")
        FAILED = TransactionStatus.FAILED.value, _("Failed")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.CASCADE,
        related_name="transactions",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="payment_transactions",
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=3, default=DEFAULT_CURRENCY)
    payment_method = models.CharField(max_length=50, default=DEFAULT_PAYMENT_METHOD)
    card_last_four = models.CharField(max_length=4, validators=[LAST_FOUR_VALIDATOR])
    card_brand = models.CharField(max_length=50)
    transaction_status = models.CharField(max_length=20, choices=Status.choices)
    transaction_id = models.CharField(max_length=100, unique=True)
    failure_reason = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Payment transaction")
        verbose_name_plural = _("Payment transactions")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["booking", "transaction_status"], name="txn_booking_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.transaction_id} for booking {self.booking_id} ({self.transaction_status})"

    @classmethod
    def from_domain(cls, payment: PaymentTransactionEntity) -> "PaymentTransaction":
        return cls(
            id=payment.id,
            booking_id=payment.booking_id,
            user_id=payment.user_id,
            amount=payment.amount.amount,
            currency=payment.amount.currency,
            payment_method=payment.payment_method,
            card_last_four=payment.card_last_four,
            card_brand=payment.card_brand,
            transaction_status=payment.transaction_status.value,
            transaction_id=payment.transaction_id,
            failure_reason=payment.failure_reason,
        )

    def to_domain(self) -> PaymentTransactionEntity:
        return PaymentTransactionEntity(
            id=self.id,
            booking_id=self.booking_id,
            user_id=self.user_id,
            amount=Money(self.amount, self.currency),
            payment_method=self.payment_method,
            card_last_four=self.card_last_four,
            card_brand=self.card_brand,
            transaction_status=TransactionStatus(self.transaction_status),
            transaction_id=self.transaction_id,
            failure_reason=self.failure_reason,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
