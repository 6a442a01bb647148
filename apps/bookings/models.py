"""Booking models for RideGO."""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import DEFAULT_CURRENCY, DateRange, Money

from .domain.entities import Booking as BookingEntity
from .domain.entities import BookingStatus as DomainBookingStatus
from .domain.entities import PaymentStatus as DomainPaymentStatus


class Booking(models.Model):
    """Reservation of a vehicle for an inclusive range of calendar dates."""

    class Status(models.TextChoices):
        ACTIVE = DomainBookingStatus.ACTIVE.value, _("Active")
        COMPLETED = DomainBookingStatus.COMPLETED.value, _("Completed")
        CANCELLED = DomainBookingStatus.CANCELLED.value, _("Cancelled")

    class PaymentStatus(models.TextChoices):
        PENDING = DomainPaymentStatus.PENDING.value, _("Pending")
        PAID = DomainPaymentStatus.PAID.value, _("Paid")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    vehicle = models.ForeignKey(
        "catalog.Vehicle",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    start_date = models.DateField()
    end_date = models.DateField()
    total_days = models.PositiveSmallIntegerField()
    total_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text=_("Fixed at creation from the vehicle's daily price."),
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )
    booking_status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ACTIVE,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gte=models.F("start_date")),
                name="booking_valid_dates",
            ),
            models.CheckConstraint(
                condition=models.Q(total_days__gte=1),
                name="booking_positive_days",
            ),
        ]
        indexes = [
            models.Index(fields=["vehicle", "start_date", "end_date"], name="booking_vehicle_dates_idx"),
            models.Index(fields=["booking_status"], name="booking_status_idx"),
            models.Index(fields=["payment_status"], name="booking_payment_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking {self.id} for {self.vehicle_id}"

    def to_domain(self, currency: str = DEFAULT_CURRENCY) -> BookingEntity:
        return BookingEntity(
            id=self.id,
            user_id=self.user_id,
            asset_id=self.vehicle_id,
            dates=DateRange(self.start_date, self.end_date),
            total_days=self.total_days,
            total_price=Money(self.total_price, currency),
            payment_status=DomainPaymentStatus(self.payment_status),
            booking_status=DomainBookingStatus(self.booking_status),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
