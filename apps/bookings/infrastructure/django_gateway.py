"""
Django ORM persistence gateway.

Maps the ORM rows of the catalog, users, bookings and finances apps onto
domain objects. Every database error leaves this module as
PersistenceError so callers never depend on django.db.
"""

from __future__ import annotations

import functools
import logging
from typing import List
from uuid import UUID

from django.core.exceptions import ObjectDoesNotExist  # type: ignore
from django.db import DatabaseError  # type: ignore
from django.db.models import Q  # type: ignore
from django.utils import timezone  # type: ignore

from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import NotFoundError, PersistenceError
from apps.bookings.application.gateway import AbstractPersistenceGateway
from apps.bookings.application.queries import (
    AssetFilter,
    BookingFilter,
    BookingView,
    TransactionFilter,
    display_name,
)
from apps.bookings.domain.entities import Booking, BookingStatus, DraftBooking, PaymentStatus
from apps.bookings.models import Booking as BookingModel
from apps.catalog.domain.entities import RentableAsset
from apps.catalog.models import Vehicle
from apps.finances.domain.entities import PaymentTransaction
from apps.finances.models import PaymentTransaction as PaymentTransactionModel

logger = logging.getLogger(__name__)


def translate_database_errors(func):
    """Re-raise django.db errors as PersistenceError."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DatabaseError as e:
            logger.error(f"Database error in {func.__name__}: {e}", exc_info=True)
            raise PersistenceError(
                f"Could not complete {func.__name__.replace('_', ' ')}; please retry."
            ) from e

    return wrapper


class DjangoPersistenceGateway(AbstractPersistenceGateway):

    def __init__(self, using: str | None = None):
        self.using = using

    def unit_of_work(self) -> DjangoUnitOfWork:
        return DjangoUnitOfWork(using=self.using)

    def _bookings(self):
        return BookingModel.objects.db_manager(self.using)

    # --- bookings ---

    @translate_database_errors
    def insert_booking(self, draft: DraftBooking) -> UUID:
        row = self._bookings().create(
            user_id=draft.user_id,
            vehicle_id=draft.asset_id,
            start_date=draft.dates.start_date,
            end_date=draft.dates.end_date,
            total_days=draft.total_days,
            total_price=draft.total_price.amount,
            payment_status=BookingModel.PaymentStatus.PENDING,
            booking_status=BookingModel.Status.ACTIVE,
        )
        logger.debug(f"Inserted booking row {row.id}")
        return row.id

    @translate_database_errors
    def get_booking(self, booking_id: UUID) -> Booking | None:
        row = self._bookings().filter(pk=booking_id).first()
        return row.to_domain(self.currency) if row else None

    @translate_database_errors
    def update_booking_payment_status(self, booking_id: UUID, status: PaymentStatus) -> None:
        updated = self._bookings().filter(pk=booking_id).update(
            payment_status=status.value,
            updated_at=timezone.now(),
        )
        if not updated:
            raise NotFoundError(f"Booking {booking_id} not found")

    @translate_database_errors
    def update_booking_status(self, booking_id: UUID, status: BookingStatus) -> None:
        updated = self._bookings().filter(pk=booking_id).update(
            booking_status=status.value,
            updated_at=timezone.now(),
        )
        if not updated:
            raise NotFoundError(f"Booking {booking_id} not found")

    @translate_database_errors
    def list_bookings(self, filter: BookingFilter | None = None) -> List[BookingView]:
        filter = filter or BookingFilter()
        queryset = self._bookings().select_related("vehicle", "user__profile").order_by("-created_at")
        if filter.user_id is not None:
            queryset = queryset.filter(user_id=filter.user_id)
        if filter.booking_status is not None:
            queryset = queryset.filter(booking_status=filter.booking_status.value)
        if filter.payment_status is not None:
            queryset = queryset.filter(payment_status=filter.payment_status.value)

        currency = self.currency
        return [
            BookingView(
                booking=row.to_domain(currency),
                asset_name=row.vehicle.name,
                asset_brand=row.vehicle.brand,
                asset_model=row.vehicle.model,
                asset_image_url=row.vehicle.image_url or None,
                user_full_name=self._full_name(row),
            )
            for row in queryset
        ]

    @staticmethod
    def _full_name(row: BookingModel) -> str:
        try:
            return display_name(row.user.profile.full_name)
        except ObjectDoesNotExist:
            return display_name(None)

    # --- transactions ---

    @translate_database_errors
    def insert_transaction(self, payment: PaymentTransaction) -> UUID:
        if not self._bookings().filter(pk=payment.booking_id).exists():
            raise NotFoundError(f"Booking {payment.booking_id} not found")
        row = PaymentTransactionModel.from_domain(payment)
        row.save(force_insert=True, using=self.using)
        return row.id

    @translate_database_errors
    def list_transactions(self, filter: TransactionFilter | None = None) -> List[PaymentTransaction]:
        filter = filter or TransactionFilter()
        queryset = PaymentTransactionModel.objects.db_manager(self.using).order_by("-created_at")
        if filter.booking_id is not None:
            queryset = queryset.filter(booking_id=filter.booking_id)
        if filter.user_id is not None:
            queryset = queryset.filter(user_id=filter.user_id)
        if filter.transaction_status is not None:
            queryset = queryset.filter(transaction_status=filter.transaction_status.value)
        return [row.to_domain() for row in queryset]

    # --- catalog ---

    @translate_database_errors
    def list_assets(self, filter: AssetFilter | None = None) -> List[RentableAsset]:
        filter = filter or AssetFilter()
        queryset = Vehicle.objects.db_manager(self.using).all()
        if filter.available is not None:
            queryset = queryset.filter(available=filter.available)
        if filter.brand:
            queryset = queryset.filter(brand__iexact=filter.brand)
        if filter.vehicle_type:
            queryset = queryset.filter(vehicle_type__iexact=filter.vehicle_type)
        if filter.search:
            queryset = queryset.filter(
                Q(name__icontains=filter.search)
                | Q(brand__icontains=filter.search)
                | Q(model__icontains=filter.search)
            )
        return [row.to_domain() for row in queryset]
