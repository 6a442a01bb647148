"""
In-memory persistence gateway.

Keeps copies of domain objects in dictionaries. Used by the test-suite and
for running the engine without a database. A unit of work snapshots the
whole store on entry and restores it on rollback.
"""

from __future__ import annotations

import copy
import logging
import threading
from typing import List
from uuid import UUID, uuid4

from shared.application.uow import AbstractUnitOfWork
from shared.domain.exceptions import NotFoundError
from apps.bookings.application.gateway import AbstractPersistenceGateway
from apps.bookings.application.queries import (
    AssetFilter,
    BookingFilter,
    BookingView,
    TransactionFilter,
    merge_user_profiles,
)
from apps.bookings.domain.entities import Booking, BookingStatus, DraftBooking, PaymentStatus
from apps.catalog.domain.entities import RentableAsset
from apps.finances.domain.entities import PaymentTransaction

logger = logging.getLogger(__name__)


class InMemoryUnitOfWork(AbstractUnitOfWork):

    def __init__(self, gateway: 'InMemoryPersistenceGateway'):
        super().__init__()
        self._gateway = gateway
        self._snapshot = None

    def __enter__(self):
        self._gateway._lock.acquire()
        self._snapshot = self._gateway._snapshot()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            super().__exit__(exc_type, exc_val, exc_tb)
        finally:
            self._gateway._lock.release()

    def commit(self):
        self._snapshot = None
        events = self._take_events()
        if events:
            self._publish_events(events)

    def rollback(self):
        logger.warning(f"Rolling back in-memory unit of work, discarding {len(self._events)} events")
        self._events.clear()
        if self._snapshot is not None:
            self._gateway._restore(self._snapshot)
            self._snapshot = None


class InMemoryPersistenceGateway(AbstractPersistenceGateway):

    def __init__(self, currency: str | None = None):
        self._currency = currency
        self._lock = threading.RLock()
        self._bookings: dict[UUID, Booking] = {}
        self._transactions: dict[UUID, PaymentTransaction] = {}
        self._assets: dict[UUID, RentableAsset] = {}
        self._profiles: dict[int, str] = {}

    @property
    def currency(self) -> str:
        return self._currency or super().currency

    # --- seeding (catalog and identity collaborators) ---

    def add_asset(self, asset: RentableAsset) -> RentableAsset:
        self._assets[asset.id] = asset
        return asset

    def add_profile(self, user_id: int, full_name: str) -> None:
        self._profiles[user_id] = full_name

    # --- unit of work ---

    def unit_of_work(self) -> InMemoryUnitOfWork:
        return InMemoryUnitOfWork(self)

    def _snapshot(self):
        return copy.deepcopy((self._bookings, self._transactions))

    def _restore(self, snapshot):
        self._bookings, self._transactions = snapshot

    # --- bookings ---

    def insert_booking(self, draft: DraftBooking) -> UUID:
        booking_id = uuid4()
        with self._lock:
            self._bookings[booking_id] = Booking.from_draft(draft, booking_id)
        return booking_id

    def get_booking(self, booking_id: UUID) -> Booking | None:
        booking = self._bookings.get(booking_id)
        return copy.deepcopy(booking) if booking else None

    def _stored_booking(self, booking_id: UUID) -> Booking:
        try:
            return self._bookings[booking_id]
        except KeyError:
            raise NotFoundError(f"Booking {booking_id} not found") from None

    def update_booking_payment_status(self, booking_id: UUID, status: PaymentStatus) -> None:
        with self._lock:
            booking = self._stored_booking(booking_id)
            booking.payment_status = status
            booking.touch()

    def update_booking_status(self, booking_id: UUID, status: BookingStatus) -> None:
        with self._lock:
            booking = self._stored_booking(booking_id)
            booking.booking_status = status
            booking.touch()

    def list_bookings(self, filter: BookingFilter | None = None) -> List[BookingView]:
        filter = filter or BookingFilter()
        bookings = [
            copy.deepcopy(b) for b in self._bookings.values()
            if (filter.user_id is None or b.user_id == filter.user_id)
            and (filter.booking_status is None or b.booking_status == filter.booking_status)
            and (filter.payment_status is None or b.payment_status == filter.payment_status)
        ]
        bookings.sort(key=lambda b: b.created_at, reverse=True)
        return merge_user_profiles(bookings, self._assets, self._profiles)

    # --- transactions ---

    def insert_transaction(self, payment: PaymentTransaction) -> UUID:
        with self._lock:
            if payment.booking_id not in self._bookings:
                raise NotFoundError(f"Booking {payment.booking_id} not found")
            self._transactions[payment.id] = payment
        return payment.id

    def list_transactions(self, filter: TransactionFilter | None = None) -> List[PaymentTransaction]:
        filter = filter or TransactionFilter()
        transactions = [
            t for t in self._transactions.values()
            if (filter.booking_id is None or t.booking_id == filter.booking_id)
            and (filter.user_id is None or t.user_id == filter.user_id)
            and (filter.transaction_status is None or t.transaction_status == filter.transaction_status)
        ]
        return sorted(transactions, key=lambda t: t.created_at, reverse=True)

    # --- catalog ---

    def list_assets(self, filter: AssetFilter | None = None) -> List[RentableAsset]:
        filter = filter or AssetFilter()
        return [a for a in self._assets.values() if filter.matches(a)]
