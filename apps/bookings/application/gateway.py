"""
Persistence Gateway

Storage contract consumed by the booking engine, the payment flow and the
admin status controller. Implementations translate their storage errors
into PersistenceError and report unknown bookings with NotFoundError.
"""

from abc import ABC, abstractmethod
from typing import List
from uuid import UUID

from shared.application.uow import AbstractUnitOfWork
from apps.bookings.application.queries import AssetFilter, BookingFilter, BookingView, TransactionFilter
from apps.bookings.domain.entities import Booking, BookingStatus, DraftBooking, PaymentStatus
from apps.catalog.domain.entities import RentableAsset
from apps.finances.conf import payments_setting
from apps.finances.domain.entities import PaymentTransaction


class AbstractPersistenceGateway(ABC):

    @property
    def currency(self) -> str:
        """Currency of every amount this gateway stores and returns"""
        return payments_setting("CURRENCY")

    @abstractmethod
    def unit_of_work(self) -> AbstractUnitOfWork:
        """Writes made inside the returned unit of work commit or roll back together"""

    @abstractmethod
    def insert_booking(self, draft: DraftBooking) -> UUID:
        """Persist a new booking (pending, active) and return its id"""

    @abstractmethod
    def get_booking(self, booking_id: UUID) -> Booking | None:
        pass

    @abstractmethod
    def update_booking_payment_status(self, booking_id: UUID, status: PaymentStatus) -> None:
        pass

    @abstractmethod
    def update_booking_status(self, booking_id: UUID, status: BookingStatus) -> None:
        pass

    @abstractmethod
    def insert_transaction(self, payment: PaymentTransaction) -> UUID:
        pass

    @abstractmethod
    def list_bookings(self, filter: BookingFilter | None = None) -> List[BookingView]:
        """Newest first, joined with asset and user display fields"""

    @abstractmethod
    def list_transactions(self, filter: TransactionFilter | None = None) -> List[PaymentTransaction]:
        """Newest first"""

    @abstractmethod
    def list_assets(self, filter: AssetFilter | None = None) -> List[RentableAsset]:
        pass
