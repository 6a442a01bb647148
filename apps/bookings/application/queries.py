"""Read models and filters used by the listing operations of the gateway."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping
from uuid import UUID

from apps.bookings.domain.entities import Booking, BookingStatus, PaymentStatus
from apps.catalog.domain.entities import RentableAsset
from apps.finances.domain.entities import TransactionStatus

# Shown when a booking references a user without a profile record
UNKNOWN_USER_LABEL = "Unknown User"


@dataclass(frozen=True)
class BookingFilter:
    user_id: int | None = None
    booking_status: BookingStatus | None = None
    payment_status: PaymentStatus | None = None


@dataclass(frozen=True)
class TransactionFilter:
    booking_id: UUID | None = None
    user_id: int | None = None
    transaction_status: TransactionStatus | None = None


@dataclass(frozen=True)
class AssetFilter:
    available: bool | None = None
    brand: str | None = None
    vehicle_type: str | None = None
    search: str | None = None

    def matches(self, asset: RentableAsset) -> bool:
        if self.available is not None and asset.available != self.available:
            return False
        if self.brand and asset.brand.lower() != self.brand.lower():
            return False
        if self.vehicle_type and asset.vehicle_type.lower() != self.vehicle_type.lower():
            return False
        if self.search:
            needle = self.search.lower()
            haystack = (asset.name, asset.brand, asset.model)
            if not any(needle in value.lower() for value in haystack):
                return False
        return True


@dataclass(frozen=True)
class BookingView:
    """Booking joined with asset and user display fields."""

    booking: Booking
    asset_name: str
    asset_brand: str
    asset_model: str
    asset_image_url: str | None
    user_full_name: str


def display_name(full_name: str | None) -> str:
    return full_name.strip() if full_name and full_name.strip() else UNKNOWN_USER_LABEL


def merge_user_profiles(
    bookings: Iterable[Booking],
    assets: Mapping[UUID, RentableAsset],
    profiles: Mapping[int, str],
) -> list[BookingView]:
    """
    Join bookings with asset and user display data.

    `profiles` maps user id to full name. Users without a profile are shown
    as UNKNOWN_USER_LABEL instead of failing the whole listing.
    """
    views = []
    for booking in bookings:
        asset = assets.get(booking.asset_id)
        views.append(BookingView(
            booking=booking,
            asset_name=asset.name if asset else "",
            asset_brand=asset.brand if asset else "",
            asset_model=asset.model if asset else "",
            asset_image_url=asset.image_url if asset else None,
            user_full_name=display_name(profiles.get(booking.user_id)),
        ))
    return views
