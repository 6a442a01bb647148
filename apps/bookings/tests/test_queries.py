from dataclasses import replace
from decimal import Decimal
from uuid import uuid4

from apps.bookings.application.queries import (
    UNKNOWN_USER_LABEL,
    AssetFilter,
    BookingFilter,
    merge_user_profiles,
)
from apps.bookings.domain.entities import BookingStatus, PaymentStatus


def test_listing_joins_asset_and_user(gateway, booking, asset):
    (view,) = gateway.list_bookings()

    assert view.booking.id == booking.id
    assert view.asset_name == asset.name
    assert view.asset_brand == "Royal Enfield"
    assert view.user_full_name == "Asha Rao"


def test_missing_profile_falls_back_to_unknown_user(booking, asset):
    (view,) = merge_user_profiles([booking], {asset.id: asset}, {})

    assert view.user_full_name == UNKNOWN_USER_LABEL


def test_blank_profile_name_falls_back_to_unknown_user(booking, asset):
    (view,) = merge_user_profiles([booking], {asset.id: asset}, {booking.user_id: "  "})

    assert view.user_full_name == UNKNOWN_USER_LABEL


def test_booking_filter(gateway, booking):
    assert gateway.list_bookings(BookingFilter(user_id=booking.user_id))
    assert gateway.list_bookings(BookingFilter(user_id=999)) == []
    assert gateway.list_bookings(BookingFilter(payment_status=PaymentStatus.PAID)) == []
    assert gateway.list_bookings(BookingFilter(booking_status=BookingStatus.ACTIVE))


def test_asset_filter(gateway, asset):
    scooter = gateway.add_asset(replace(
        asset,
        id=uuid4(),
        name="Activa",
        brand="Honda",
        model="6G",
        vehicle_type="scooter",
        price_per_day=Decimal("500"),
        available=False,
    ))

    assert gateway.list_assets(AssetFilter(available=True)) == [asset]
    assert gateway.list_assets(AssetFilter(brand="honda")) == [scooter]
    assert gateway.list_assets(AssetFilter(vehicle_type="CRUISER")) == [asset]
    assert gateway.list_assets(AssetFilter(search="enfield")) == [asset]
    assert gateway.list_assets(AssetFilter(search="vespa")) == []
