from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from shared.domain.context import CallerContext, Role
from apps.bookings.application.command_handlers import CreateBookingCommand, CreateBookingHandler
from apps.bookings.infrastructure.memory_gateway import InMemoryPersistenceGateway
from apps.catalog.domain.entities import RentableAsset

TODAY = date(2026, 3, 10)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def customer():
    return CallerContext(user_id=7, email="rider@example.com", role=Role.CUSTOMER)


@pytest.fixture
def admin():
    return CallerContext(user_id=1, email="ops@example.com", role=Role.ADMIN)


@pytest.fixture
def asset():
    return RentableAsset(
        id=uuid4(),
        name="Classic 350",
        brand="Royal Enfield",
        model="Classic",
        vehicle_type="cruiser",
        price_per_day=Decimal("1500.00"),
    )


@pytest.fixture
def gateway(asset, customer):
    gateway = InMemoryPersistenceGateway()
    gateway.add_asset(asset)
    gateway.add_profile(customer.user_id, "Asha Rao")
    return gateway


@pytest.fixture
def booking(gateway, asset, customer):
    """Pending 3-day booking: 4500.00 INR."""
    handler = CreateBookingHandler(gateway, today=lambda: TODAY)
    return handler.handle(CreateBookingCommand(
        asset=asset,
        caller=customer,
        start_date=date(2026, 3, 12),
        end_date=date(2026, 3, 14),
    ))


# --- ORM-backed fixtures ---

@pytest.fixture
def rider(django_user_model):
    from apps.users.models import Profile

    user = django_user_model.objects.create_user(
        username="rider",
        email="rider@example.com",
        password="pass",
    )
    Profile.objects.create(user=user, full_name="Asha Rao")
    return user


@pytest.fixture
def vehicle():
    from apps.catalog.models import Vehicle

    return Vehicle.objects.create(
        name="Classic 350",
        brand="Royal Enfield",
        model="Classic",
        vehicle_type="cruiser",
        price_per_day=Decimal("1500.00"),
    )


@pytest.fixture
def db_gateway():
    from apps.bookings.infrastructure.django_gateway import DjangoPersistenceGateway

    return DjangoPersistenceGateway()


@pytest.fixture
def db_booking(db_gateway, rider, vehicle):
    from apps.users.models import caller_context_for_user

    handler = CreateBookingHandler(db_gateway, today=lambda: TODAY)
    return handler.handle(CreateBookingCommand(
        asset=vehicle.to_domain(),
        caller=caller_context_for_user(rider),
        start_date=date(2026, 3, 12),
        end_date=date(2026, 3, 14),
    ))
