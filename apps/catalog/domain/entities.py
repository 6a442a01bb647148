"""
Catalog Domain Entities

The booking engine reads assets but never changes them; browsing and
editing the catalog is handled elsewhere.
"""

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from shared.domain.base import ValueObject


@dataclass(frozen=True)
class RentableAsset(ValueObject):
    """Read-only snapshot of a vehicle offered for rent"""
    id: UUID
    name: str
    brand: str
    model: str
    vehicle_type: str
    price_per_day: Decimal
    available: bool = True
    image_url: str | None = None
    description: str | None = None

    def __str__(self):
        return f"{self.brand} {self.name} ({self.model})"
