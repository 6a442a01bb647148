"""Catalog models for RideGO."""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from .domain.entities import RentableAsset


class Vehicle(models.Model):
    """Motorcycle or scooter offered for daily rent."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    brand = models.CharField(max_length=100)
    model = models.CharField(max_length=100)
    vehicle_type = models.CharField(max_length=50, help_text=_("Sport, cruiser, scooter, ..."))
    price_per_day = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    available = models.BooleanField(default=True)
    image_url = models.URLField(blank=True)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Vehicle")
        verbose_name_plural = _("Vehicles")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["brand"], name="vehicle_brand_idx"),
            models.Index(fields=["vehicle_type"], name="vehicle_type_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.brand} {self.name}"

    def to_domain(self) -> RentableAsset:
        return RentableAsset(
            id=self.id,
            name=self.name,
            brand=self.brand,
            model=self.model,
            vehicle_type=self.vehicle_type,
            price_per_day=self.price_per_day,
            available=self.available,
            image_url=self.image_url or None,
            description=self.description or None,
        )
