"""Admin registration for the vehicle catalog."""

from __future__ import annotations

from django.contrib import admin

from .models import Vehicle


@admin.register(Vehicle)
class VehicleAdmin(admin.ModelAdmin):
    list_display = ("name", "brand", "model", "vehicle_type", "price_per_day", "available")
    list_filter = ("available", "brand", "vehicle_type")
    search_fields = ("name", "brand", "model")
    readonly_fields = ("created_at", "updated_at")
