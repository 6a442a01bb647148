"""Admin registration for payment transactions (read-only)."""

from __future__ import annotations

from django.contrib import admin

from .models import PaymentTransaction


@admin.register(PaymentTransaction)
class PaymentTransactionAdmin(admin.ModelAdmin):
    list_display = (
        "transaction_id",
        "booking",
        "user",
        "amount",
        "currency",
        "card_brand",
        "card_last_four",
        "transaction_status",
        "created_at",
    )
    list_filter = ("transaction_status", "card_brand", "created_at")
    search_fields = ("transaction_id", "booking__id", "user__email")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
