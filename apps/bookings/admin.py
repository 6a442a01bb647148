"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin, messages
from django.utils.translation import gettext_lazy as _

from shared.domain.exceptions import DomainError
from apps.users.models import caller_context_for_user

from .application.command_handlers import TransitionBookingStatusCommand, TransitionBookingStatusHandler
from .domain.entities import BookingStatus
from .infrastructure.django_gateway import DjangoPersistenceGateway
from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "vehicle",
        "user",
        "booking_status",
        "payment_status",
        "start_date",
        "end_date",
        "total_days",
        "total_price",
        "created_at",
    )
    list_filter = ("booking_status", "payment_status", "start_date", "end_date")
    search_fields = ("id", "vehicle__name", "vehicle__brand", "user__email")
    readonly_fields = (
        "id",
        "user",
        "vehicle",
        "start_date",
        "end_date",
        "total_days",
        "total_price",
        "payment_status",
        "booking_status",
        "created_at",
        "updated_at",
    )
    actions = ("mark_completed", "mark_cancelled")

    def has_add_permission(self, request):
        return False

    def _transition(self, request, queryset, status: BookingStatus) -> None:
        handler = TransitionBookingStatusHandler(DjangoPersistenceGateway())
        caller = caller_context_for_user(request.user)
        updated = 0
        for booking_id in queryset.values_list("id", flat=True):
            try:
                handler.handle(TransitionBookingStatusCommand(
                    caller=caller,
                    booking_id=booking_id,
                    new_status=status,
                ))
                updated += 1
            except DomainError as e:
                self.message_user(request, f"{booking_id}: {e}", level=messages.ERROR)
        if updated:
            self.message_user(request, f"{updated} booking(s) marked {status.value}.", level=messages.SUCCESS)

    @admin.action(description=_("Mark selected bookings as completed"))
    def mark_completed(self, request, queryset):
        self._transition(request, queryset, BookingStatus.COMPLETED)

    @admin.action(description=_("Mark selected bookings as cancelled"))
    def mark_cancelled(self, request, queryset):
        self._transition(request, queryset, BookingStatus.CANCELLED)
