"""Admin registrations for the users domain."""

from __future__ import annotations

from django.contrib import admin

from .models import Profile


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ("full_name", "user", "role", "created_at")
    list_filter = ("role",)
    search_fields = ("full_name", "user__email", "user__username")
    readonly_fields = ("created_at", "updated_at")
    raw_id_fields = ("user",)
