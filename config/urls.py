"""URL configuration for RideGO project.

Bookings, transactions and the vehicle catalog are managed through the
Django admin.
"""
from django.contrib import admin  # type: ignore
from django.urls import path  # type: ignore

urlpatterns = [
    path('admin/', admin.site.urls),
]
