"""Bookings app package.

This app encapsulates the booking domain: pricing, date selection,
booking creation and the administrative status changes. Persistence
goes through a gateway with Django ORM and in-memory implementations.
"""
