"""Catalog app package.

Vehicles offered for rent. Bookings reference them by id.
"""
