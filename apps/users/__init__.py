"""Users app package.

Holds the customer profile (display name and role) attached to Django's
built-in user. The booking engine reads it to build a CallerContext and
to show customer names in booking listings.
"""
