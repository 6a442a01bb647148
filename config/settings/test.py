"""Test settings for RideGO project.

In-memory SQLite and an instant simulated payment processor.
"""

from .base import *  # noqa: F401,F403

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

PAYMENTS = {**PAYMENTS, 'SETTLEMENT_DELAY_SECONDS': Decimal('0')}  # noqa: F405

LOGGING['root']['level'] = 'CRITICAL'  # noqa: F405
LOGGING['handlers']['console']['level'] = 'CRITICAL'  # noqa: F405
