"""Payment settings with defaults, read from ``settings.PAYMENTS``."""

from decimal import Decimal

from django.conf import settings

from shared.domain.value_objects import DEFAULT_CURRENCY

DEFAULTS = {
    "CURRENCY": DEFAULT_CURRENCY,
    "PAYMENT_METHOD": "Credit Card",
    # Simulated processor round-trip, seconds
    "SETTLEMENT_DELAY_SECONDS": Decimal("2"),
    "SETTLEMENT_TIMEOUT_SECONDS": Decimal("30"),
    # Card numbers the simulated processor declines
    "DECLINED_CARD_NUMBERS": ("4000000000000002",),
    "RECORD_FAILED_ATTEMPTS": True,
}


def payments_setting(name: str):
    overrides = getattr(settings, "PAYMENTS", {}) if settings.configured else {}
    if name in overrides:
        return overrides[name]
    return DEFAULTS[name]
