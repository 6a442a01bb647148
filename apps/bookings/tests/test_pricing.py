from datetime import date
from decimal import Decimal

import pytest

from shared.domain.exceptions import InvalidRangeError, ValidationError
from shared.domain.value_objects import DateRange, Money
from apps.bookings.domain.pricing import PricingCalculator


@pytest.mark.parametrize(
    "start, end, days",
    [
        (date(2026, 3, 1), date(2026, 3, 1), 1),
        (date(2026, 3, 1), date(2026, 3, 3), 3),
        (date(2026, 2, 27), date(2026, 3, 2), 4),
        (date(2026, 12, 31), date(2027, 1, 1), 2),
    ],
)
def test_duration_is_inclusive(start, end, days):
    assert PricingCalculator.duration(start, end) == days


def test_duration_rejects_end_before_start():
    with pytest.raises(InvalidRangeError):
        PricingCalculator.duration(date(2026, 3, 3), date(2026, 3, 1))


def test_price_is_days_times_daily_rate():
    calculator = PricingCalculator()

    assert calculator.price(3, Decimal("1500.00")) == Money(Decimal("4500.00"), "INR")


def test_price_keeps_exact_decimals():
    calculator = PricingCalculator()

    total = calculator.price(3, Decimal("333.33"))

    assert total.amount == Decimal("999.99")


def test_price_requires_at_least_one_day():
    with pytest.raises(ValidationError):
        PricingCalculator().price(0, Decimal("100"))


def test_price_requires_whole_days():
    with pytest.raises(TypeError):
        PricingCalculator().price(1.5, Decimal("100"))


def test_quote_uses_configured_currency():
    calculator = PricingCalculator(currency="USD")

    days, total = calculator.quote(DateRange(date(2026, 3, 1), date(2026, 3, 2)), Decimal("40"))

    assert days == 2
    assert total == Money(Decimal("80"), "USD")
