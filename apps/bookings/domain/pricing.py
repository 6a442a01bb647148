"""
Pricing Calculator

Pure date and price arithmetic for rentals. Days are counted inclusively,
so picking up and returning on the same day is a one-day rental.
All amounts use Decimal to keep totals reproducible across storage.
"""

from datetime import date
from decimal import Decimal

from shared.domain.exceptions import InvalidRangeError, ValidationError
from shared.domain.value_objects import DateRange, Money
from apps.finances.conf import payments_setting


class PricingCalculator:
    """
    Stateless calculator; safe to share between handlers.

    Prices are quoted in PAYMENTS["CURRENCY"] unless a currency is given.
    """

    def __init__(self, currency: str | None = None):
        self.currency = currency or payments_setting("CURRENCY")

    @staticmethod
    def duration(start: date, end: date) -> int:
        """
        Inclusive day count between two calendar dates

        Raises:
            InvalidRangeError: If end is before start
        """
        if end < start:
            raise InvalidRangeError(f"End date ({end}) cannot be before start date ({start})")
        return (end - start).days + 1

    def price(self, days: int, price_per_day: Decimal | Money) -> Money:
        """days x price_per_day, computed with exact decimal arithmetic"""
        if isinstance(days, bool) or not isinstance(days, int):
            raise TypeError("Days must be an integer")
        if days < 1:
            raise ValidationError("A rental lasts at least one day")

        rate = price_per_day if isinstance(price_per_day, Money) else Money(price_per_day, self.currency)
        return rate * days

    def quote(self, dates: DateRange, price_per_day: Decimal | Money) -> tuple[int, Money]:
        """Duration and total price for a date range"""
        days = self.duration(dates.start_date, dates.end_date)
        return days, self.price(days, price_per_day)
