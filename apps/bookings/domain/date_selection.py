"""Interactive start/end date selection with the re-selection policy."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Callable

from shared.domain.exceptions import ValidationError
from shared.domain.value_objects import DateRange, Money

from .pricing import PricingCalculator


class DateRangeSelection:
    """
    Tracks a customer's date picks before a booking is created.

    Choosing a start date after the already chosen end date clears the end
    date, so the customer has to pick it again instead of ending up with an
    inverted range.
    """

    def __init__(self, today: Callable[[], date] = date.today, calculator: PricingCalculator | None = None):
        self._today = today
        self._calculator = calculator or PricingCalculator()
        self.start_date: date | None = None
        self.end_date: date | None = None

    def select_start(self, value: date) -> None:
        if value < self._today():
            raise ValidationError("Start date cannot be in the past", {"start_date": "Date is in the past."})
        self.start_date = value
        if self.end_date is not None and self.end_date < value:
            self.end_date = None

    def select_end(self, value: date) -> None:
        if self.start_date is None:
            raise ValidationError("Select a start date first", {"start_date": "Start date is required."})
        if value < self.start_date:
            raise ValidationError(
                "End date cannot be before start date",
                {"end_date": "End date must be on or after the start date."},
            )
        self.end_date = value

    def clear(self) -> None:
        self.start_date = None
        self.end_date = None

    @property
    def is_complete(self) -> bool:
        return self.start_date is not None and self.end_date is not None

    def to_range(self) -> DateRange:
        if not self.is_complete:
            raise ValidationError("Both start and end dates are required")
        return DateRange(self.start_date, self.end_date)

    def summary(self, price_per_day: Decimal) -> tuple[int, Money | None]:
        """Days and total for the booking summary; (0, None) while incomplete."""
        if not self.is_complete:
            return 0, None
        return self._calculator.quote(self.to_range(), price_per_day)
