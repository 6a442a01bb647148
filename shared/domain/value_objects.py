"""
Common Value Objects

Value objects used across multiple domains:
- Money: Represents monetary amounts in the platform currency
- DateRange: Represents an inclusive range of calendar dates (pick-up to return)
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from shared.domain.base import ValueObject
from shared.domain.exceptions import InvalidRangeError

DEFAULT_CURRENCY = 'INR'


@dataclass(frozen=True)
class Money(ValueObject):
    """
    Money value object

    Represents a monetary amount with currency.
    Immutable and supports arithmetic operations.
    Amounts are always Decimal; binary floats are rejected.
    """
    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self):
        if isinstance(self.amount, float):
            raise TypeError("Money amount must be Decimal, int or str, not float")
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, 'amount', Decimal(str(self.amount)))
        if self.amount < 0:
            raise ValueError("Amount cannot be negative")
        if not self.currency:
            raise ValueError("Currency is required")

    def __add__(self, other: 'Money') -> 'Money':
        """Add two money objects"""
        if not isinstance(other, Money):
            raise TypeError("Can only add Money to Money")
        if self.currency != other.currency:
            raise ValueError(f"Cannot add different currencies: {self.currency} and {other.currency}")
        return Money(self.amount + other.amount, self.currency)

    def __mul__(self, factor: int | Decimal) -> 'Money':
        """Multiply money by an exact factor"""
        if isinstance(factor, bool) or not isinstance(factor, (int, Decimal)):
            raise TypeError("Can only multiply Money by int or Decimal")
        return Money(self.amount * factor, self.currency)

    __rmul__ = __mul__

    def __str__(self):
        return f"{self.amount:,.2f} {self.currency}"

    def __repr__(self):
        return f"Money({self.amount}, '{self.currency}')"


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Date range value object

    Represents a range from start_date to end_date, both inclusive.
    A single-day rental has start_date == end_date.
    """
    start_date: date
    end_date: date

    def __post_init__(self):
        if self.end_date < self.start_date:
            raise InvalidRangeError(
                f"End date ({self.end_date}) cannot be before start date ({self.start_date})"
            )

    def overlaps_with(self, other: 'DateRange') -> bool:
        """
        Check if this range overlaps with another

        Both ends are inclusive, so ranges sharing a single day overlap.
        """
        if not isinstance(other, DateRange):
            raise TypeError("Can only check overlap with another DateRange")
        return self.start_date <= other.end_date and self.end_date >= other.start_date

    def contains(self, check_date: date) -> bool:
        """Check if a date is within this range"""
        return self.start_date <= check_date <= self.end_date

    def __len__(self) -> int:
        """Number of rental days, counting both ends"""
        return (self.end_date - self.start_date).days + 1

    def __str__(self):
        return f"{self.start_date.isoformat()} - {self.end_date.isoformat()}"

    def __repr__(self):
        return f"DateRange({self.start_date}, {self.end_date})"
