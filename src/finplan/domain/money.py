"""Exact monetary and period value types.

Money keeps amounts as integer minor units so that sums never drift. Scaling
by a rate goes through Decimal and rounds half-up back to whole cents.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from functools import total_ordering
from typing import Union

from finplan.domain.errors import ValidationError, currency_mismatch

Number = Union[int, float, str, Decimal]

CENTS = Decimal("0.01")


def to_decimal(value: Number) -> Decimal:
    """Convert a number to Decimal without float artifacts."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


class Currency(str, Enum):
    """Supported currencies. Arithmetic never mixes them."""

    CAD = "CAD"
    USD = "USD"

    @property
    def symbol(self) -> str:
        return "$"


@total_ordering
@dataclass(frozen=True)
class Money:
    """Signed monetary amount in integer minor units."""

    cents: int
    currency: Currency = Currency.CAD

    def __post_init__(self):
        if not isinstance(self.cents, int) or isinstance(self.cents, bool):
            raise ValidationError(f"Money requires integer minor units, got {self.cents!r}")

    @classmethod
    def zero(cls, currency: Currency = Currency.CAD) -> "Money":
        return cls(0, currency)

    @classmethod
    def of(cls, amount: Number, currency: Currency = Currency.CAD) -> "Money":
        """Build Money from a major-unit amount, rounding half-up to cents."""
        quantized = to_decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)
        return cls(int(quantized * 100), currency)

    @property
    def amount(self) -> Decimal:
        """Major-unit amount as an exact Decimal."""
        return (Decimal(self.cents) / 100).quantize(CENTS)

    @property
    def absolute_value(self) -> "Money":
        return Money(abs(self.cents), self.currency)

    @property
    def is_negative(self) -> bool:
        return self.cents < 0

    @property
    def is_positive(self) -> bool:
        return self.cents > 0

    @property
    def is_zero(self) -> bool:
        return self.cents == 0

    def _check_currency(self, other: "Money") -> None:
        if self.currency != other.currency:
            raise ValidationError(currency_mismatch(self.currency.value, other.currency.value))

    def __add__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other)
        return Money(self.cents + other.cents, self.currency)

    def __radd__(self, other):
        # Allows sum() over Money values
        if other == 0:
            return self
        return self.__add__(other)

    def __sub__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other)
        return Money(self.cents - other.cents, self.currency)

    def __neg__(self) -> "Money":
        return Money(-self.cents, self.currency)

    def scale(self, factor: Number) -> "Money":
        """Multiply by a factor, rounding half-up to whole minor units."""
        scaled = (Decimal(self.cents) * to_decimal(factor)).quantize(
            Decimal("1"), rounding=ROUND_HALF_UP
        )
        return Money(int(scaled), self.currency)

    def __mul__(self, factor: Number) -> "Money":
        if isinstance(factor, Money):
            return NotImplemented
        return self.scale(factor)

    __rmul__ = __mul__

    def divide(self, divisor: Number) -> "Money":
        """Divide by a number, rounding half-up to whole minor units."""
        divisor = to_decimal(divisor)
        if divisor == 0:
            raise ValidationError("Cannot divide money by zero")
        quotient = (Decimal(self.cents) / divisor).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        return Money(int(quotient), self.currency)

    def ratio(self, other: "Money") -> Decimal:
        """Return self / other as a Decimal, zero when other is zero."""
        self._check_currency(other)
        if other.cents == 0:
            return Decimal(0)
        return Decimal(self.cents) / Decimal(other.cents)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.cents == other.cents and self.currency == other.currency

    def __lt__(self, other: "Money") -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other)
        return self.cents < other.cents

    def __hash__(self) -> int:
        return hash((self.cents, self.currency))

    def format(self) -> str:
        """Format as e.g. '-$1,234.56'."""
        sign = "-" if self.cents < 0 else ""
        return f"{sign}{self.currency.symbol}{abs(self.amount):,.2f}"

    def __str__(self) -> str:
        return self.format()


def money_sum(values, currency: Currency = Currency.CAD) -> Money:
    """Sum Money values, returning zero for an empty iterable."""
    total = Money.zero(currency)
    for value in values:
        total = total + value
    return total


@dataclass(frozen=True)
class DateRange:
    """Inclusive period between two dates."""

    start: date
    end: date

    def __post_init__(self):
        if self.start > self.end:
            raise ValidationError(
                f"Date range start {self.start.isoformat()} is after end {self.end.isoformat()}"
            )

    @property
    def duration_in_days(self) -> int:
        return (self.end - self.start).days + 1

    @property
    def duration_in_weeks(self) -> float:
        return self.duration_in_days / 7

    @property
    def duration_in_months(self) -> float:
        return self.duration_in_days / 30

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def split(self) -> tuple["DateRange", "DateRange"]:
        """Split into two halves. A one-day range yields the same day twice."""
        if self.start == self.end:
            return self, self
        midpoint = self.start + timedelta(days=(self.duration_in_days // 2) - 1)
        return DateRange(self.start, midpoint), DateRange(midpoint + timedelta(days=1), self.end)

    @classmethod
    def covering(cls, dates) -> "DateRange":
        """Smallest range containing every given date."""
        dates = list(dates)
        if not dates:
            raise ValidationError("Cannot build a date range from no dates")
        return cls(min(dates), max(dates))
