"""Amount and rate parsing utilities."""

import re
from decimal import Decimal, InvalidOperation

from finplan.domain.errors import ValidationError
from finplan.domain.money import Currency, Money

CURRENCY_SYMBOLS = re.compile(r"[$€£¥]")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles "123.45", "$123.45", "-$1,234.56" and "(123.45)" (negative in
    parentheses).

    Raises:
        ValidationError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValidationError("Empty amount string")

    text = amount_str.strip()
    is_negative = False
    if text.startswith("(") and text.endswith(")"):
        is_negative = True
        text = text[1:-1]

    text = CURRENCY_SYMBOLS.sub("", text).replace(",", "").strip()

    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise ValidationError(f"Could not parse amount '{amount_str}'")
    if not amount.is_finite():
        raise ValidationError(f"Could not parse amount '{amount_str}'")
    return -amount if is_negative else amount


def parse_money(amount_str: str, currency: Currency = Currency.CAD) -> Money:
    """Parse an amount string into Money, rounded half-up to cents."""
    return Money.of(parse_amount(amount_str), currency)


def parse_rate(rate_str: str) -> Decimal:
    """Parse an annual interest rate such as "19.99" or "19.99%" into percent.

    Raises:
        ValidationError: If the rate is not a number or is negative
    """
    text = rate_str.strip().rstrip("%").strip() if rate_str else ""
    try:
        rate = Decimal(text)
    except InvalidOperation:
        raise ValidationError(f"Could not parse rate '{rate_str}'")
    if not rate.is_finite() or rate < 0:
        raise ValidationError(f"Interest rate must be a non-negative number, got '{rate_str}'")
    return rate
