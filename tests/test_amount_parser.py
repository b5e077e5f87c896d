"""Tests for amount and rate parsing."""

from decimal import Decimal

import pytest

from finplan.domain.errors import ValidationError
from finplan.domain.money import Currency, Money
from finplan.utils.amount_parser import parse_amount, parse_money, parse_rate


@pytest.mark.parametrize(
    "text,expected",
    [
        ("123.45", Decimal("123.45")),
        ("$123.45", Decimal("123.45")),
        ("-$1,234.56", Decimal("-1234.56")),
        ("(45.00)", Decimal("-45.00")),
        ("  7 ", Decimal("7")),
    ],
)
def test_parse_amount(text, expected):
    """Test parsing amounts with symbols, separators and parentheses."""
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "abc", "12..3", "NaN", "Infinity"])
def test_parse_amount_rejects_garbage(text):
    """Test that unparseable amounts raise ValidationError."""
    with pytest.raises(ValidationError):
        parse_amount(text)


def test_parse_money_rounds_to_cents():
    """Test that parsed money rounds half-up and keeps the currency."""
    assert parse_money("10.005") == Money.of("10.01")
    assert parse_money("5", Currency.USD) == Money(500, Currency.USD)


@pytest.mark.parametrize("text,expected", [("19.99", "19.99"), ("19.99%", "19.99"), (" 0 ", "0")])
def test_parse_rate(text, expected):
    """Test parsing rates with and without a percent sign."""
    assert parse_rate(text) == Decimal(expected)


@pytest.mark.parametrize("text", ["", "-1", "fast", "%"])
def test_parse_rate_rejects_invalid(text):
    """Test that empty, negative and non-numeric rates are rejected."""
    with pytest.raises(ValidationError):
        parse_rate(text)
