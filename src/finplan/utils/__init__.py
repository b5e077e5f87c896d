"""Parsing helpers for the finplan command line."""

from finplan.utils.date_parser import parse_date
from finplan.utils.amount_parser import parse_money, parse_rate

__all__ = ["parse_date", "parse_money", "parse_rate"]
