"""Domain layer for finplan.

Services import the repository interfaces from finplan.database.base, which in
turn imports entities from here, so only value types are re-exported. Import
services from their own modules, e.g. finplan.domain.engine.
"""

from finplan.domain.errors import DomainError, ErrorCode
from finplan.domain.money import Currency, DateRange, Money
from finplan.domain.results import Failure, Result, Success

__all__ = [
    "Currency",
    "DateRange",
    "DomainError",
    "ErrorCode",
    "Failure",
    "Money",
    "Result",
    "Success",
]
