"""Shared domain error messages and error types."""

from enum import Enum


class ErrorCode(str, Enum):
    """Stable failure codes surfaced through results."""

    INVALID_NAME = "INVALID_NAME"
    NAME_EXISTS = "NAME_EXISTS"
    INVALID_PARENT = "INVALID_PARENT"
    INVALID_COLOR = "INVALID_COLOR"
    CANNOT_MODIFY_DEFAULT = "CANNOT_MODIFY_DEFAULT"
    CATEGORY_IN_USE = "CATEGORY_IN_USE"
    NOT_FOUND = "NOT_FOUND"
    INVALID_INPUT = "INVALID_INPUT"


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """

    default_code = ErrorCode.INVALID_INPUT

    def __init__(self, message: str, code: ErrorCode | None = None):
        super().__init__(message)
        self.code = code or self.default_code


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""

    default_code = ErrorCode.NOT_FOUND


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""

    default_code = ErrorCode.NAME_EXISTS


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""

    default_code = ErrorCode.CATEGORY_IN_USE


def category_not_found(category_id: str) -> str:
    """Return message for missing category by ID."""
    return f"Category '{category_id}' not found"


def transaction_not_found(transaction_id: str) -> str:
    """Return message for missing transaction."""
    return f"Transaction '{transaction_id}' not found"


def recommendation_not_found(recommendation_id: str) -> str:
    """Return message for an unknown recommendation."""
    return f"Recommendation '{recommendation_id}' not found"


def category_name_exists(name: str) -> str:
    """Return message for a case-insensitive category name collision."""
    return f"A category named '{name}' already exists"


def default_category_locked(category_id: str) -> str:
    """Return message when a default category is targeted for change."""
    return f"Category '{category_id}' is a default category and cannot be modified"


def category_in_use(category_id: str, transaction_count: int) -> str:
    """Return message when a category still has transactions."""
    return (
        f"Cannot delete category '{category_id}': it has "
        f"{transaction_count} transaction{'s' if transaction_count != 1 else ''}. "
        "Supply a reassignment category first."
    )


def currency_mismatch(left: str, right: str) -> str:
    """Return message for arithmetic across currencies."""
    return f"Cannot combine amounts in {left} and {right}"
