"""Category domain service."""

import logging
import re
from collections import defaultdict
from dataclasses import replace
from typing import Optional

from finplan.database.base import CategoryRepository, TransactionHistoryProvider
from finplan.domain.entities import (
    Category,
    CategoryImprovementSuggestion,
    CategorySuggestionType,
    CategoryUsageStats,
    UsageFrequency,
)
from finplan.domain.errors import (
    ErrorCode,
    category_in_use,
    category_name_exists,
    category_not_found,
    default_category_locked,
)
from finplan.domain.money import Money, money_sum
from finplan.domain.results import Failure, Result, Success

logger = logging.getLogger(__name__)

COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")

SUBCATEGORY_SUGGESTION_THRESHOLD = 50
MERGE_CANDIDATE_MAX_TRANSACTIONS = 5


def generate_category_id(name: str) -> str:
    """Derive a slug ID such as 'coffee_shops' from a category name."""
    slug = re.sub(r"[^a-z0-9]", "_", name.lower())
    slug = re.sub(r"_+", "_", slug)
    return slug.strip("_") or "category"


def classify_usage(transaction_count: int) -> UsageFrequency:
    if transaction_count == 0:
        return UsageFrequency.NEVER
    if transaction_count < 4:
        return UsageFrequency.RARELY
    if transaction_count < 16:
        return UsageFrequency.OCCASIONALLY
    if transaction_count < 52:
        return UsageFrequency.REGULARLY
    return UsageFrequency.FREQUENTLY


class CategoryManager:
    """Service for managing custom categories on top of the default set."""

    def __init__(self, repository: CategoryRepository, history: TransactionHistoryProvider):
        """Initialize category manager.

        Args:
            repository: Category storage
            history: Transaction storage used for usage checks and reassignment
        """
        self.repository = repository
        self.history = history

    def list_categories(self) -> list[Category]:
        return self.repository.list_categories()

    def get_category(self, category_id: str) -> Optional[Category]:
        return self.repository.get_category(category_id)

    def get_category_tree(self) -> list[tuple[Category, list[Category]]]:
        """Top-level categories paired with their children, in listing order."""
        categories = self.list_categories()
        children = defaultdict(list)
        for category in categories:
            if category.parent_id is not None:
                children[category.parent_id].append(category)
        known = {c.id for c in categories}
        return [
            (category, children.get(category.id, []))
            for category in categories
            if category.parent_id is None or category.parent_id not in known
        ]

    def _name_taken(self, name: str, exclude_id: Optional[str] = None) -> bool:
        wanted = name.strip().casefold()
        return any(
            c.name.casefold() == wanted and c.id != exclude_id for c in self.list_categories()
        )

    def _validate_parent(self, parent_id: Optional[str], category_id: Optional[str] = None) -> Optional[Failure]:
        if parent_id is None:
            return None
        parent = self.repository.get_category(parent_id)
        if parent is None or parent.id == category_id:
            return Failure(ErrorCode.INVALID_PARENT, f"Parent category '{parent_id}' not found")
        if parent.parent_id is not None:
            return Failure(
                ErrorCode.INVALID_PARENT,
                f"Parent category '{parent_id}' is itself a subcategory",
            )
        return None

    def _validate_color(self, color: Optional[str]) -> Optional[Failure]:
        if color is not None and not COLOR_PATTERN.match(color):
            return Failure(ErrorCode.INVALID_COLOR, f"Color '{color}' must look like #RRGGBB")
        return None

    def _unique_id(self, name: str) -> str:
        base = generate_category_id(name)
        candidate = base
        suffix = 2
        while self.repository.get_category(candidate) is not None:
            candidate = f"{base}_{suffix}"
            suffix += 1
        return candidate

    def create_category(
        self,
        name: str,
        parent_id: Optional[str] = None,
        color: Optional[str] = None,
        icon: Optional[str] = None,
    ) -> Result[Category]:
        """Create a custom category.

        Args:
            name: Category name, unique ignoring case
            parent_id: Optional top-level parent category ID
            color: Optional color in #RRGGBB form
            icon: Optional icon name

        Returns:
            Success with the new category, or Failure with INVALID_NAME,
            NAME_EXISTS, INVALID_PARENT or INVALID_COLOR
        """
        if not name or not name.strip():
            return Failure(ErrorCode.INVALID_NAME, "Category name cannot be blank")
        name = name.strip()
        if self._name_taken(name):
            return Failure(ErrorCode.NAME_EXISTS, category_name_exists(name))
        failure = self._validate_parent(parent_id) or self._validate_color(color)
        if failure is not None:
            return failure

        category = Category(
            id=self._unique_id(name),
            name=name,
            parent_id=parent_id,
            color=color,
            icon=icon,
            is_custom=True,
        )
        self.repository.save_category(category)
        logger.info("Created category", extra={"category_id": category.id})
        return Success(category)

    def update_category(
        self,
        category_id: str,
        name: Optional[str] = None,
        parent_id: Optional[str] = None,
        color: Optional[str] = None,
        icon: Optional[str] = None,
        clear_parent: bool = False,
    ) -> Result[Category]:
        """Update fields of a custom category. Fields left as None are kept."""
        existing = self.repository.get_category(category_id)
        if existing is None:
            return Failure(ErrorCode.NOT_FOUND, category_not_found(category_id))
        if not existing.is_custom:
            return Failure(ErrorCode.CANNOT_MODIFY_DEFAULT, default_category_locked(category_id))

        if name is not None:
            if not name.strip():
                return Failure(ErrorCode.INVALID_NAME, "Category name cannot be blank")
            name = name.strip()
            if self._name_taken(name, exclude_id=category_id):
                return Failure(ErrorCode.NAME_EXISTS, category_name_exists(name))
        failure = self._validate_parent(parent_id, category_id) or self._validate_color(color)
        if failure is not None:
            return failure
        if parent_id is not None and any(
            c.parent_id == category_id for c in self.repository.list_custom_categories()
        ):
            return Failure(
                ErrorCode.INVALID_PARENT,
                f"Category '{category_id}' has subcategories and cannot be nested",
            )

        updated = Category(
            id=existing.id,
            name=name if name is not None else existing.name,
            parent_id=None if clear_parent else (parent_id or existing.parent_id),
            color=color if color is not None else existing.color,
            icon=icon if icon is not None else existing.icon,
            is_custom=True,
        )
        self.repository.save_category(updated)
        logger.info("Updated category", extra={"category_id": category_id})
        return Success(updated)

    def delete_category(
        self, category_id: str, reassign_to: Optional[str] = None
    ) -> Result[int]:
        """Delete a custom category.

        Args:
            category_id: Category to delete
            reassign_to: Category that receives the deleted category's transactions

        Returns:
            Success with the number of reassigned transactions, or Failure with
            NOT_FOUND, CANNOT_MODIFY_DEFAULT or CATEGORY_IN_USE
        """
        existing = self.repository.get_category(category_id)
        if existing is None:
            return Failure(ErrorCode.NOT_FOUND, category_not_found(category_id))
        if not existing.is_custom:
            return Failure(ErrorCode.CANNOT_MODIFY_DEFAULT, default_category_locked(category_id))

        usage = self.history.count_by_category(category_id)
        if reassign_to is not None:
            if reassign_to == category_id:
                return Failure(
                    ErrorCode.INVALID_INPUT, "Cannot reassign transactions to the deleted category"
                )
            if self.repository.get_category(reassign_to) is None:
                return Failure(ErrorCode.NOT_FOUND, category_not_found(reassign_to))
        elif usage > 0:
            return Failure(ErrorCode.CATEGORY_IN_USE, category_in_use(category_id, usage))

        moved = self.history.reassign_category(category_id, reassign_to) if usage else 0
        self._release_children(category_id)
        self.repository.delete_category(category_id)
        logger.info(
            "Deleted category",
            extra={"category_id": category_id, "reassigned": moved},
        )
        return Success(moved)

    def _release_children(self, category_id: str) -> None:
        for child in self.repository.list_custom_categories():
            if child.parent_id == category_id:
                self.repository.save_category(replace(child, parent_id=None))

    def merge_categories(self, source_id: str, target_id: str) -> Result[Category]:
        """Move all of source's transactions to target, then delete source."""
        source = self.repository.get_category(source_id)
        if source is None:
            return Failure(ErrorCode.NOT_FOUND, category_not_found(source_id))
        target = self.repository.get_category(target_id)
        if target is None:
            return Failure(ErrorCode.NOT_FOUND, category_not_found(target_id))
        if not source.is_custom:
            return Failure(ErrorCode.CANNOT_MODIFY_DEFAULT, default_category_locked(source_id))
        if source_id == target_id:
            return Failure(ErrorCode.INVALID_INPUT, "Cannot merge a category into itself")

        moved = self.history.reassign_category(source_id, target_id)
        self._release_children(source_id)
        self.repository.delete_category(source_id)
        logger.info(
            "Merged categories",
            extra={"source_id": source_id, "target_id": target_id, "reassigned": moved},
        )
        return Success(target)

    def get_usage_statistics(self) -> list[CategoryUsageStats]:
        """Usage per category, most used first."""
        stats = []
        for category in self.list_categories():
            transactions = self.history.get_transactions_by_category(category.id)
            count = len(transactions)
            total = money_sum(t.amount.absolute_value for t in transactions)
            stats.append(
                CategoryUsageStats(
                    category=category,
                    transaction_count=count,
                    total_amount=total,
                    average_amount=total.divide(count) if count else Money.zero(),
                    last_used=max((t.date for t in transactions), default=None),
                    frequency=classify_usage(count),
                )
            )
        stats.sort(key=lambda s: s.transaction_count, reverse=True)
        return stats

    def get_suggestions(self) -> list[CategoryImprovementSuggestion]:
        """Suggest deletions, new subcategories and merges from usage."""
        stats = self.get_usage_statistics()
        suggestions = []

        for stat in stats:
            category = stat.category
            if category.is_custom and stat.frequency == UsageFrequency.NEVER:
                suggestions.append(
                    CategoryImprovementSuggestion(
                        suggestion_type=CategorySuggestionType.DELETE_UNUSED,
                        category_ids=(category.id,),
                        message=f"'{category.name}' has never been used; consider deleting it",
                    )
                )
            if (
                stat.transaction_count > SUBCATEGORY_SUGGESTION_THRESHOLD
                and category.parent_id is None
            ):
                suggestions.append(
                    CategoryImprovementSuggestion(
                        suggestion_type=CategorySuggestionType.CREATE_SUBCATEGORY,
                        category_ids=(category.id,),
                        message=(
                            f"'{category.name}' has {stat.transaction_count} transactions; "
                            "subcategories would make it easier to track"
                        ),
                    )
                )

        sparse = [
            stat.category
            for stat in stats
            if stat.category.is_custom
            and 1 <= stat.transaction_count <= MERGE_CANDIDATE_MAX_TRANSACTIONS
        ]
        if len(sparse) >= 2:
            suggestions.append(
                CategoryImprovementSuggestion(
                    suggestion_type=CategorySuggestionType.MERGE_SIMILAR,
                    category_ids=tuple(c.id for c in sparse),
                    message=(
                        "These categories are rarely used and could be merged: "
                        + ", ".join(c.name for c in sparse)
                    ),
                )
            )
        return suggestions
