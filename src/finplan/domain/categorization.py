"""Transaction categorization by weighted category prototypes.

Each category keeps running feature statistics built from labelled examples.
A transaction is scored against every prototype; the score blends keyword
evidence, merchant evidence, amount closeness on a log scale, debit and
recurring agreement, and day-of-month proximity.
"""

import logging
import math
import re
import threading
from dataclasses import dataclass
from datetime import datetime, UTC
from typing import Callable, Optional

from finplan.database.base import (
    TrainingDataProvider,
    TransactionHistoryProvider,
    UserFeedbackRepository,
)
from finplan.domain.config import CategorizationSettings
from finplan.domain.entities import (
    CategorizationResult,
    CategorizationStats,
    CategoryPrediction,
    TrainingExample,
    Transaction,
    UserFeedback,
)
from finplan.domain.errors import ErrorCode, transaction_not_found
from finplan.domain.results import Failure, Result, Success

logger = logging.getLogger(__name__)

TOKEN_SPLIT = re.compile(r"[^a-z0-9]+")

# Evidence weight at which a keyword counts for half its full strength
EVIDENCE_HALF_WEIGHT = 0.5
MIN_AMOUNT_SCALE = 0.25


def tokenize(text: Optional[str]) -> tuple[str, ...]:
    """Lowercase words of two or more characters, dropping bare numbers."""
    if not text:
        return ()
    words = []
    for word in TOKEN_SPLIT.split(text.lower()):
        if len(word) < 2 or word.isdigit():
            continue
        if word not in words:
            words.append(word)
    return tuple(words)


def evidence(weight: float) -> float:
    return weight / (weight + EVIDENCE_HALF_WEIGHT) if weight > 0 else 0.0


@dataclass(frozen=True)
class TransactionFeatures:
    """Features extracted from one transaction."""

    amount: float
    amount_abs: float
    is_debit: bool
    description_length: int
    merchant_name: Optional[str]
    day_of_week: int
    day_of_month: int
    month: int
    is_recurring: bool
    description_words: tuple[str, ...]
    merchant_words: tuple[str, ...]
    has_regional_keywords: bool
    has_location_info: bool

    @property
    def tokens(self) -> tuple[str, ...]:
        merged = list(self.description_words)
        merged.extend(w for w in self.merchant_words if w not in merged)
        return tuple(merged)

    @property
    def has_text(self) -> bool:
        return bool(self.tokens) or self.merchant_name is not None


def extract_features(
    transaction: Transaction, regional_keywords: tuple[str, ...] = ()
) -> TransactionFeatures:
    """Extract scoring features from a transaction."""
    description = (transaction.description or "").strip()
    merchant = (transaction.merchant_name or "").strip()
    haystack = f"{description} {merchant}".lower()
    amount = float(transaction.amount.amount)

    return TransactionFeatures(
        amount=amount,
        amount_abs=abs(amount),
        is_debit=transaction.is_debit,
        description_length=len(description),
        merchant_name=merchant.lower() or None,
        day_of_week=transaction.date.weekday(),
        day_of_month=transaction.date.day,
        month=transaction.date.month,
        is_recurring=transaction.is_recurring,
        description_words=tokenize(description),
        merchant_words=tokenize(merchant),
        has_regional_keywords=any(keyword in haystack for keyword in regional_keywords),
        has_location_info=bool(transaction.location and transaction.location.strip()),
    )


class CategoryPrototype:
    """Accumulated feature statistics for one category."""

    def __init__(self):
        self.weight = 0.0
        self.token_weights: dict[str, float] = {}
        self.merchant_weights: dict[str, float] = {}
        self.log_amount_sum = 0.0
        self.log_amount_sq_sum = 0.0
        self.debit_weight = 0.0
        self.recurring_weight = 0.0
        self.day_sum = 0.0

    def add(self, features: TransactionFeatures, weight: float) -> None:
        if weight <= 0:
            return
        self.weight += weight
        for token in features.tokens:
            self.token_weights[token] = self.token_weights.get(token, 0.0) + weight
        if features.merchant_name:
            name = features.merchant_name
            self.merchant_weights[name] = self.merchant_weights.get(name, 0.0) + weight
        log_amount = math.log1p(features.amount_abs)
        self.log_amount_sum += weight * log_amount
        self.log_amount_sq_sum += weight * log_amount * log_amount
        if features.is_debit:
            self.debit_weight += weight
        if features.is_recurring:
            self.recurring_weight += weight
        self.day_sum += weight * features.day_of_month

    def text_score(self, features: TransactionFeatures) -> tuple[float, list[str]]:
        tokens = features.tokens
        if not tokens:
            return 0.0, []
        matched = [t for t in tokens if t in self.token_weights]
        total = sum(evidence(self.token_weights[t]) for t in matched)
        return total / len(tokens), matched

    def merchant_score(self, features: TransactionFeatures) -> float:
        if not features.merchant_name:
            return 0.0
        return evidence(self.merchant_weights.get(features.merchant_name, 0.0))

    def amount_score(self, features: TransactionFeatures) -> float:
        if self.weight <= 0:
            return 0.0
        mean = self.log_amount_sum / self.weight
        variance = max(self.log_amount_sq_sum / self.weight - mean * mean, 0.0)
        scale = max(math.sqrt(variance), MIN_AMOUNT_SCALE)
        distance = abs(math.log1p(features.amount_abs) - mean)
        return 1.0 / (1.0 + distance / scale)

    def flag_score(self, features: TransactionFeatures) -> float:
        if self.weight <= 0:
            return 0.0
        debit_share = self.debit_weight / self.weight
        recurring_share = self.recurring_weight / self.weight
        debit = debit_share if features.is_debit else 1.0 - debit_share
        recurring = recurring_share if features.is_recurring else 1.0 - recurring_share
        return (debit + recurring) / 2

    def day_score(self, features: TransactionFeatures) -> float:
        if self.weight <= 0:
            return 0.0
        mean_day = self.day_sum / self.weight
        return max(0.0, 1.0 - abs(features.day_of_month - mean_day) / 31)


class CategorizationModel:
    """Prototype table keyed by category ID."""

    def __init__(self, settings: CategorizationSettings, built_at: datetime):
        self.settings = settings
        self.built_at = built_at
        self.prototypes: dict[str, CategoryPrototype] = {}
        self.example_count = 0

    @classmethod
    def build(
        cls,
        examples: list[TrainingExample],
        settings: CategorizationSettings,
        built_at: datetime,
    ) -> "CategorizationModel":
        model = cls(settings, built_at)
        for example in examples:
            model.learn(example.transaction, example.category_id, example.weight)
        return model

    def learn(self, transaction: Transaction, category_id: str, weight: float) -> None:
        features = extract_features(transaction, self.settings.regional_keywords)
        prototype = self.prototypes.setdefault(category_id, CategoryPrototype())
        prototype.add(features, weight)
        self.example_count += 1

    def score(self, features: TransactionFeatures) -> list[CategoryPrediction]:
        """Score every prototype, best first. Ties break on category ID."""
        s = self.settings
        predictions = []
        for category_id in sorted(self.prototypes):
            prototype = self.prototypes[category_id]
            text, matched = prototype.text_score(features)
            merchant = prototype.merchant_score(features)
            raw = (
                s.text_weight * text
                + s.merchant_weight * merchant
                + s.amount_weight * prototype.amount_score(features)
                + s.flag_weight * prototype.flag_score(features)
                + s.day_weight * prototype.day_score(features)
            )
            if not features.has_text:
                raw *= s.degraded_confidence_factor
            confidence = min(max(raw, 0.0), 1.0)
            predictions.append(
                CategoryPrediction(
                    category_id=category_id,
                    confidence=confidence,
                    reasoning=_describe_match(matched, merchant > 0, features),
                )
            )
        predictions.sort(key=lambda p: (-p.confidence, p.category_id))
        return predictions


def _describe_match(matched: list[str], merchant_known: bool, features: TransactionFeatures) -> str:
    if not features.has_text:
        return "No description or merchant; scored on amount and date only"
    parts = []
    if matched:
        parts.append(f"keywords {', '.join(matched)}")
    if merchant_known:
        parts.append("known merchant")
    if not parts:
        return "No keyword overlap; scored on amount and timing"
    return "Matched " + " and ".join(parts)


class CategorizationEngine:
    """Categorizes transactions and learns from user corrections.

    The prototype table and the anomaly model share one lock: categorization
    reads under it, feedback and retraining write under it.
    """

    def __init__(
        self,
        training_data: TrainingDataProvider,
        feedback_repository: UserFeedbackRepository,
        history: TransactionHistoryProvider,
        anomaly_detector=None,
        settings: Optional[CategorizationSettings] = None,
        lock: Optional[threading.RLock] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ):
        """Initialize categorization engine.

        Args:
            training_data: Source of seed examples
            feedback_repository: Store for user corrections
            history: Transaction history used for feedback lookups and retraining
            anomaly_detector: Detector whose model is rebuilt on retrain
            settings: Scoring weights
            lock: Lock shared with the anomaly detector
            clock: Timestamp source
        """
        self.training_data = training_data
        self.feedback_repository = feedback_repository
        self.history = history
        self.anomaly_detector = anomaly_detector
        self.settings = settings or CategorizationSettings()
        self.clock = clock
        self._lock = lock or threading.RLock()
        self._model: Optional[CategorizationModel] = None
        self._total_categorized = 0
        self._confidence_sum = 0.0

    def _training_examples(self) -> list[TrainingExample]:
        examples = list(self.training_data.get_training_examples())
        for feedback in self.feedback_repository.list_feedback():
            transaction = self.history.get_transaction(feedback.transaction_id)
            if transaction is None:
                continue
            examples.append(
                TrainingExample(
                    transaction=transaction,
                    category_id=feedback.category_id,
                    weight=feedback.confidence,
                )
            )
        return examples

    def _get_model(self) -> CategorizationModel:
        # Caller holds the lock
        if self._model is None:
            self._model = CategorizationModel.build(
                self._training_examples(), self.settings, self.clock()
            )
            logger.info(
                "Built categorization model",
                extra={
                    "examples": self._model.example_count,
                    "categories": len(self._model.prototypes),
                },
            )
        return self._model

    def categorize(self, transaction: Transaction) -> CategorizationResult:
        """Predict the category of a transaction.

        Never raises for sparse transactions; missing text lowers confidence.

        Args:
            transaction: Transaction to categorize

        Returns:
            CategorizationResult with up to three alternatives
        """
        features = extract_features(transaction, self.settings.regional_keywords)
        with self._lock:
            predictions = self._get_model().score(features)
            if predictions:
                best = predictions[0]
            else:
                best = CategoryPrediction(
                    category_id=self.settings.fallback_category_id,
                    confidence=0.0,
                    reasoning="No trained categories",
                )
            self._total_categorized += 1
            self._confidence_sum += best.confidence

        alternatives = tuple(
            p for p in predictions[1:] if p.category_id != best.category_id
        )[: self.settings.max_alternatives]
        logger.debug(
            "Categorized transaction",
            extra={
                "transaction_id": transaction.id,
                "category_id": best.category_id,
                "confidence": round(best.confidence, 4),
            },
        )
        return CategorizationResult(
            transaction_id=transaction.id,
            category_id=best.category_id,
            confidence=best.confidence,
            alternatives=alternatives,
            reasoning=best.reasoning,
        )

    def categorize_batch(self, transactions: list[Transaction]) -> list[CategorizationResult]:
        return [self.categorize(t) for t in transactions]

    def provide_feedback(
        self, transaction_id: str, category_id: str, confidence: float = 1.0
    ) -> Result[UserFeedback]:
        """Record a correction and fold it into the prototype table.

        Args:
            transaction_id: Transaction the user corrected
            category_id: Category the user chose
            confidence: How sure the user is, between 0 and 1

        Returns:
            Success with the stored feedback, or Failure for invalid input
        """
        if not 0.0 <= confidence <= 1.0:
            return Failure(ErrorCode.INVALID_INPUT, "Confidence must be between 0 and 1")
        if not category_id or not category_id.strip():
            return Failure(ErrorCode.INVALID_INPUT, "Category is required")

        feedback = UserFeedback(
            transaction_id=transaction_id,
            category_id=category_id,
            confidence=confidence,
            recorded_at=self.clock(),
        )
        transaction = self.history.get_transaction(transaction_id)

        with self._lock:
            model = self._get_model()
            self.feedback_repository.save_feedback(feedback)
            if transaction is not None:
                model.learn(transaction, category_id, confidence)
                model.built_at = feedback.recorded_at

        if transaction is None:
            logger.warning(
                "%s; feedback stored without model update", transaction_not_found(transaction_id)
            )
        else:
            logger.info(
                "Recorded categorization feedback",
                extra={"transaction_id": transaction_id, "category_id": category_id},
            )
        return Success(feedback)

    def retrain(self) -> int:
        """Rebuild the categorization and anomaly models from scratch.

        Returns:
            Number of examples in the rebuilt categorization model
        """
        with self._lock:
            self._model = CategorizationModel.build(
                self._training_examples(), self.settings, self.clock()
            )
            if self.anomaly_detector is not None:
                self.anomaly_detector.rebuild_model(self.history.list_transactions())
            count = self._model.example_count

        logger.info("Retrained categorization model", extra={"examples": count})
        return count

    def get_statistics(self) -> CategorizationStats:
        feedback = self.feedback_repository.list_feedback()
        with self._lock:
            total = self._total_categorized
            average = self._confidence_sum / total if total else 0.0
            last_update = self._model.built_at if self._model is not None else None

        accuracy = 0.0
        if feedback:
            accuracy = sum(f.confidence for f in feedback) / len(feedback)
        return CategorizationStats(
            total_categorized=total,
            average_confidence=average,
            feedback_count=len(feedback),
            accuracy_rate=min(max(accuracy, 0.0), 1.0),
            last_model_update=last_update,
        )
