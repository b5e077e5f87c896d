"""Inbound-call facade over the finplan analyzers."""

import logging
import threading
from datetime import datetime, UTC
from typing import Callable, Optional

from finplan.database.base import (
    CategoryRepository,
    TrainingDataProvider,
    TransactionHistoryProvider,
    UserFeedbackRepository,
)
from finplan.domain.anomaly import AnomalyDetector
from finplan.domain.categorization import CategorizationEngine
from finplan.domain.category import CategoryManager
from finplan.domain.config import EngineConfig
from finplan.domain.debt import DebtPayoffOptimizer
from finplan.domain.entities import (
    CategorizationResult,
    DebtPayoffStrategy,
    EffectivenessSummary,
    Jurisdiction,
    Recommendation,
    RecommendationExplanation,
    RecommendationOutcome,
    RegisteredAccountAnalysis,
    SavingsOptimization,
    TaxBreakdown,
    TaxDeferredOptimization,
    TaxFreeOptimization,
    TaxRecommendation,
    Transaction,
    UnusualSpendingAlert,
    UserFeedback,
    UserFinancialProfile,
)
from finplan.domain.errors import DomainError
from finplan.domain.money import Money
from finplan.domain.recommendations import RecommendationEngine
from finplan.domain.registered_accounts import RegisteredAccountAnalyzer
from finplan.domain.results import Failure, Result, Success
from finplan.domain.spending import SpendingAnalyzer
from finplan.domain.tax import TaxCalculator

logger = logging.getLogger(__name__)


class FinancialEngine:
    """Wires the analyzers together and answers every inbound call with a result.

    Categorization and anomaly detection share one re-entrant lock so that
    retraining never overlaps a read of either model.
    """

    def __init__(
        self,
        history: TransactionHistoryProvider,
        categories: CategoryRepository,
        feedback: UserFeedbackRepository,
        training_data: TrainingDataProvider,
        config: Optional[EngineConfig] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ):
        """Initialize financial engine.

        Args:
            history: Transaction history
            categories: Category storage
            feedback: Categorization feedback storage
            training_data: Seed examples for the categorization model
            config: Analyzer configuration, defaults to EngineConfig.default()
            clock: Timestamp source shared by every analyzer
        """
        self.config = config or EngineConfig.default()
        self.history = history
        self._model_lock = threading.RLock()

        self.tax_calculator = TaxCalculator(self.config.tax)
        self.registered_analyzer = RegisteredAccountAnalyzer(
            self.config.registered_accounts, lambda: clock().date()
        )
        self.anomaly_detector = AnomalyDetector(self.config.anomaly, self._model_lock, clock)
        self.categorization = CategorizationEngine(
            training_data,
            feedback,
            history,
            anomaly_detector=self.anomaly_detector,
            settings=self.config.categorization,
            lock=self._model_lock,
            clock=clock,
        )
        self.category_manager = CategoryManager(categories, history)
        self.spending_analyzer = SpendingAnalyzer(categories)
        self.debt_optimizer = DebtPayoffOptimizer(self.config.debt)
        self.recommendations = RecommendationEngine(
            self.tax_calculator,
            self.registered_analyzer,
            self.debt_optimizer,
            self.config.recommendations,
            clock,
        )

    @staticmethod
    def _guard(operation: str, call: Callable[[], Result]) -> Result:
        try:
            return call()
        except DomainError as e:
            logger.warning("%s failed: %s", operation, e)
            return Failure.from_error(e)

    def categorize(self, transaction: Transaction) -> Result[CategorizationResult]:
        return self._guard(
            "categorize", lambda: Success(self.categorization.categorize(transaction))
        )

    def categorize_batch(self, transactions: list[Transaction]) -> Result[list[CategorizationResult]]:
        return self._guard(
            "categorize_batch",
            lambda: Success(self.categorization.categorize_batch(transactions)),
        )

    def provide_feedback(
        self, transaction_id: str, category_id: str, confidence: float = 1.0
    ) -> Result[UserFeedback]:
        return self._guard(
            "provide_feedback",
            lambda: self.categorization.provide_feedback(transaction_id, category_id, confidence),
        )

    def detect_unusual_spending(
        self, transactions: list[Transaction]
    ) -> Result[list[UnusualSpendingAlert]]:
        return self._guard(
            "detect_unusual_spending",
            lambda: Success(self.anomaly_detector.detect_unusual_spending(transactions)),
        )

    def retrain(self) -> Result[int]:
        """Rebuild the categorization and anomaly models; returns the example count."""
        return self._guard("retrain", lambda: Success(self.categorization.retrain()))

    def calculate_taxes(self, income: Money, jurisdiction: Jurisdiction) -> Result[TaxBreakdown]:
        return self._guard(
            "calculate_taxes",
            lambda: Success(self.tax_calculator.calculate_taxes(income, jurisdiction)),
        )

    def analyze_registered_accounts(self, income: Money) -> Result[RegisteredAccountAnalysis]:
        return self._guard(
            "analyze_registered_accounts",
            lambda: Success(self.registered_analyzer.analyze_registered_accounts(income)),
        )

    def optimize_debt_payoff(self, profile: UserFinancialProfile) -> Result[DebtPayoffStrategy]:
        return self._guard(
            "optimize_debt_payoff", lambda: self.debt_optimizer.optimize_debt_payoff(profile)
        )

    def generate_financial_planning_recommendations(
        self, user_id: str, profile: UserFinancialProfile
    ) -> Result[list[Recommendation]]:
        return self._guard(
            "generate_financial_planning_recommendations",
            lambda: self.recommendations.generate_financial_planning_recommendations(
                user_id, profile
            ),
        )

    def explain(self, recommendation_id: str) -> Result[RecommendationExplanation]:
        return self._guard("explain", lambda: self.recommendations.explain(recommendation_id))

    def mark_completed(self, recommendation_id: str) -> Result[Recommendation]:
        return self._guard(
            "mark_completed", lambda: self.recommendations.mark_completed(recommendation_id)
        )

    def track_recommendation_effectiveness(
        self, recommendation_id: str, outcome: RecommendationOutcome
    ) -> Result[EffectivenessSummary]:
        return self._guard(
            "track_recommendation_effectiveness",
            lambda: self.recommendations.track_recommendation_effectiveness(
                recommendation_id, outcome
            ),
        )

    def optimize_tax_deferred_contributions(
        self, profile: UserFinancialProfile
    ) -> Result[TaxDeferredOptimization]:
        return self._guard(
            "optimize_tax_deferred_contributions",
            lambda: self.recommendations.optimize_tax_deferred_contributions(profile),
        )

    def optimize_tax_free_contributions(
        self, profile: UserFinancialProfile
    ) -> Result[TaxFreeOptimization]:
        return self._guard(
            "optimize_tax_free_contributions",
            lambda: self.recommendations.optimize_tax_free_contributions(profile),
        )

    def optimize_savings_strategy(self, profile: UserFinancialProfile) -> Result[SavingsOptimization]:
        return self._guard(
            "optimize_savings_strategy",
            lambda: self.recommendations.optimize_savings_strategy(profile),
        )

    def generate_tax_recommendations(
        self, income: Money, tax_year: Optional[int] = None
    ) -> Result[list[TaxRecommendation]]:
        return self._guard(
            "generate_tax_recommendations",
            lambda: Success(self.registered_analyzer.generate_tax_recommendations(income, tax_year)),
        )
