"""Tests for the FinancialEngine facade."""

from concurrent.futures import ThreadPoolExecutor
from datetime import date

from conftest import FIXED_NOW, make_transaction
from finplan.domain.defaults import seed_training_examples
from finplan.domain.entities import (
    Account,
    AccountType,
    AlertType,
    Jurisdiction,
    RecommendationAction,
    RecommendationOutcome,
    UserFinancialProfile,
)
from finplan.domain.errors import ErrorCode
from finplan.domain.money import Currency, Money
from finplan.domain.results import Failure, Success


class TestResults:
    """Every engine call answers with Success or Failure."""

    def test_categorize(self, engine):
        """Test that categorize answers with a Success."""
        result = engine.categorize(make_transaction("t1", "-80.00", description="LOBLAWS"))

        assert isinstance(result, Success)
        assert result.value.category_id == "groceries"

    def test_categorize_batch(self, engine):
        """Test that batch categorization keeps input order."""
        result = engine.categorize_batch(
            [make_transaction("t1", "-80.00", description="LOBLAWS"), make_transaction("t2", "-9.00")]
        )

        assert [r.transaction_id for r in result.unwrap()] == ["t1", "t2"]

    def test_invalid_feedback(self, engine):
        """Test that invalid feedback answers with a Failure."""
        result = engine.provide_feedback("t1", "groceries", 2.0)

        assert isinstance(result, Failure)
        assert result.code == ErrorCode.INVALID_INPUT

    def test_calculate_taxes(self, engine):
        """Test that the tax breakdown adds back to gross income."""
        breakdown = engine.calculate_taxes(Money.of(80000), Jurisdiction.ON).unwrap()

        assert breakdown.after_tax_income + breakdown.total_tax == Money.of(80000)

    def test_analyze_registered_accounts(self, engine):
        """Test registered account room through the engine."""
        analysis = engine.analyze_registered_accounts(Money.of(80000)).unwrap()

        assert analysis.tax_deferred.contribution_room == Money.of(7200)
        assert analysis.tax_free.contribution_room == Money.of(3500)

    def test_domain_errors_become_failures(self, engine):
        """Test that a raised domain error is returned as a Failure."""
        profile = UserFinancialProfile(
            user_id="u1",
            age=40,
            jurisdiction=Jurisdiction.ON,
            gross_annual_income=Money.of(50000),
            accounts=(
                Account("card", "Card", AccountType.CREDIT_CARD, Money.of(-500, Currency.USD)),
            ),
        )

        result = engine.optimize_debt_payoff(profile)

        assert isinstance(result, Failure)
        assert result.code == ErrorCode.INVALID_INPUT
        assert "USD" in result.message

    def test_recommendation_round_trip(self, engine):
        """Test generating, explaining and completing a recommendation."""
        profile = UserFinancialProfile(
            user_id="u1", age=35, jurisdiction=Jurisdiction.BC, gross_annual_income=Money.of(90000)
        )

        recommendations = engine.generate_financial_planning_recommendations("u1", profile).unwrap()
        first = recommendations[0]

        assert engine.explain(first.id).unwrap().recommendation_id == first.id
        assert engine.mark_completed(first.id).unwrap().is_completed
        assert engine.explain("nope").code == ErrorCode.NOT_FOUND

    def test_track_recommendation_effectiveness(self, engine):
        """Test that outcomes are tracked through the engine."""
        profile = UserFinancialProfile(
            user_id="u1", age=35, jurisdiction=Jurisdiction.BC, gross_annual_income=Money.of(90000)
        )
        first = engine.generate_financial_planning_recommendations("u1", profile).unwrap()[0]

        summary = engine.track_recommendation_effectiveness(
            first.id,
            RecommendationOutcome(first.id, RecommendationAction.IMPLEMENTED, FIXED_NOW, Money.of(800)),
        ).unwrap()
        missing = engine.track_recommendation_effectiveness(
            "nope", RecommendationOutcome("nope", RecommendationAction.REJECTED, FIXED_NOW)
        )

        assert summary.is_completed
        assert summary.total_actual_impact == Money.of(800)
        assert missing.code == ErrorCode.NOT_FOUND

    def test_savings_optimizers(self, engine):
        """Test that each optimizer answers with a Success for a plain profile."""
        profile = UserFinancialProfile(
            user_id="u1", age=35, jurisdiction=Jurisdiction.ON, gross_annual_income=Money.of(90000)
        )

        deferred = engine.optimize_tax_deferred_contributions(profile).unwrap()
        tax_free = engine.optimize_tax_free_contributions(profile).unwrap()
        strategy = engine.optimize_savings_strategy(profile).unwrap()

        # room 90,000 x 18% x 50%, well under a year of cash flow
        assert deferred.recommended_contribution == Money.of(8100)
        assert tax_free.recommended_contribution == Money.of(3500)
        assert strategy.recommended_savings_rate > 0

    def test_tax_recommendations_follow_engine_clock(self, engine):
        """Test that suggestion ids and deadlines come from the engine clock year."""
        suggestions = engine.generate_tax_recommendations(Money.of(80000)).unwrap()

        deferred = suggestions[0]
        assert deferred.id == "tax_deferred_2024"
        assert deferred.deadline == date(2025, 3, 1)
        assert suggestions[1].deadline == date(2024, 12, 31)


class TestModels:
    """Tests for retraining and the shared model lock."""

    def test_models_share_one_lock(self, engine):
        """Test that both models are guarded by the same lock."""
        assert engine.categorization._lock is engine.anomaly_detector._lock

    def test_retrain_rebuilds_anomaly_history(self, engine, memory_store):
        """Test that retraining rebuilds merchant history for anomaly detection."""
        memory_store.add_transaction(make_transaction("h1", "-30.00", day=date(2024, 1, 3), merchant="Cafe Uno"))
        memory_store.add_transaction(make_transaction("h2", "-32.00", day=date(2024, 2, 3), merchant="Cafe Uno"))
        single = [make_transaction("n1", "-31.00", merchant="Cafe Uno")]

        before = engine.detect_unusual_spending(single).unwrap()
        count = engine.retrain().unwrap()
        after = engine.detect_unusual_spending(single).unwrap()

        assert count == len(seed_training_examples())
        assert [a.alert_type for a in before] == [AlertType.NEW_MERCHANT]
        assert after == []

    def test_concurrent_categorize_and_retrain(self, engine):
        """Test that categorizing while retraining stays consistent."""
        transaction = make_transaction("t1", "-55.00", description="ESSO STATION", merchant="Esso")

        def categorize(_):
            return engine.categorize(transaction).unwrap().category_id

        with ThreadPoolExecutor(max_workers=4) as pool:
            retrains = [pool.submit(engine.retrain) for _ in range(5)]
            categories = list(pool.map(categorize, range(40)))

        assert set(categories) == {"gas"}
        assert all(f.result().is_success for f in retrains)
