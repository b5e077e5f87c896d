"""Financial planning recommendations.

The engine combines the tax, debt, cash-flow and goal analyzers into one
ranked list. Each recommendation keeps its own reasoning so it can be
explained later without re-running the analysis.
"""

import logging
import threading
from dataclasses import replace
from datetime import datetime, UTC
from decimal import Decimal
from typing import Callable, Optional

from finplan.domain import cashflow
from finplan.domain.config import RecommendationSettings
from finplan.domain.debt import DebtPayoffOptimizer
from finplan.domain.entities import (
    AccountType,
    ActionStep,
    AllocationRecommendation,
    AssetClass,
    BudgetSnapshot,
    CalculationStep,
    ContributionFrequency,
    ContributionTiming,
    Difficulty,
    EffectivenessSummary,
    ExpectedImpact,
    GoalImpact,
    GoalImpactType,
    ImpactType,
    Priority,
    Recommendation,
    RecommendationAction,
    RecommendationExplanation,
    RecommendationOutcome,
    RecommendationReasoning,
    RecommendationTimeframe,
    RecommendationType,
    RiskLevel,
    RiskTolerance,
    SavingsAccountType,
    SavingsAllocation,
    SavingsOptimization,
    TaxDeferredOptimization,
    TaxFreeOptimization,
    TrendDirection,
    UserFinancialProfile,
)
from finplan.domain.errors import ErrorCode, recommendation_not_found
from finplan.domain.money import Money, money_sum
from finplan.domain.registered_accounts import RegisteredAccountAnalyzer
from finplan.domain.results import Failure, Result, Success
from finplan.domain.tax import TaxCalculator

logger = logging.getLogger(__name__)


def _percent(value: Decimal) -> str:
    return f"{value * 100:.1f}%"


def _whole_percent(share: Decimal) -> int:
    return int(share * 100)


def _goal_impacts(
    profile: UserFinancialProfile, impact_type: GoalImpactType, days: int, amount: Money
) -> tuple[GoalImpact, ...]:
    return tuple(GoalImpact(goal.id, impact_type, days, amount) for goal in profile.goals)


TAX_FREE_ALLOCATIONS: dict[RiskTolerance, tuple[AllocationRecommendation, ...]] = {
    RiskTolerance.CONSERVATIVE: (
        AllocationRecommendation(AssetClass.BONDS, 60, "Stable income", RiskLevel.LOW),
        AllocationRecommendation(AssetClass.CANADIAN_EQUITY, 40, "Growth potential", RiskLevel.MEDIUM),
    ),
    RiskTolerance.MODERATE: (
        AllocationRecommendation(AssetClass.CANADIAN_EQUITY, 50, "Balanced growth", RiskLevel.MEDIUM),
        AllocationRecommendation(AssetClass.BONDS, 30, "Stability", RiskLevel.LOW),
        AllocationRecommendation(AssetClass.US_EQUITY, 20, "Diversification", RiskLevel.MEDIUM),
    ),
    RiskTolerance.AGGRESSIVE: (
        AllocationRecommendation(AssetClass.CANADIAN_EQUITY, 40, "Growth", RiskLevel.HIGH),
        AllocationRecommendation(AssetClass.US_EQUITY, 30, "Growth", RiskLevel.HIGH),
        AllocationRecommendation(AssetClass.INTERNATIONAL_EQUITY, 20, "Diversification", RiskLevel.HIGH),
        AllocationRecommendation(AssetClass.BONDS, 10, "Stability", RiskLevel.LOW),
    ),
}


class RecommendationEngine:
    """Builds, ranks and remembers recommendations for a user profile."""

    def __init__(
        self,
        tax_calculator: Optional[TaxCalculator] = None,
        registered_analyzer: Optional[RegisteredAccountAnalyzer] = None,
        debt_optimizer: Optional[DebtPayoffOptimizer] = None,
        settings: Optional[RecommendationSettings] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ):
        """Initialize recommendation engine.

        Args:
            tax_calculator: Used for marginal rates when the profile has none
            registered_analyzer: Used for contribution room when the profile has none
            debt_optimizer: Builds the payoff strategy behind debt recommendations
            settings: Thresholds and savings-rate rules
            clock: Timestamp source
        """
        self.tax_calculator = tax_calculator or TaxCalculator()
        self.registered_analyzer = registered_analyzer or RegisteredAccountAnalyzer()
        self.debt_optimizer = debt_optimizer or DebtPayoffOptimizer()
        self.settings = settings or RecommendationSettings()
        self.clock = clock
        self._registry: dict[str, Recommendation] = {}
        self._outcomes: dict[str, list[RecommendationOutcome]] = {}
        self._lock = threading.Lock()

    def generate_financial_planning_recommendations(
        self, user_id: str, profile: UserFinancialProfile
    ) -> Result[list[Recommendation]]:
        """Generate every applicable recommendation for a profile.

        Args:
            user_id: User the recommendations belong to
            profile: Financial snapshot to analyze

        Returns:
            Success with recommendations sorted by priority, then expected
            impact, both descending; Failure when user_id is blank
        """
        if not user_id or not user_id.strip():
            return Failure(ErrorCode.INVALID_INPUT, "User ID is required")

        created_at = self.clock()
        recommendations = []
        recommendations.extend(self.tax_recommendations(user_id, profile, created_at))
        recommendations.extend(self.debt_recommendations(user_id, profile, created_at))
        recommendations.extend(self.savings_recommendations(user_id, profile, created_at))
        recommendations.extend(self.emergency_fund_recommendations(user_id, profile, created_at))
        recommendations.extend(self.goal_recommendations(user_id, profile, created_at))
        recommendations.extend(self.spending_recommendations(user_id, profile, created_at))

        recommendations.sort(
            key=lambda r: (-r.priority, -r.expected_impact.amount.cents, r.id)
        )
        prefix = f"{user_id}:"
        with self._lock:
            for stale_id in [key for key in self._registry if key.startswith(prefix)]:
                del self._registry[stale_id]
            for recommendation in recommendations:
                self._registry[recommendation.id] = recommendation

        logger.info(
            "Generated recommendations",
            extra={"user_id": user_id, "count": len(recommendations)},
        )
        return Success(recommendations)

    def explain(self, recommendation_id: str) -> Result[RecommendationExplanation]:
        """Explain a previously generated recommendation."""
        with self._lock:
            recommendation = self._registry.get(recommendation_id)
        if recommendation is None:
            return Failure(ErrorCode.NOT_FOUND, recommendation_not_found(recommendation_id))
        return Success(
            RecommendationExplanation(
                recommendation_id=recommendation.id,
                summary=f"{recommendation.title}: {recommendation.description}",
                reasoning=recommendation.reasoning,
                action_steps=recommendation.action_steps,
                risks=recommendation.risks,
                alternatives=recommendation.alternatives,
            )
        )

    def mark_completed(self, recommendation_id: str) -> Result[Recommendation]:
        with self._lock:
            recommendation = self._registry.get(recommendation_id)
            if recommendation is None:
                return Failure(ErrorCode.NOT_FOUND, recommendation_not_found(recommendation_id))
            completed = replace(recommendation, is_completed=True)
            self._registry[recommendation_id] = completed
        return Success(completed)

    def track_recommendation_effectiveness(
        self, recommendation_id: str, outcome: RecommendationOutcome
    ) -> Result[EffectivenessSummary]:
        """Record what the user did with a recommendation.

        An IMPLEMENTED outcome also marks the recommendation completed.
        Outcomes outlive the recommendation itself, so a re-run that drops
        the recommendation keeps its history.

        Args:
            recommendation_id: Previously generated recommendation
            outcome: Action taken, with the measured impact when known

        Returns:
            Success with every outcome recorded so far; Failure when the id is
            unknown or the outcome is inconsistent
        """
        if outcome.recommendation_id != recommendation_id:
            return Failure(
                ErrorCode.INVALID_INPUT,
                f"Outcome is for {outcome.recommendation_id}, not {recommendation_id}",
            )
        if outcome.days_to_complete is not None and outcome.days_to_complete < 0:
            return Failure(ErrorCode.INVALID_INPUT, "Days to complete cannot be negative")

        with self._lock:
            recommendation = self._registry.get(recommendation_id)
            if recommendation is None:
                return Failure(ErrorCode.NOT_FOUND, recommendation_not_found(recommendation_id))
            if outcome.action == RecommendationAction.IMPLEMENTED and not recommendation.is_completed:
                recommendation = replace(recommendation, is_completed=True)
                self._registry[recommendation_id] = recommendation
            recorded = self._outcomes.setdefault(recommendation_id, [])
            recorded.append(outcome)
            outcomes = tuple(recorded)

        currency = recommendation.expected_impact.amount.currency
        total_impact = money_sum(
            (o.actual_impact for o in outcomes if o.actual_impact is not None), currency
        )
        logger.info(
            "Recorded recommendation outcome",
            extra={
                "recommendation_id": recommendation_id,
                "action": outcome.action.value,
                "outcome_count": len(outcomes),
            },
        )
        return Success(
            EffectivenessSummary(
                recommendation_id=recommendation_id,
                outcomes=outcomes,
                is_completed=recommendation.is_completed,
                total_actual_impact=total_impact,
            )
        )

    def optimize_tax_deferred_contributions(
        self, profile: UserFinancialProfile
    ) -> Result[TaxDeferredOptimization]:
        """Size a tax-deferred contribution the user's cash flow can carry.

        The affordable amount is a fixed share of a year of monthly cash flow;
        the recommendation is the lesser of that and the unused room.
        """
        currency = profile.gross_annual_income.currency
        room = self._tax_deferred_room(profile)
        marginal_rate = self._marginal_rate(profile)
        affordable = cashflow.monthly_cash_flow(profile).scale(
            self.settings.tax_deferred_cash_flow_share * 12
        )
        recommended = max(min(room, affordable), Money.zero(currency))
        tax_savings = recommended.scale(marginal_rate / 100)

        if recommended.is_positive:
            reasoning = (
                f"Based on your {marginal_rate:.2f}% marginal tax rate, contributing "
                f"{recommended} to your tax-deferred account will save you {tax_savings} "
                "in taxes this year."
            )
        else:
            reasoning = (
                "Your monthly expenses leave no room for a tax-deferred contribution "
                "this year."
            )
        return Success(
            TaxDeferredOptimization(
                recommended_contribution=recommended,
                tax_savings=tax_savings,
                marginal_rate=marginal_rate,
                timing=ContributionTiming(
                    frequency=ContributionFrequency.MONTHLY,
                    optimal_months=(1, 2),
                    reasoning="Monthly contributions provide dollar-cost averaging benefits",
                ),
                goal_impacts=_goal_impacts(
                    profile, GoalImpactType.NEUTRAL, 0, Money.zero(currency)
                ),
                reasoning=reasoning,
                alternatives=(
                    "Contribute to a tax-free account instead for tax-free growth",
                    "Split contributions between tax-deferred and tax-free accounts",
                    "Delay contributions until a higher income year",
                ),
            )
        )

    def optimize_tax_free_contributions(
        self, profile: UserFinancialProfile
    ) -> Result[TaxFreeOptimization]:
        """Size a tax-free contribution and pick an asset mix for the risk tolerance."""
        settings = self.settings
        currency = profile.gross_annual_income.currency
        room = self._tax_free_room(profile)
        affordable = cashflow.monthly_cash_flow(profile).scale(
            settings.tax_free_cash_flow_share * 12
        )
        recommended = max(min(room, affordable), Money.zero(currency))

        if recommended.is_positive:
            goal_impacts = _goal_impacts(
                profile,
                GoalImpactType.ACCELERATES,
                -settings.tax_free_goal_days,
                recommended.scale(settings.tax_free_goal_acceleration),
            )
            reasoning = (
                f"Contributing {recommended} to your tax-free account lets it grow "
                f"without tax, invested for a {profile.risk_tolerance.value} risk tolerance."
            )
        else:
            goal_impacts = _goal_impacts(profile, GoalImpactType.NEUTRAL, 0, Money.zero(currency))
            reasoning = (
                "Your monthly expenses leave no room for a tax-free contribution this year."
            )
        return Success(
            TaxFreeOptimization(
                recommended_contribution=recommended,
                allocations=TAX_FREE_ALLOCATIONS[profile.risk_tolerance],
                goal_impacts=goal_impacts,
                reasoning=reasoning,
                alternatives=(
                    "Contribute to a tax-deferred account for an immediate deduction",
                    "Build an emergency fund first",
                    "Pay down high-interest debt",
                ),
            )
        )

    def optimize_savings_strategy(self, profile: UserFinancialProfile) -> Result[SavingsOptimization]:
        """Split new savings between the emergency fund and registered accounts.

        Emergency fund: 40% of the shortfall, only while below target.
        Registered accounts: 30% of each account's unused room, when there is any.
        """
        settings = self.settings
        currency = profile.gross_annual_income.currency
        current_rate = cashflow.savings_rate(profile)
        recommended_rate = self.optimal_savings_rate(profile)
        target = cashflow.monthly_expenses(profile).scale(settings.emergency_fund_months)
        emergency_fund = cashflow.emergency_fund_balance(profile)

        allocations = []
        if emergency_fund < target:
            allocations.append(
                SavingsAllocation(
                    account_type=SavingsAccountType.EMERGENCY_FUND,
                    percentage=_whole_percent(settings.emergency_allocation_share),
                    amount=(target - emergency_fund).scale(settings.emergency_allocation_share),
                    reasoning=(
                        f"Build emergency fund to {settings.emergency_fund_months} months of expenses"
                    ),
                    expected_return=settings.emergency_fund_return,
                )
            )
        share = settings.registered_allocation_share
        deferred_room = self._tax_deferred_room(profile)
        if deferred_room.is_positive:
            allocations.append(
                SavingsAllocation(
                    account_type=SavingsAccountType.TAX_DEFERRED,
                    percentage=_whole_percent(share),
                    amount=deferred_room.scale(share),
                    reasoning="Deduct contributions at your marginal tax rate",
                    expected_return=settings.tax_deferred_return,
                )
            )
        tax_free_room = self._tax_free_room(profile)
        if tax_free_room.is_positive:
            allocations.append(
                SavingsAllocation(
                    account_type=SavingsAccountType.TAX_FREE,
                    percentage=_whole_percent(share),
                    amount=tax_free_room.scale(share),
                    reasoning="Grow savings without tax on the returns",
                    expected_return=settings.tax_free_return,
                )
            )

        additional = cashflow.monthly_income(profile).scale(recommended_rate - current_rate)
        if additional.is_positive:
            goal_impacts = _goal_impacts(
                profile, GoalImpactType.ACCELERATES, -settings.savings_goal_days, additional * 12
            )
            reasoning = (
                f"Increasing your savings rate to {_percent(recommended_rate)} will help you "
                f"build a {target} emergency fund and use your registered account room."
            )
        else:
            goal_impacts = _goal_impacts(profile, GoalImpactType.NEUTRAL, 0, Money.zero(currency))
            reasoning = (
                f"Your savings rate of {_percent(current_rate)} already meets the "
                f"{_percent(recommended_rate)} target."
            )
        return Success(
            SavingsOptimization(
                current_savings_rate=current_rate,
                recommended_savings_rate=recommended_rate,
                emergency_fund_target=target,
                current_emergency_fund=emergency_fund,
                allocations=tuple(allocations),
                goal_impacts=goal_impacts,
                reasoning=reasoning,
            )
        )

    def _marginal_rate(self, profile: UserFinancialProfile) -> Decimal:
        if profile.marginal_tax_rate is not None:
            return profile.marginal_tax_rate
        return self.tax_calculator.marginal_rate(profile.gross_annual_income, profile.jurisdiction)

    def _tax_deferred_room(self, profile: UserFinancialProfile) -> Money:
        if profile.tax_deferred_room is not None:
            return profile.tax_deferred_room
        income = profile.gross_annual_income
        return self.registered_analyzer.analyze_tax_deferred(income).contribution_room

    def _tax_free_room(self, profile: UserFinancialProfile) -> Money:
        if profile.tax_free_room is not None:
            return profile.tax_free_room
        income = profile.gross_annual_income
        return self.registered_analyzer.analyze_tax_free(income).contribution_room

    def tax_recommendations(
        self, user_id: str, profile: UserFinancialProfile, created_at: datetime
    ) -> list[Recommendation]:
        """Contribution suggestions when unused room exceeds the materiality thresholds."""
        currency = profile.gross_annual_income.currency
        limits = self.registered_analyzer.limits
        marginal_rate = self._marginal_rate(profile)
        recommendations = []

        deferred_room = self._tax_deferred_room(profile)
        if deferred_room > Money.of(limits.deferred_room_threshold, currency):
            savings = deferred_room.scale(marginal_rate / 100)
            recommendations.append(
                Recommendation(
                    id=f"{user_id}:tax_deferred",
                    user_id=user_id,
                    recommendation_type=RecommendationType.TAX_OPTIMIZATION,
                    priority=Priority.HIGH,
                    title="Contribute to your tax-deferred account",
                    description=(
                        f"You have {deferred_room} of unused tax-deferred room. Contributions "
                        f"are deducted at your {marginal_rate:.2f}% marginal rate."
                    ),
                    reasoning=RecommendationReasoning(
                        factors=(
                            f"Unused tax-deferred room: {deferred_room}",
                            f"Marginal tax rate: {marginal_rate:.2f}%",
                        ),
                        assumptions=(
                            "Contribution room is estimated from income when no records exist",
                            "Your marginal rate stays the same this year",
                        ),
                        confidence=0.9,
                        methodology="Tax saved equals the deduction times the marginal rate",
                        calculations=(
                            CalculationStep(
                                description="Tax saved by contributing the full room",
                                formula="room x marginal rate",
                                result=str(savings),
                            ),
                        ),
                    ),
                    expected_impact=ExpectedImpact(
                        amount=savings,
                        time_to_realize_months=12,
                        confidence=0.9,
                        impact_type=ImpactType.TAX_SAVINGS,
                    ),
                    timeframe=RecommendationTimeframe.SHORT_TERM,
                    created_at=created_at,
                    action_steps=(
                        ActionStep(1, "Confirm your contribution room on your notice of assessment", 15),
                        ActionStep(2, "Set up a contribution to your tax-deferred account", 30),
                    ),
                    risks=("Withdrawals are taxed as income",),
                    alternatives=("Contribute to a tax-free account instead",),
                )
            )

        tax_free_room = self._tax_free_room(profile)
        if tax_free_room > Money.of(limits.tax_free_room_threshold, currency):
            growth = tax_free_room.scale(self.settings.tax_free_growth_rate)
            recommendations.append(
                Recommendation(
                    id=f"{user_id}:tax_free",
                    user_id=user_id,
                    recommendation_type=RecommendationType.TAX_OPTIMIZATION,
                    priority=Priority.MEDIUM,
                    title="Use your tax-free savings room",
                    description=(
                        f"You have {tax_free_room} of tax-free room. Investment growth inside "
                        "the account is never taxed."
                    ),
                    reasoning=RecommendationReasoning(
                        factors=(f"Unused tax-free room: {tax_free_room}",),
                        assumptions=(
                            f"Annual growth of {_percent(self.settings.tax_free_growth_rate)}",
                        ),
                        confidence=0.8,
                        methodology="One year of tax-free growth on the unused room",
                        calculations=(
                            CalculationStep(
                                description="First-year tax-free growth",
                                formula="room x growth rate",
                                result=str(growth),
                            ),
                        ),
                    ),
                    expected_impact=ExpectedImpact(
                        amount=growth,
                        time_to_realize_months=12,
                        confidence=0.8,
                        impact_type=ImpactType.TAX_SAVINGS,
                    ),
                    timeframe=RecommendationTimeframe.MEDIUM_TERM,
                    created_at=created_at,
                    action_steps=(
                        ActionStep(1, "Open a tax-free savings account if you do not have one", 30),
                        ActionStep(2, "Schedule a monthly automatic contribution", 15),
                    ),
                    risks=("Investment returns are not guaranteed",),
                    alternatives=("Pay down high-interest debt first",),
                )
            )
        return recommendations

    def debt_recommendations(
        self, user_id: str, profile: UserFinancialProfile, created_at: datetime
    ) -> list[Recommendation]:
        """Payoff plan for any debt, plus consolidation when there are many accounts."""
        debts = profile.debt_accounts
        if not debts:
            return []
        settings = self.settings
        currency = profile.gross_annual_income.currency
        strategy = self.debt_optimizer.optimize_debt_payoff(profile).unwrap()

        credit_debt = money_sum(
            (d.balance.absolute_value for d in debts if d.account_type == AccountType.CREDIT_CARD),
            currency,
        )
        has_credit = credit_debt.is_positive
        impact = strategy.total_interest_saved
        if not impact.is_positive:
            impact = credit_debt.scale(settings.credit_interest_impact)

        steps = [
            ActionStep(
                order=plan.payoff_order,
                description=f"Pay {plan.recommended_payment} per month toward {plan.account_name}",
                estimated_minutes=15,
            )
            for plan in strategy.plan
        ]
        recommendations = [
            Recommendation(
                id=f"{user_id}:debt_payoff",
                user_id=user_id,
                recommendation_type=RecommendationType.DEBT_REDUCTION,
                priority=Priority.CRITICAL if has_credit else Priority.HIGH,
                title=f"Pay down debt with the {strategy.method.value} method",
                description=strategy.description,
                reasoning=RecommendationReasoning(
                    factors=(
                        f"Total debt: {strategy.total_debt}",
                        f"Debt accounts: {len(debts)}",
                        f"Extra monthly payment available: {strategy.extra_payment}",
                    ),
                    assumptions=(
                        "Interest rates stay at their current or typical levels",
                        "No new debt is added during payoff",
                    ),
                    confidence=0.85,
                    methodology=strategy.reasoning,
                    calculations=(
                        CalculationStep(
                            description="Projected interest under this plan",
                            formula="month-by-month amortization with payment rollover",
                            result=str(strategy.projected_interest),
                        ),
                        CalculationStep(
                            description="Estimated interest saved",
                            formula="balance x rate x 2 years x 30%",
                            result=str(strategy.total_interest_saved),
                        ),
                    ),
                ),
                expected_impact=ExpectedImpact(
                    amount=impact,
                    time_to_realize_months=strategy.payoff_months or 12,
                    confidence=0.85,
                    impact_type=ImpactType.DEBT_REDUCTION,
                ),
                timeframe=(
                    RecommendationTimeframe.IMMEDIATE if has_credit else RecommendationTimeframe.SHORT_TERM
                ),
                created_at=created_at,
                action_steps=tuple(steps),
                risks=("Less cash is available for other goals while paying down debt",),
                alternatives=tuple(
                    f"{alt.method.value}: {alt.description}" for alt in strategy.alternatives
                ),
            )
        ]

        if len(debts) >= settings.consolidation_min_accounts:
            total = strategy.total_debt
            weighted_rate = Decimal(0)
            if total.is_positive:
                weighted_rate = sum(
                    (plan.balance.ratio(total) * plan.interest_rate for plan in strategy.plan),
                    Decimal(0),
                )
            rate_gap = max(weighted_rate - settings.consolidation_rate, Decimal(0))
            savings = total.scale(rate_gap / 100)
            recommendations.append(
                Recommendation(
                    id=f"{user_id}:debt_consolidation",
                    user_id=user_id,
                    recommendation_type=RecommendationType.DEBT_REDUCTION,
                    priority=Priority.MEDIUM,
                    title="Consider consolidating your debts",
                    description=(
                        f"You have {len(debts)} debt accounts. A single consolidation loan "
                        "simplifies payments and may lower your rate."
                    ),
                    reasoning=RecommendationReasoning(
                        factors=(
                            f"Debt accounts: {len(debts)}",
                            f"Weighted interest rate: {weighted_rate:.2f}%",
                        ),
                        assumptions=(
                            f"A consolidation loan at about {settings.consolidation_rate}% is available",
                        ),
                        confidence=0.6,
                        methodology="Annual interest difference between current and consolidated rates",
                        calculations=(
                            CalculationStep(
                                description="Annual interest saved by consolidating",
                                formula="total debt x (weighted rate - consolidation rate)",
                                result=str(savings),
                            ),
                        ),
                    ),
                    expected_impact=ExpectedImpact(
                        amount=savings,
                        time_to_realize_months=12,
                        confidence=0.6,
                        impact_type=ImpactType.DEBT_REDUCTION,
                    ),
                    timeframe=RecommendationTimeframe.SHORT_TERM,
                    created_at=created_at,
                    action_steps=(
                        ActionStep(1, "Compare consolidation loan offers", 60, Difficulty.MODERATE),
                        ActionStep(2, "Pay off the consolidated accounts with the new loan", 30),
                    ),
                    risks=(
                        "Fees can outweigh the interest saved",
                        "Freed-up credit limits make it easy to borrow again",
                    ),
                    alternatives=("Keep the current accounts and follow the payoff plan",),
                )
            )
        return recommendations

    def optimal_savings_rate(self, profile: UserFinancialProfile) -> Decimal:
        """Target savings rate adjusted for age and debt load."""
        settings = self.settings
        rate = settings.baseline_savings_rate
        if profile.age < settings.young_age:
            rate += settings.age_adjustment
        elif profile.age > settings.senior_age:
            rate -= settings.age_adjustment
        if cashflow.debt_to_income(profile) > settings.debt_to_income_threshold:
            rate -= settings.debt_adjustment
        return min(max(rate, settings.min_savings_rate), settings.max_savings_rate)

    def savings_recommendations(
        self, user_id: str, profile: UserFinancialProfile, created_at: datetime
    ) -> list[Recommendation]:
        income = profile.gross_annual_income
        if not income.is_positive:
            return []
        current = cashflow.savings_rate(profile)
        optimal = self.optimal_savings_rate(profile)
        if optimal - current <= self.settings.savings_rate_gap:
            return []

        increase = income.scale(optimal - max(current, Decimal(0)))
        monthly = increase.divide(12)
        return [
            Recommendation(
                id=f"{user_id}:savings_rate",
                user_id=user_id,
                recommendation_type=RecommendationType.SAVINGS_OPTIMIZATION,
                priority=Priority.MEDIUM,
                title="Increase your savings rate",
                description=(
                    f"You save about {_percent(current)} of income; {_percent(optimal)} "
                    f"is a better target. That is about {monthly} more each month."
                ),
                reasoning=RecommendationReasoning(
                    factors=(
                        f"Current savings rate: {_percent(current)}",
                        f"Age: {profile.age}",
                        f"Debt-to-income ratio: {_percent(cashflow.debt_to_income(profile))}",
                    ),
                    assumptions=("Observed spending reflects a typical month",),
                    confidence=0.75,
                    methodology=(
                        "A 20% baseline adjusted for age and debt load, kept between 10% and 30%"
                    ),
                    calculations=(
                        CalculationStep(
                            description="Additional annual savings",
                            formula="gross income x (target rate - current rate)",
                            result=str(increase),
                        ),
                    ),
                ),
                expected_impact=ExpectedImpact(
                    amount=increase,
                    time_to_realize_months=12,
                    confidence=0.75,
                    impact_type=ImpactType.SAVINGS,
                ),
                timeframe=RecommendationTimeframe.MEDIUM_TERM,
                created_at=created_at,
                action_steps=(
                    ActionStep(1, "Review recurring expenses for cuts", 45, Difficulty.MODERATE),
                    ActionStep(2, f"Automate a transfer of {monthly} each payday", 15),
                ),
                risks=("A tighter budget leaves less room for surprises",),
                alternatives=("Raise the rate gradually, one percentage point at a time",),
            )
        ]

    def emergency_fund_recommendations(
        self, user_id: str, profile: UserFinancialProfile, created_at: datetime
    ) -> list[Recommendation]:
        months = self.settings.emergency_fund_months
        expenses = cashflow.monthly_expenses(profile)
        target = expenses.scale(months)
        balance = cashflow.emergency_fund_balance(profile)
        gap = target - balance
        if not gap.is_positive:
            return []

        return [
            Recommendation(
                id=f"{user_id}:emergency_fund",
                user_id=user_id,
                recommendation_type=RecommendationType.EMERGENCY_FUND,
                priority=Priority.HIGH,
                title="Build your emergency fund",
                description=(
                    f"Aim for {target}, which is {months} months of expenses. "
                    f"You are {gap} short."
                ),
                reasoning=RecommendationReasoning(
                    factors=(
                        f"Monthly expenses: {expenses}",
                        f"Emergency savings: {balance}",
                    ),
                    assumptions=(
                        "Savings accounts named as an emergency fund hold your reserve",
                    ),
                    confidence=0.9,
                    methodology=f"Target reserve of {months} months of expenses",
                    calculations=(
                        CalculationStep(
                            description="Emergency fund target",
                            formula=f"monthly expenses x {months}",
                            result=str(target),
                        ),
                        CalculationStep(
                            description="Shortfall",
                            formula="target - current balance",
                            result=str(gap),
                        ),
                    ),
                ),
                expected_impact=ExpectedImpact(
                    amount=gap,
                    time_to_realize_months=months,
                    confidence=0.9,
                    impact_type=ImpactType.SAVINGS,
                ),
                timeframe=RecommendationTimeframe.SHORT_TERM,
                created_at=created_at,
                action_steps=(
                    ActionStep(1, "Open a separate high-interest savings account", 30),
                    ActionStep(2, "Automate monthly deposits until the target is met", 15),
                ),
                risks=("Cash held in savings grows slowly",),
                alternatives=("Keep part of the reserve in a tax-free account",),
            )
        ]

    def goal_recommendations(
        self, user_id: str, profile: UserFinancialProfile, created_at: datetime
    ) -> list[Recommendation]:
        today = created_at.date()
        recommendations = []
        for goal in profile.goals:
            if not goal.is_off_track(today):
                continue
            shortfall = goal.target_amount - goal.current_amount
            if shortfall.is_negative:
                shortfall = Money.zero(shortfall.currency)
            months_left = max((goal.target_date - today).days // 30, 1)
            monthly = shortfall.divide(months_left)
            recommendations.append(
                Recommendation(
                    id=f"{user_id}:goal:{goal.id}",
                    user_id=user_id,
                    recommendation_type=RecommendationType.GOAL_ACCELERATION,
                    priority=Priority.MEDIUM,
                    title=f"Get '{goal.title}' back on track",
                    description=(
                        f"You have saved {goal.current_amount} of {goal.target_amount}. "
                        f"Saving {monthly} a month reaches the target by {goal.target_date.isoformat()}."
                    ),
                    reasoning=RecommendationReasoning(
                        factors=(
                            f"Progress: {_percent(goal.progress)}",
                            f"Target date: {goal.target_date.isoformat()}",
                        ),
                        assumptions=("Contributions are made every month until the target date",),
                        confidence=0.7,
                        methodology="Progress compared with the share of time elapsed",
                        calculations=(
                            CalculationStep(
                                description="Monthly contribution needed",
                                formula="(target - saved) / months remaining",
                                result=str(monthly),
                            ),
                        ),
                    ),
                    expected_impact=ExpectedImpact(
                        amount=shortfall,
                        time_to_realize_months=months_left,
                        confidence=0.7,
                        impact_type=ImpactType.GOAL_ACCELERATION,
                    ),
                    timeframe=RecommendationTimeframe.MEDIUM_TERM,
                    created_at=created_at,
                    action_steps=(
                        ActionStep(1, f"Schedule a monthly transfer of {monthly}", 15),
                    ),
                    risks=("Higher contributions reduce flexibility elsewhere",),
                    alternatives=("Move the target date later",),
                )
            )
        return recommendations

    def spending_recommendations(
        self, user_id: str, profile: UserFinancialProfile, created_at: datetime
    ) -> list[Recommendation]:
        settings = self.settings
        recommendations = []
        snapshot = profile.budget_snapshot
        if snapshot is not None and snapshot.is_over_budget:
            recommendations.append(self._budget_recommendation(user_id, snapshot, created_at))

        analysis = profile.spending_analysis
        if analysis is None:
            return recommendations
        for category in analysis.categories:
            if (
                category.percentage_of_total <= settings.spending_share_threshold
                or category.trend != TrendDirection.INCREASING
            ):
                continue
            savings = category.total_amount.scale(settings.spending_reduction_share)
            recommendations.append(
                Recommendation(
                    id=f"{user_id}:spending:{category.category_id}",
                    user_id=user_id,
                    recommendation_type=RecommendationType.CASH_FLOW_OPTIMIZATION,
                    priority=Priority.LOW,
                    title=f"Rein in {category.category_name} spending",
                    description=(
                        f"{category.category_name} is {category.percentage_of_total:.1f}% of your "
                        "spending and rising."
                    ),
                    reasoning=RecommendationReasoning(
                        factors=(
                            f"Share of spending: {category.percentage_of_total:.1f}%",
                            f"Spent in period: {category.total_amount}",
                            "Trend: increasing",
                        ),
                        assumptions=(
                            f"A {_percent(settings.spending_reduction_share)} cut is achievable",
                        ),
                        confidence=0.6,
                        methodology="Categories above the share threshold with rising spend",
                        calculations=(
                            CalculationStep(
                                description="Savings from a modest cut",
                                formula="category total x reduction share",
                                result=str(savings),
                            ),
                        ),
                    ),
                    expected_impact=ExpectedImpact(
                        amount=savings,
                        time_to_realize_months=3,
                        confidence=0.6,
                        impact_type=ImpactType.SAVINGS,
                    ),
                    timeframe=RecommendationTimeframe.SHORT_TERM,
                    created_at=created_at,
                    action_steps=(
                        ActionStep(1, f"Set a monthly budget for {category.category_name}", 20),
                    ),
                    alternatives=("Look for cheaper substitutes in this category",),
                )
            )
        return recommendations

    def _budget_recommendation(
        self, user_id: str, snapshot: BudgetSnapshot, created_at: datetime
    ) -> Recommendation:
        overspend = snapshot.total_spent - snapshot.total_budget
        return Recommendation(
            id=f"{user_id}:budget",
            user_id=user_id,
            recommendation_type=RecommendationType.CASH_FLOW_OPTIMIZATION,
            priority=Priority.MEDIUM,
            title="Get back within your budget",
            description=(
                f"You spent {snapshot.total_spent} against a budget of {snapshot.total_budget} "
                f"between {snapshot.period.start.isoformat()} and {snapshot.period.end.isoformat()}."
            ),
            reasoning=RecommendationReasoning(
                factors=(
                    f"Budget: {snapshot.total_budget}",
                    f"Spent: {snapshot.total_spent}",
                ),
                assumptions=("Next period's spending follows this one",),
                confidence=0.8,
                methodology="Budget total compared with actual spending",
                calculations=(
                    CalculationStep(
                        description="Overspend",
                        formula="total spent - total budget",
                        result=str(overspend),
                    ),
                ),
            ),
            expected_impact=ExpectedImpact(
                amount=overspend,
                time_to_realize_months=1,
                confidence=0.8,
                impact_type=ImpactType.SAVINGS,
            ),
            timeframe=RecommendationTimeframe.IMMEDIATE,
            created_at=created_at,
            action_steps=(
                ActionStep(1, "Review the categories that went over", 15),
                ActionStep(2, "Lower next period's discretionary spending", 10),
            ),
        )
