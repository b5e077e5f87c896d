"""Domain model entities for finplan.

These are pure data classes representing business concepts, independent of
database schema. Analyzer outputs live here too so that every layer speaks
the same immutable vocabulary.
"""

from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Optional

from finplan.domain.money import DateRange, Money


class AccountType(str, Enum):
    """Kinds of financial accounts."""

    CHECKING = "checking"
    SAVINGS = "savings"
    CREDIT_CARD = "credit_card"
    LOAN = "loan"
    MORTGAGE = "mortgage"
    INVESTMENT = "investment"

    @property
    def is_debt(self) -> bool:
        return self in (AccountType.CREDIT_CARD, AccountType.LOAN, AccountType.MORTGAGE)


class Jurisdiction(str, Enum):
    """Canadian provinces and territories."""

    AB = "AB"
    BC = "BC"
    MB = "MB"
    NB = "NB"
    NL = "NL"
    NS = "NS"
    NT = "NT"
    NU = "NU"
    ON = "ON"
    PE = "PE"
    QC = "QC"
    SK = "SK"
    YT = "YT"


class RiskTolerance(str, Enum):
    CONSERVATIVE = "conservative"
    MODERATE = "moderate"
    AGGRESSIVE = "aggressive"


class TimeHorizon(str, Enum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


class TrendDirection(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"
    VOLATILE = "volatile"


class Priority(IntEnum):
    """Recommendation priority; higher sorts first."""

    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4


class AlertSeverity(IntEnum):
    """Spending alert severity; higher sorts first."""

    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4


class AlertType(str, Enum):
    AMOUNT_ANOMALY = "amount_anomaly"
    FREQUENCY_ANOMALY = "frequency_anomaly"
    NEW_MERCHANT = "new_merchant"
    DUPLICATE_SUSPECTED = "duplicate_suspected"


class RecommendationType(str, Enum):
    TAX_OPTIMIZATION = "tax_optimization"
    DEBT_REDUCTION = "debt_reduction"
    SAVINGS_OPTIMIZATION = "savings_optimization"
    EMERGENCY_FUND = "emergency_fund"
    GOAL_ACCELERATION = "goal_acceleration"
    CASH_FLOW_OPTIMIZATION = "cash_flow_optimization"


class RecommendationTimeframe(str, Enum):
    IMMEDIATE = "immediate"
    SHORT_TERM = "short_term"
    MEDIUM_TERM = "medium_term"
    LONG_TERM = "long_term"


class ImpactType(str, Enum):
    SAVINGS = "savings"
    INCOME_INCREASE = "income_increase"
    DEBT_REDUCTION = "debt_reduction"
    TAX_SAVINGS = "tax_savings"
    GOAL_ACCELERATION = "goal_acceleration"


class Difficulty(str, Enum):
    EASY = "easy"
    MODERATE = "moderate"
    DIFFICULT = "difficult"
    EXPERT_REQUIRED = "expert_required"


class DebtPayoffMethod(str, Enum):
    AVALANCHE = "avalanche"
    SNOWBALL = "snowball"
    HYBRID = "hybrid"
    MINIMUM_ONLY = "minimum_only"


class UsageFrequency(str, Enum):
    NEVER = "never"
    RARELY = "rarely"
    OCCASIONALLY = "occasionally"
    REGULARLY = "regularly"
    FREQUENTLY = "frequently"


class CategorySuggestionType(str, Enum):
    DELETE_UNUSED = "delete_unused"
    CREATE_SUBCATEGORY = "create_subcategory"
    MERGE_SIMILAR = "merge_similar"


class TaxRecommendationType(str, Enum):
    TAX_DEFERRED_CONTRIBUTION = "tax_deferred_contribution"
    TAX_FREE_CONTRIBUTION = "tax_free_contribution"
    INCOME_SPLITTING = "income_splitting"


class GoalImpactType(str, Enum):
    ACCELERATES = "accelerates"
    DELAYS = "delays"
    NEUTRAL = "neutral"
    CONFLICTS = "conflicts"


class ContributionFrequency(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUALLY = "annually"
    LUMP_SUM = "lump_sum"


class AssetClass(str, Enum):
    CANADIAN_EQUITY = "canadian_equity"
    US_EQUITY = "us_equity"
    INTERNATIONAL_EQUITY = "international_equity"
    BONDS = "bonds"
    REAL_ESTATE = "real_estate"
    COMMODITIES = "commodities"
    CASH = "cash"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class SavingsAccountType(str, Enum):
    HIGH_YIELD_SAVINGS = "high_yield_savings"
    TAX_DEFERRED = "tax_deferred"
    TAX_FREE = "tax_free"
    INVESTMENT_ACCOUNT = "investment_account"
    EMERGENCY_FUND = "emergency_fund"
    GIC = "gic"


class RecommendationAction(str, Enum):
    """What the user did with a recommendation."""

    IMPLEMENTED = "implemented"
    PARTIALLY_IMPLEMENTED = "partially_implemented"
    REJECTED = "rejected"
    DEFERRED = "deferred"
    MODIFIED = "modified"


@dataclass(frozen=True)
class Account:
    """Financial account. Debt accounts carry a balance at or below zero."""

    id: str
    name: str
    account_type: AccountType
    balance: Money
    interest_rate: Optional[Decimal] = None
    minimum_payment: Optional[Money] = None

    @property
    def is_debt(self) -> bool:
        return self.account_type.is_debt


@dataclass(frozen=True)
class Category:
    """Spending category; parent_id allows one level of nesting."""

    id: str
    name: str
    parent_id: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    is_custom: bool = False


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity. Negative amounts are debits."""

    id: str
    account_id: str
    date: date
    amount: Money
    description: str
    merchant_name: Optional[str] = None
    location: Optional[str] = None
    category_id: Optional[str] = None
    is_recurring: bool = False

    @property
    def is_debit(self) -> bool:
        return self.amount.is_negative

    def with_category(self, category_id: Optional[str]) -> "Transaction":
        """Return a copy assigned to another category."""
        return replace(self, category_id=category_id)


@dataclass(frozen=True)
class FinancialGoal:
    """Savings goal tracked against a target date."""

    id: str
    title: str
    target_amount: Money
    current_amount: Money
    target_date: date
    created_at: date

    @property
    def progress(self) -> Decimal:
        return self.current_amount.ratio(self.target_amount)

    def is_off_track(self, today: date, tolerance: Decimal = Decimal("0.9")) -> bool:
        """Progress lags the elapsed share of the goal period beyond tolerance."""
        if self.target_amount.cents <= 0:
            return False
        remaining_days = (self.target_date - today).days
        if remaining_days <= 0:
            return self.current_amount < self.target_amount
        elapsed_days = max((today - self.created_at).days, 0)
        expected = Decimal(elapsed_days) / Decimal(elapsed_days + remaining_days)
        return self.progress < expected * tolerance


@dataclass(frozen=True)
class CategorySpending:
    """Spending for one category over a period."""

    category_id: str
    category_name: str
    total_amount: Money
    transaction_count: int
    average_amount: Money
    percentage_of_total: float
    trend: TrendDirection = TrendDirection.STABLE


@dataclass(frozen=True)
class SpendingAnalysis:
    """Spending breakdown over a period."""

    period: DateRange
    total_spent: Money
    total_income: Money
    categories: tuple[CategorySpending, ...] = ()


@dataclass(frozen=True)
class BudgetSnapshot:
    """Budget total against actual spending for a period."""

    period: DateRange
    total_budget: Money
    total_spent: Money

    @property
    def is_over_budget(self) -> bool:
        return self.total_spent > self.total_budget


@dataclass(frozen=True)
class UserFinancialProfile:
    """Read model assembled by the caller for one recommendation run."""

    user_id: str
    age: int
    jurisdiction: Jurisdiction
    gross_annual_income: Money
    accounts: tuple[Account, ...] = ()
    transactions: tuple[Transaction, ...] = ()
    goals: tuple[FinancialGoal, ...] = ()
    risk_tolerance: RiskTolerance = RiskTolerance.MODERATE
    time_horizon: TimeHorizon = TimeHorizon.MEDIUM
    tax_deferred_room: Optional[Money] = None
    tax_free_room: Optional[Money] = None
    marginal_tax_rate: Optional[Decimal] = None
    spending_analysis: Optional[SpendingAnalysis] = None
    budget_snapshot: Optional[BudgetSnapshot] = None

    @property
    def debt_accounts(self) -> tuple[Account, ...]:
        return tuple(a for a in self.accounts if a.is_debt and a.balance.is_negative)


@dataclass(frozen=True)
class TaxBreakdown:
    """Income tax breakdown. Rates are percentages."""

    gross_income: Money
    jurisdiction: Jurisdiction
    federal_tax: Money
    provincial_tax: Money
    pension_contribution: Money
    insurance_premium: Money
    total_tax: Money
    after_tax_income: Money
    marginal_rate: Decimal
    average_rate: Decimal


@dataclass(frozen=True)
class TaxDeferredAnalysis:
    max_contribution: Money
    current_contributions: Money
    contribution_room: Money
    tax_savings: Money
    recommended_contribution: Money


@dataclass(frozen=True)
class TaxFreeAnalysis:
    annual_limit: Money
    current_contributions: Money
    contribution_room: Money
    recommended_contribution: Money


@dataclass(frozen=True)
class RegisteredAccountAnalysis:
    tax_deferred: TaxDeferredAnalysis
    tax_free: TaxFreeAnalysis


@dataclass(frozen=True)
class TaxRecommendation:
    id: str
    recommendation_type: TaxRecommendationType
    title: str
    description: str
    potential_savings: Money
    priority: Priority
    deadline: Optional[date] = None


@dataclass(frozen=True)
class TrainingExample:
    """Labelled transaction used to build category prototypes."""

    transaction: Transaction
    category_id: str
    weight: float = 1.0


@dataclass(frozen=True)
class CategoryPrediction:
    category_id: str
    confidence: float
    reasoning: str = ""


@dataclass(frozen=True)
class CategorizationResult:
    """Best category for a transaction plus ranked alternatives."""

    transaction_id: str
    category_id: str
    confidence: float
    alternatives: tuple[CategoryPrediction, ...] = ()
    reasoning: str = ""


@dataclass(frozen=True)
class UserFeedback:
    transaction_id: str
    category_id: str
    confidence: float
    recorded_at: datetime


@dataclass(frozen=True)
class CategorizationStats:
    total_categorized: int
    average_confidence: float
    feedback_count: int
    accuracy_rate: float
    last_model_update: Optional[datetime]


@dataclass(frozen=True)
class UnusualSpendingAlert:
    id: str
    transaction_id: str
    alert_type: AlertType
    severity: AlertSeverity
    message: str
    suggested_action: str
    detected_at: datetime


@dataclass(frozen=True)
class CategoryUsageStats:
    category: Category
    transaction_count: int
    total_amount: Money
    average_amount: Money
    last_used: Optional[date]
    frequency: UsageFrequency


@dataclass(frozen=True)
class CategoryImprovementSuggestion:
    suggestion_type: CategorySuggestionType
    category_ids: tuple[str, ...]
    message: str


@dataclass(frozen=True)
class DebtPayoffPlan:
    """One debt's position within a payoff strategy."""

    account_id: str
    account_name: str
    balance: Money
    interest_rate: Decimal
    minimum_payment: Money
    recommended_payment: Money
    payoff_order: int
    estimated_payoff_months: Optional[int]


@dataclass(frozen=True)
class AlternativeDebtStrategy:
    method: DebtPayoffMethod
    description: str
    projected_interest: Money
    payoff_months: Optional[int]
    pros: tuple[str, ...] = ()
    cons: tuple[str, ...] = ()


@dataclass(frozen=True)
class DebtPayoffStrategy:
    """Ordered payoff plan with interest projections."""

    method: DebtPayoffMethod
    description: str
    plan: tuple[DebtPayoffPlan, ...]
    total_debt: Money
    extra_payment: Money
    total_interest_saved: Money
    projected_interest: Money
    payoff_months: Optional[int]
    reasoning: str
    pros: tuple[str, ...] = ()
    cons: tuple[str, ...] = ()
    alternatives: tuple[AlternativeDebtStrategy, ...] = ()


@dataclass(frozen=True)
class CalculationStep:
    description: str
    formula: str
    result: str


@dataclass(frozen=True)
class RecommendationReasoning:
    """Self-contained rationale stored with each recommendation."""

    factors: tuple[str, ...]
    assumptions: tuple[str, ...]
    confidence: float
    methodology: str
    calculations: tuple[CalculationStep, ...] = ()


@dataclass(frozen=True)
class ActionStep:
    order: int
    description: str
    estimated_minutes: int
    difficulty: Difficulty = Difficulty.EASY


@dataclass(frozen=True)
class ExpectedImpact:
    amount: Money
    time_to_realize_months: int
    confidence: float
    impact_type: ImpactType


@dataclass(frozen=True)
class Recommendation:
    """Financial planning recommendation."""

    id: str
    user_id: str
    recommendation_type: RecommendationType
    priority: Priority
    title: str
    description: str
    reasoning: RecommendationReasoning
    expected_impact: ExpectedImpact
    timeframe: RecommendationTimeframe
    created_at: datetime
    action_steps: tuple[ActionStep, ...] = ()
    risks: tuple[str, ...] = ()
    alternatives: tuple[str, ...] = ()
    is_completed: bool = False


@dataclass(frozen=True)
class RecommendationExplanation:
    recommendation_id: str
    summary: str
    reasoning: RecommendationReasoning
    action_steps: tuple[ActionStep, ...] = ()
    risks: tuple[str, ...] = ()
    alternatives: tuple[str, ...] = ()


@dataclass(frozen=True)
class GoalImpact:
    """How a contribution plan affects one financial goal."""

    goal_id: str
    impact_type: GoalImpactType
    time_change_days: int
    amount_change: Money


@dataclass(frozen=True)
class ContributionTiming:
    frequency: ContributionFrequency
    optimal_months: tuple[int, ...]
    reasoning: str


@dataclass(frozen=True)
class AllocationRecommendation:
    asset_class: AssetClass
    percentage: int
    reasoning: str
    risk_level: RiskLevel


@dataclass(frozen=True)
class SavingsAllocation:
    account_type: SavingsAccountType
    percentage: int
    amount: Money
    reasoning: str
    expected_return: Decimal


@dataclass(frozen=True)
class TaxDeferredOptimization:
    """Affordable tax-deferred contribution and the tax it saves."""

    recommended_contribution: Money
    tax_savings: Money
    marginal_rate: Decimal
    timing: ContributionTiming
    goal_impacts: tuple[GoalImpact, ...]
    reasoning: str
    alternatives: tuple[str, ...] = ()


@dataclass(frozen=True)
class TaxFreeOptimization:
    """Affordable tax-free contribution with an asset mix for the risk profile."""

    recommended_contribution: Money
    allocations: tuple[AllocationRecommendation, ...]
    goal_impacts: tuple[GoalImpact, ...]
    reasoning: str
    alternatives: tuple[str, ...] = ()


@dataclass(frozen=True)
class SavingsOptimization:
    current_savings_rate: Decimal
    recommended_savings_rate: Decimal
    emergency_fund_target: Money
    current_emergency_fund: Money
    allocations: tuple[SavingsAllocation, ...]
    goal_impacts: tuple[GoalImpact, ...]
    reasoning: str


@dataclass(frozen=True)
class RecommendationOutcome:
    """What happened after a user acted on a recommendation."""

    recommendation_id: str
    action: RecommendationAction
    completed_at: datetime
    actual_impact: Optional[Money] = None
    days_to_complete: Optional[int] = None
    user_feedback: Optional[str] = None


@dataclass(frozen=True)
class EffectivenessSummary:
    """Outcomes recorded for one recommendation."""

    recommendation_id: str
    outcomes: tuple[RecommendationOutcome, ...]
    is_completed: bool
    total_actual_impact: Money
