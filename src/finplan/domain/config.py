"""Engine configuration.

Every analyzer takes its parameters from one of these immutable objects so
tables and thresholds can be swapped in tests without touching module state.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from finplan.domain.entities import AccountType, Jurisdiction


@dataclass(frozen=True)
class TaxBracket:
    """One tier of a progressive table: tax = base_tax + rate * (income - lower_bound)."""

    lower_bound: Decimal
    upper_bound: Optional[Decimal]
    base_tax: Decimal
    rate: Decimal

    def contains(self, income: Decimal) -> bool:
        return self.upper_bound is None or income <= self.upper_bound

    def tax_at(self, income: Decimal) -> Decimal:
        return self.base_tax + (income - self.lower_bound) * self.rate


@dataclass(frozen=True)
class MarginalRateTier:
    """Combined federal and provincial marginal rate (percent) up to upper_bound."""

    upper_bound: Optional[Decimal]
    rate: Decimal


def progressive_table(*tiers: tuple[Optional[str], str, str]) -> tuple[TaxBracket, ...]:
    """Build a bracket table from (upper bound, base tax, rate) tuples.

    Each tier starts where the previous one ends. Base amounts are the
    published figures and are not rederived from the lower tiers.
    """
    brackets = []
    lower = Decimal(0)
    for upper, base, rate in tiers:
        upper_bound = None if upper is None else Decimal(upper)
        brackets.append(TaxBracket(lower, upper_bound, Decimal(base), Decimal(rate)))
        if upper_bound is not None:
            lower = upper_bound
    return tuple(brackets)


def marginal_table(*tiers: tuple[Optional[str], str]) -> tuple[MarginalRateTier, ...]:
    return tuple(
        MarginalRateTier(None if upper is None else Decimal(upper), Decimal(rate))
        for upper, rate in tiers
    )


FEDERAL_BRACKETS = progressive_table(
    ("55867", "0", "0.15"),
    ("111733", "8380.05", "0.205"),
    ("173205", "20849.58", "0.26"),
    ("246752", "36838.46", "0.29"),
    (None, "58170.09", "0.33"),
)

PROVINCIAL_BRACKETS = {
    Jurisdiction.ON: progressive_table(
        ("51446", "0", "0.0505"),
        ("102894", "2598.02", "0.0915"),
        ("150000", "7300.41", "0.1116"),
        ("220000", "12556.77", "0.1216"),
        (None, "21068.77", "0.1316"),
    ),
    Jurisdiction.BC: progressive_table(
        ("47937", "0", "0.0506"),
        ("95875", "2425.61", "0.077"),
        ("110076", "6117.53", "0.105"),
        ("133664", "7608.64", "0.1229"),
        ("181232", "10509.35", "0.147"),
        (None, "17500.34", "0.168"),
    ),
    Jurisdiction.AB: progressive_table(
        ("148269", "0", "0.10"),
        ("177922", "14826.90", "0.12"),
        ("237675", "18385.26", "0.13"),
        ("355649", "26152.15", "0.14"),
        (None, "42648.51", "0.15"),
    ),
    Jurisdiction.QC: progressive_table(
        ("51780", "0", "0.14"),
        ("103545", "7249.20", "0.19"),
        ("126000", "17084.55", "0.24"),
        (None, "22473.75", "0.2575"),
    ),
}

MARGINAL_RATES = {
    Jurisdiction.ON: marginal_table(
        ("51446", "20.05"),
        ("55867", "24.15"),
        ("102894", "29.65"),
        ("111733", "31.16"),
        ("150000", "37.16"),
        ("173205", "41.16"),
        ("220000", "43.41"),
        (None, "46.16"),
    ),
    Jurisdiction.BC: marginal_table(
        ("47937", "20.06"),
        ("55867", "22.70"),
        ("95875", "28.20"),
        ("110076", "30.50"),
        ("111733", "32.79"),
        ("133664", "38.29"),
        ("173205", "40.70"),
        ("181232", "43.70"),
        (None, "49.80"),
    ),
    Jurisdiction.AB: marginal_table(
        ("55867", "25.00"),
        ("111733", "30.50"),
        ("148269", "36.00"),
        ("173205", "38.00"),
        ("177922", "41.00"),
        ("237675", "42.00"),
        ("246752", "43.00"),
        ("355649", "47.00"),
        (None, "48.00"),
    ),
    Jurisdiction.QC: marginal_table(
        ("51780", "29.00"),
        ("55867", "33.50"),
        ("103545", "39.00"),
        ("111733", "44.00"),
        ("126000", "50.00"),
        ("173205", "51.75"),
        (None, "54.75"),
    ),
}


@dataclass(frozen=True)
class TaxTables:
    """Bracket and payroll parameters for one tax year."""

    tax_year: int = 2024
    federal: tuple[TaxBracket, ...] = FEDERAL_BRACKETS
    provincial: dict = field(default_factory=lambda: dict(PROVINCIAL_BRACKETS))
    marginal_rates: dict = field(default_factory=lambda: dict(MARGINAL_RATES))
    default_jurisdiction: Jurisdiction = Jurisdiction.ON
    pension_rate: Decimal = Decimal("0.0595")
    pension_max: Decimal = Decimal("3754.45")
    insurance_rate: Decimal = Decimal("0.0229")
    insurance_max: Decimal = Decimal("1049.12")

    def brackets_for(self, jurisdiction: Jurisdiction) -> tuple[TaxBracket, ...]:
        return self.provincial.get(jurisdiction, self.provincial[self.default_jurisdiction])

    def marginal_rates_for(self, jurisdiction: Jurisdiction) -> tuple[MarginalRateTier, ...]:
        return self.marginal_rates.get(
            jurisdiction, self.marginal_rates[self.default_jurisdiction]
        )


@dataclass(frozen=True)
class RegisteredAccountLimits:
    """Plan parameters for tax-deferred and tax-free savings accounts."""

    deferred_income_rate: Decimal = Decimal("0.18")
    deferred_annual_max: Decimal = Decimal("31560")
    tax_free_annual_limit: Decimal = Decimal("7000")
    # Placeholder until a contribution ledger feed exists
    assumed_contributed_share: Decimal = Decimal("0.5")
    assumed_marginal_rate: Decimal = Decimal("0.3116")
    deferred_recommended_income_share: Decimal = Decimal("0.10")
    tax_free_recommended_ceiling: Decimal = Decimal("2000")
    deferred_room_threshold: Decimal = Decimal("1000")
    tax_free_room_threshold: Decimal = Decimal("500")
    tax_free_growth_rate: Decimal = Decimal("0.05")
    income_splitting_threshold: Decimal = Decimal("100000")
    income_splitting_savings_rate: Decimal = Decimal("0.02")


REGIONAL_KEYWORDS = (
    "tim hortons",
    "tims",
    "canadian tire",
    "loblaws",
    "metro",
    "sobeys",
    "shoppers drug mart",
    "rbc",
    "td bank",
    "bmo",
    "scotiabank",
    "cibc",
    "hydro",
    "rogers",
    "bell",
    "telus",
    "petro-canada",
    "esso",
    "shell canada",
)


@dataclass(frozen=True)
class CategorizationSettings:
    """Similarity weights for the prototype scorer. Weights sum to 1."""

    text_weight: float = 0.50
    merchant_weight: float = 0.15
    amount_weight: float = 0.20
    flag_weight: float = 0.10
    day_weight: float = 0.05
    degraded_confidence_factor: float = 0.5
    max_alternatives: int = 3
    fallback_category_id: str = "uncategorized"
    regional_keywords: tuple[str, ...] = REGIONAL_KEYWORDS


@dataclass(frozen=True)
class AnomalySettings:
    z_score_threshold: float = 2.0
    min_group_size: int = 3
    same_day_merchant_limit: int = 2
    critical_deviation: float = 5.0
    high_deviation: float = 3.0
    medium_deviation: float = 2.0


@dataclass(frozen=True)
class DebtPolicy:
    """Assumed rates, minimum payments and strategy selection thresholds."""

    assumed_rates: dict = field(
        default_factory=lambda: {
            AccountType.CREDIT_CARD: Decimal("20"),
            AccountType.LOAN: Decimal("8"),
            AccountType.MORTGAGE: Decimal("4"),
        }
    )
    default_rate: Decimal = Decimal("10")
    minimum_payment_rates: dict = field(
        default_factory=lambda: {
            AccountType.CREDIT_CARD: Decimal("0.03"),
            AccountType.LOAN: Decimal("0.02"),
            AccountType.MORTGAGE: Decimal("0.01"),
        }
    )
    minimum_payment_floor: Decimal = Decimal("50")
    extra_funds_share: Decimal = Decimal("0.30")
    hybrid_balance_threshold: Decimal = Decimal("1000")
    avalanche_debt_threshold: Decimal = Decimal("50000")
    hybrid_age_limit: int = 30
    interest_horizon_years: int = 2
    interest_savings_factor: Decimal = Decimal("0.30")
    max_simulation_months: int = 600


@dataclass(frozen=True)
class RecommendationSettings:
    tax_free_growth_rate: Decimal = Decimal("0.06")
    credit_interest_impact: Decimal = Decimal("0.15")
    consolidation_min_accounts: int = 3
    consolidation_rate: Decimal = Decimal("8")
    baseline_savings_rate: Decimal = Decimal("0.20")
    young_age: int = 30
    senior_age: int = 50
    age_adjustment: Decimal = Decimal("0.05")
    debt_to_income_threshold: Decimal = Decimal("0.30")
    debt_adjustment: Decimal = Decimal("0.05")
    min_savings_rate: Decimal = Decimal("0.10")
    max_savings_rate: Decimal = Decimal("0.30")
    savings_rate_gap: Decimal = Decimal("0.02")
    emergency_fund_months: int = 6
    spending_share_threshold: float = 15.0
    spending_reduction_share: Decimal = Decimal("0.15")
    tax_deferred_cash_flow_share: Decimal = Decimal("0.20")
    tax_free_cash_flow_share: Decimal = Decimal("0.15")
    emergency_allocation_share: Decimal = Decimal("0.40")
    registered_allocation_share: Decimal = Decimal("0.30")
    emergency_fund_return: Decimal = Decimal("2.5")
    tax_deferred_return: Decimal = Decimal("6.0")
    tax_free_return: Decimal = Decimal("5.5")
    tax_free_goal_acceleration: Decimal = Decimal("0.05")
    tax_free_goal_days: int = 30
    savings_goal_days: int = 60


@dataclass(frozen=True)
class EngineConfig:
    """All analyzer configuration in one place."""

    tax: TaxTables = field(default_factory=TaxTables)
    registered_accounts: RegisteredAccountLimits = field(default_factory=RegisteredAccountLimits)
    categorization: CategorizationSettings = field(default_factory=CategorizationSettings)
    anomaly: AnomalySettings = field(default_factory=AnomalySettings)
    debt: DebtPolicy = field(default_factory=DebtPolicy)
    recommendations: RecommendationSettings = field(default_factory=RecommendationSettings)

    @classmethod
    def default(cls) -> "EngineConfig":
        return cls()
