"""Registered account (tax-deferred and tax-free) contribution analysis."""

import logging
from datetime import date
from typing import Callable, Optional

from finplan.domain.config import RegisteredAccountLimits
from finplan.domain.entities import (
    Priority,
    RegisteredAccountAnalysis,
    TaxDeferredAnalysis,
    TaxFreeAnalysis,
    TaxRecommendation,
    TaxRecommendationType,
)
from finplan.domain.money import Money

logger = logging.getLogger(__name__)


class RegisteredAccountAnalyzer:
    """Computes contribution room and suggested contributions from income."""

    def __init__(
        self,
        limits: Optional[RegisteredAccountLimits] = None,
        clock: Callable[[], date] = date.today,
    ):
        self.limits = limits or RegisteredAccountLimits()
        self.clock = clock

    def analyze_tax_deferred(self, gross_income: Money) -> TaxDeferredAnalysis:
        """Analyze the tax-deferred (RRSP-style) account.

        Current contributions are assumed to be a fixed share of the maximum
        until actual contribution history is available.
        """
        limits = self.limits
        currency = gross_income.currency
        income = gross_income if gross_income.is_positive else Money.zero(currency)

        max_contribution = min(
            income.scale(limits.deferred_income_rate),
            Money.of(limits.deferred_annual_max, currency),
        )
        current = max_contribution.scale(limits.assumed_contributed_share)
        room = max_contribution - current
        recommended = min(room, income.scale(limits.deferred_recommended_income_share))

        return TaxDeferredAnalysis(
            max_contribution=max_contribution,
            current_contributions=current,
            contribution_room=room,
            tax_savings=room.scale(limits.assumed_marginal_rate),
            recommended_contribution=recommended,
        )

    def analyze_tax_free(self, gross_income: Money) -> TaxFreeAnalysis:
        """Analyze the tax-free (TFSA-style) account.

        The annual limit does not depend on income; income only fixes the
        currency of the result.
        """
        limits = self.limits
        currency = gross_income.currency
        annual_limit = Money.of(limits.tax_free_annual_limit, currency)
        current = annual_limit.scale(limits.assumed_contributed_share)
        room = annual_limit - current
        recommended = min(room, Money.of(limits.tax_free_recommended_ceiling, currency))

        return TaxFreeAnalysis(
            annual_limit=annual_limit,
            current_contributions=current,
            contribution_room=room,
            recommended_contribution=recommended,
        )

    def analyze_registered_accounts(self, gross_income: Money) -> RegisteredAccountAnalysis:
        return RegisteredAccountAnalysis(
            tax_deferred=self.analyze_tax_deferred(gross_income),
            tax_free=self.analyze_tax_free(gross_income),
        )

    def generate_tax_recommendations(
        self, gross_income: Money, tax_year: Optional[int] = None
    ) -> list[TaxRecommendation]:
        """Generate contribution and income-splitting suggestions.

        Args:
            gross_income: Gross annual income
            tax_year: Year the suggestions apply to, defaults to the clock's current year

        Returns:
            Suggestions whose room or income exceeds the materiality thresholds
        """
        limits = self.limits
        currency = gross_income.currency
        tax_year = tax_year or self.clock().year
        analysis = self.analyze_registered_accounts(gross_income)
        recommendations = []

        deferred = analysis.tax_deferred
        if deferred.contribution_room > Money.of(limits.deferred_room_threshold, currency):
            recommendations.append(
                TaxRecommendation(
                    id=f"tax_deferred_{tax_year}",
                    recommendation_type=TaxRecommendationType.TAX_DEFERRED_CONTRIBUTION,
                    title="Maximize tax-deferred contribution",
                    description=(
                        f"You have {deferred.contribution_room} of unused tax-deferred room. "
                        f"Contributing could save about {deferred.tax_savings} in tax."
                    ),
                    potential_savings=deferred.tax_savings,
                    priority=Priority.HIGH,
                    deadline=date(tax_year + 1, 3, 1),
                )
            )

        tax_free = analysis.tax_free
        if tax_free.contribution_room > Money.of(limits.tax_free_room_threshold, currency):
            recommendations.append(
                TaxRecommendation(
                    id=f"tax_free_{tax_year}",
                    recommendation_type=TaxRecommendationType.TAX_FREE_CONTRIBUTION,
                    title="Use tax-free savings room",
                    description=(
                        f"You have {tax_free.contribution_room} of tax-free room. "
                        "Growth inside the account is never taxed."
                    ),
                    potential_savings=tax_free.contribution_room.scale(limits.tax_free_growth_rate),
                    priority=Priority.MEDIUM,
                    deadline=date(tax_year, 12, 31),
                )
            )

        if gross_income > Money.of(limits.income_splitting_threshold, currency):
            recommendations.append(
                TaxRecommendation(
                    id=f"income_splitting_{tax_year}",
                    recommendation_type=TaxRecommendationType.INCOME_SPLITTING,
                    title="Consider income splitting",
                    description=(
                        "At your income level, spousal contributions or pension "
                        "splitting can shift income into a lower bracket."
                    ),
                    potential_savings=gross_income.scale(limits.income_splitting_savings_rate),
                    priority=Priority.MEDIUM,
                )
            )

        logger.debug(
            "Generated tax recommendations",
            extra={"tax_year": tax_year, "count": len(recommendations)},
        )
        return recommendations
