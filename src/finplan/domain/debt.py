"""Debt payoff planning.

Strategies differ only in the order debts receive extra payments. Each plan
reports the closed-form payoff month for every debt and a month-by-month
simulation in which payments freed by a paid-off debt roll to the next one.
"""

import logging
import math
from dataclasses import replace
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from finplan.domain import cashflow
from finplan.domain.config import DebtPolicy
from finplan.domain.entities import (
    Account,
    AlternativeDebtStrategy,
    DebtPayoffMethod,
    DebtPayoffPlan,
    DebtPayoffStrategy,
    UserFinancialProfile,
)
from finplan.domain.money import Currency, Money, money_sum
from finplan.domain.results import Result, Success

logger = logging.getLogger(__name__)

STRATEGY_DETAILS = {
    DebtPayoffMethod.AVALANCHE: (
        "Pay minimums on everything and put extra money toward the highest-interest debt first.",
        ("Lowest total interest", "Fastest mathematical payoff"),
        ("First payoff can take a long time", "Requires discipline"),
    ),
    DebtPayoffMethod.SNOWBALL: (
        "Pay minimums on everything and put extra money toward the smallest balance first.",
        ("Quick early wins", "Fewer accounts to track sooner"),
        ("Usually more interest paid", "Ignores interest rates"),
    ),
    DebtPayoffMethod.HYBRID: (
        "Clear small balances first for momentum, then target the highest interest rates.",
        ("Early wins from small debts", "Most interest savings on larger debts"),
        ("Slightly more interest than pure avalanche",),
    ),
    DebtPayoffMethod.MINIMUM_ONLY: (
        "Pay only the required minimum on each debt.",
        ("Keeps the most cash available each month",),
        ("Highest total interest", "Longest payoff time"),
    ),
}

RANKED_METHODS = (
    DebtPayoffMethod.AVALANCHE,
    DebtPayoffMethod.SNOWBALL,
    DebtPayoffMethod.HYBRID,
)


def months_to_payoff(balance: Money, annual_rate: Decimal, payment: Money) -> Optional[int]:
    """Months to clear a balance with a fixed monthly payment.

    Uses n = -ln(1 - B*r/P) / ln(1 + r) with r the monthly rate, or B/P when
    the rate is zero.

    Returns:
        Whole months rounded up, or None when the payment never covers interest
    """
    principal = balance.absolute_value.cents
    if principal == 0:
        return 0
    if payment.cents <= 0:
        return None
    monthly_rate = float(annual_rate) / 12 / 100
    if monthly_rate == 0:
        return math.ceil(principal / payment.cents)
    coverage = principal * monthly_rate / payment.cents
    if coverage >= 1:
        return None
    months = -math.log(1 - coverage) / math.log(1 + monthly_rate)
    return math.ceil(months - 1e-9)


class DebtPayoffOptimizer:
    """Builds and selects debt payoff strategies."""

    def __init__(self, policy: Optional[DebtPolicy] = None):
        self.policy = policy or DebtPolicy()

    def interest_rate_for(self, account: Account) -> Decimal:
        """Annual rate in percent: the account's own rate, else the assumed rate for its type."""
        if account.interest_rate is not None:
            return account.interest_rate
        return self.policy.assumed_rates.get(account.account_type, self.policy.default_rate)

    def minimum_payment_for(self, account: Account) -> Money:
        balance = account.balance.absolute_value
        if account.minimum_payment is not None:
            payment = account.minimum_payment.absolute_value
        else:
            rate = self.policy.minimum_payment_rates.get(account.account_type)
            if rate is None:
                payment = Money.of(self.policy.minimum_payment_floor, balance.currency)
            else:
                payment = balance.scale(rate)
        return min(payment, balance)

    def available_extra_funds(self, profile: UserFinancialProfile) -> Money:
        """Share of positive monthly cash flow available for extra payments."""
        cash_flow = cashflow.monthly_cash_flow(profile)
        if not cash_flow.is_positive:
            return Money.zero(cash_flow.currency)
        return cash_flow.scale(self.policy.extra_funds_share)

    def order_debts(self, debts: list[Account], method: DebtPayoffMethod) -> list[Account]:
        def by_rate(account):
            return (-self.interest_rate_for(account), account.balance.absolute_value.cents, account.id)

        def by_balance(account):
            return (account.balance.absolute_value.cents, -self.interest_rate_for(account), account.id)

        if method == DebtPayoffMethod.AVALANCHE:
            return sorted(debts, key=by_rate)
        if method == DebtPayoffMethod.SNOWBALL:
            return sorted(debts, key=by_balance)
        if method == DebtPayoffMethod.HYBRID:
            threshold = Decimal(self.policy.hybrid_balance_threshold) * 100
            small = [d for d in debts if d.balance.absolute_value.cents < threshold]
            large = [d for d in debts if d.balance.absolute_value.cents >= threshold]
            return sorted(small, key=by_balance) + sorted(large, key=by_rate)
        return sorted(debts, key=lambda account: account.id)

    def simulate(self, ordered: list[Account], extra: Money) -> tuple[Money, Optional[int]]:
        """Simulate monthly payments in priority order.

        Returns:
            Total interest paid and months until every balance is zero
            (None when the simulation horizon is reached first)
        """
        currency = extra.currency
        balances = [Decimal(d.balance.absolute_value.cents) for d in ordered]
        rates = [self.interest_rate_for(d) / Decimal(1200) for d in ordered]
        minimums = [Decimal(self.minimum_payment_for(d).cents) for d in ordered]
        budget = sum(minimums) + Decimal(max(extra.cents, 0))
        interest_paid = Decimal(0)
        month = 0

        while any(b > 0 for b in balances):
            if month >= self.policy.max_simulation_months:
                return Money(int(interest_paid), currency), None
            month += 1
            for i, balance in enumerate(balances):
                if balance > 0:
                    interest = (balance * rates[i]).quantize(Decimal(1), rounding=ROUND_HALF_UP)
                    balances[i] = balance + interest
                    interest_paid += interest
            remaining = budget
            for i, balance in enumerate(balances):
                if balance > 0:
                    payment = min(minimums[i], balance, remaining)
                    balances[i] -= payment
                    remaining -= payment
            for i, balance in enumerate(balances):
                if remaining <= 0:
                    break
                if balance > 0:
                    payment = min(balance, remaining)
                    balances[i] -= payment
                    remaining -= payment

        return Money(int(interest_paid), currency), month

    def estimate_interest_saved(self, debts: list[Account]) -> Money:
        """Rough saving: interest accrued over the horizon times the savings factor."""
        policy = self.policy
        currency = debts[0].balance.currency if debts else Currency.CAD
        accrued = money_sum(
            (
                d.balance.absolute_value.scale(
                    self.interest_rate_for(d) / 100 * policy.interest_horizon_years
                )
                for d in debts
            ),
            currency,
        )
        return accrued.scale(policy.interest_savings_factor)

    def build_strategy(
        self,
        debts: list[Account],
        extra: Money,
        method: DebtPayoffMethod,
        reasoning: str = "",
    ) -> DebtPayoffStrategy:
        """Build a payoff plan for an explicit method.

        Args:
            debts: Debt accounts with negative balances
            extra: Monthly amount available beyond minimum payments
            method: Ordering to apply
            reasoning: Why this method was chosen

        Returns:
            DebtPayoffStrategy without alternatives
        """
        description, pros, cons = STRATEGY_DETAILS[method]
        ordered = self.order_debts(debts, method)
        if method == DebtPayoffMethod.MINIMUM_ONLY:
            extra = Money.zero(extra.currency)

        plan = []
        for position, account in enumerate(ordered, start=1):
            minimum = self.minimum_payment_for(account)
            payment = minimum + extra if position == 1 else minimum
            rate = self.interest_rate_for(account)
            plan.append(
                DebtPayoffPlan(
                    account_id=account.id,
                    account_name=account.name,
                    balance=account.balance.absolute_value,
                    interest_rate=rate,
                    minimum_payment=minimum,
                    recommended_payment=payment,
                    payoff_order=position,
                    estimated_payoff_months=months_to_payoff(account.balance, rate, payment),
                )
            )

        projected_interest, months = self.simulate(ordered, extra)
        return DebtPayoffStrategy(
            method=method,
            description=description,
            plan=tuple(plan),
            total_debt=money_sum((p.balance for p in plan), extra.currency),
            extra_payment=extra,
            total_interest_saved=(
                self.estimate_interest_saved(ordered)
                if method != DebtPayoffMethod.MINIMUM_ONLY
                else Money.zero(extra.currency)
            ),
            projected_interest=projected_interest,
            payoff_months=months,
            reasoning=reasoning or description,
            pros=pros,
            cons=cons,
        )

    def select_method(self, total_debt: Money, age: int) -> tuple[DebtPayoffMethod, str]:
        """Pick a method from total debt and age."""
        policy = self.policy
        if total_debt > Money.of(policy.avalanche_debt_threshold, total_debt.currency):
            return (
                DebtPayoffMethod.AVALANCHE,
                "With a large total balance, targeting the highest rate saves the most interest.",
            )
        if age < policy.hybrid_age_limit:
            return (
                DebtPayoffMethod.HYBRID,
                "Clearing small balances first builds momentum, then rates take over.",
            )
        return (
            DebtPayoffMethod.SNOWBALL,
            "Paying the smallest balances first frees up payments quickly.",
        )

    def optimize_debt_payoff(self, profile: UserFinancialProfile) -> Result[DebtPayoffStrategy]:
        """Select and build the payoff strategy for a profile.

        Returns:
            Success with the chosen strategy and the other strategies as
            alternatives; a MINIMUM_ONLY strategy with an empty plan when the
            profile has no debt
        """
        currency = profile.gross_annual_income.currency
        debts = list(profile.debt_accounts)
        if not debts:
            description, pros, cons = STRATEGY_DETAILS[DebtPayoffMethod.MINIMUM_ONLY]
            zero = Money.zero(currency)
            return Success(
                DebtPayoffStrategy(
                    method=DebtPayoffMethod.MINIMUM_ONLY,
                    description=description,
                    plan=(),
                    total_debt=zero,
                    extra_payment=zero,
                    total_interest_saved=zero,
                    projected_interest=zero,
                    payoff_months=0,
                    reasoning="No outstanding debt to optimize.",
                    pros=pros,
                    cons=cons,
                )
            )

        extra = self.available_extra_funds(profile)
        total = cashflow.total_debt(profile)
        method, reasoning = self.select_method(total, profile.age)
        strategy = self.build_strategy(debts, extra, method, reasoning)

        alternatives = []
        for other in RANKED_METHODS:
            if other == method:
                continue
            candidate = self.build_strategy(debts, extra, other)
            alternatives.append(
                AlternativeDebtStrategy(
                    method=other,
                    description=candidate.description,
                    projected_interest=candidate.projected_interest,
                    payoff_months=candidate.payoff_months,
                    pros=candidate.pros,
                    cons=candidate.cons,
                )
            )

        logger.info(
            "Selected debt payoff strategy",
            extra={
                "user_id": profile.user_id,
                "method": method.value,
                "debts": len(debts),
                "projected_interest_cents": strategy.projected_interest.cents,
            },
        )
        return Success(replace(strategy, alternatives=tuple(alternatives)))
