"""Tests for DebtPayoffOptimizer."""

from decimal import Decimal

import pytest

from conftest import make_debt
from finplan.domain.debt import DebtPayoffOptimizer, months_to_payoff
from finplan.domain.entities import (
    Account,
    AccountType,
    DebtPayoffMethod,
    Jurisdiction,
    UserFinancialProfile,
)
from finplan.domain.money import Money


def make_profile(accounts, age=40, income="60000"):
    return UserFinancialProfile(
        user_id="u1",
        age=age,
        jurisdiction=Jurisdiction.ON,
        gross_annual_income=Money.of(income),
        accounts=tuple(accounts),
    )


@pytest.fixture
def optimizer():
    return DebtPayoffOptimizer()


class TestMonthsToPayoff:
    """Tests for the closed-form payoff estimate."""

    def test_zero_rate(self):
        """Test that an interest-free balance pays off in balance over payment months."""
        assert months_to_payoff(Money.of(-1200), Decimal(0), Money.of(100)) == 12

    def test_with_interest_rounds_up(self):
        """Test that a partial final month counts as a whole month."""
        # 1% monthly on 1000 paying 100: about 10.6 months
        assert months_to_payoff(Money.of(1000), Decimal(12), Money.of(100)) == 11

    def test_payment_never_covers_interest(self):
        """Test that a payment below the monthly interest never pays off."""
        assert months_to_payoff(Money.of(1000), Decimal(12), Money.of(10)) is None

    def test_no_balance(self):
        """Test that a zero balance is already paid off."""
        assert months_to_payoff(Money.zero(), Decimal(20), Money.of(50)) == 0

    def test_no_payment(self):
        """Test that a zero payment never pays off."""
        assert months_to_payoff(Money.of(500), Decimal(5), Money.zero()) is None


class TestRatesAndMinimums:
    """Tests for per-account rate and minimum payment lookup."""

    def test_own_rate_overrides_assumed_rate(self, optimizer):
        """Test that an account's own rate wins over the assumed type rate."""
        own = make_debt("loan", AccountType.LOAN, "5000", rate=Decimal("3.5"))
        assumed = make_debt("loan2", AccountType.LOAN, "5000")

        assert optimizer.interest_rate_for(own) == Decimal("3.5")
        assert optimizer.interest_rate_for(assumed) == Decimal("8")

    def test_minimum_payment_by_type(self, optimizer):
        """Test minimum payments derived from the account type."""
        card = make_debt("card", AccountType.CREDIT_CARD, "1000")
        mortgage = make_debt("home", AccountType.MORTGAGE, "300000")

        assert optimizer.minimum_payment_for(card) == Money.of(30)
        assert optimizer.minimum_payment_for(mortgage) == Money.of(3000)

    def test_explicit_minimum_is_capped_by_balance(self, optimizer):
        """Test that a stated minimum never exceeds the amount owed."""
        card = Account(
            id="card",
            name="Card",
            account_type=AccountType.CREDIT_CARD,
            balance=Money.of(-40),
            minimum_payment=Money.of(100),
        )

        assert optimizer.minimum_payment_for(card) == Money.of(40)


class TestOrdering:
    """Tests for strategy ordering."""

    @pytest.fixture
    def debts(self):
        return [
            make_debt("a", AccountType.LOAN, "500", rate=Decimal("5")),
            make_debt("b", AccountType.LOAN, "3000", rate=Decimal("25")),
            make_debt("c", AccountType.LOAN, "2000", rate=Decimal("10")),
            make_debt("d", AccountType.CREDIT_CARD, "900", rate=Decimal("30")),
        ]

    def test_avalanche_orders_by_rate(self, optimizer, debts):
        """Test that avalanche pays the highest rate first."""
        ordered = optimizer.order_debts(debts, DebtPayoffMethod.AVALANCHE)

        assert [d.id for d in ordered] == ["d", "b", "c", "a"]

    def test_snowball_orders_by_balance(self, optimizer, debts):
        """Test that snowball pays the smallest balance first."""
        ordered = optimizer.order_debts(debts, DebtPayoffMethod.SNOWBALL)

        assert [d.id for d in ordered] == ["a", "d", "c", "b"]

    def test_hybrid_clears_small_balances_then_rates(self, optimizer, debts):
        """Test that hybrid clears small balances before ordering by rate."""
        ordered = optimizer.order_debts(debts, DebtPayoffMethod.HYBRID)

        assert [d.id for d in ordered] == ["a", "d", "b", "c"]


class TestOptimizeDebtPayoff:
    """Tests for optimize_debt_payoff."""

    @pytest.fixture
    def inverted_debts(self):
        # The smallest balance carries the lowest rate
        return [
            make_debt("card", AccountType.CREDIT_CARD, "5000", rate=Decimal("22")),
            make_debt("loan", AccountType.LOAN, "800", rate=Decimal("5")),
        ]

    def test_no_debt_is_minimum_only(self, optimizer):
        """Test that a profile without debt gets an empty minimum-only plan."""
        strategy = optimizer.optimize_debt_payoff(make_profile([])).unwrap()

        assert strategy.method == DebtPayoffMethod.MINIMUM_ONLY
        assert strategy.plan == ()
        assert strategy.total_debt == Money.zero()
        assert strategy.payoff_months == 0

    def test_positive_balances_are_not_debt(self, optimizer):
        """Test that savings balances are not treated as debt."""
        savings = Account("sav", "Savings", AccountType.SAVINGS, Money.of(5000))

        strategy = optimizer.optimize_debt_payoff(make_profile([savings])).unwrap()

        assert strategy.method == DebtPayoffMethod.MINIMUM_ONLY

    def test_avalanche_never_costs_more_than_snowball(self, optimizer, inverted_debts):
        """Test that avalanche interest is at most snowball interest."""
        extra = Money.of(200)

        avalanche = optimizer.build_strategy(inverted_debts, extra, DebtPayoffMethod.AVALANCHE)
        snowball = optimizer.build_strategy(inverted_debts, extra, DebtPayoffMethod.SNOWBALL)

        assert [p.account_id for p in avalanche.plan] == ["card", "loan"]
        assert [p.account_id for p in snowball.plan] == ["loan", "card"]
        assert avalanche.projected_interest <= snowball.projected_interest
        assert avalanche.payoff_months is not None

    def test_extra_payment_goes_to_first_debt(self, optimizer, inverted_debts):
        """Test that only the first debt in the plan receives the extra payment."""
        strategy = optimizer.build_strategy(inverted_debts, Money.of(200), DebtPayoffMethod.AVALANCHE)

        first, second = strategy.plan
        assert first.payoff_order == 1
        assert first.recommended_payment == first.minimum_payment + Money.of(200)
        assert second.recommended_payment == second.minimum_payment

    def test_mid_age_small_debt_selects_snowball(self, optimizer, inverted_debts):
        """Test method selection and alternatives for a mid-age user with small debts."""
        strategy = optimizer.optimize_debt_payoff(make_profile(inverted_debts)).unwrap()

        assert strategy.method == DebtPayoffMethod.SNOWBALL
        assert strategy.total_debt == Money.of(5800)
        # No spending recorded: 30% of 5000 monthly income
        assert strategy.extra_payment == Money.of(1500)
        assert [a.method for a in strategy.alternatives] == [
            DebtPayoffMethod.AVALANCHE,
            DebtPayoffMethod.HYBRID,
        ]
        avalanche = strategy.alternatives[0]
        assert avalanche.projected_interest <= strategy.projected_interest

    def test_young_user_selects_hybrid(self, optimizer, inverted_debts):
        """Test that young users with small debts get the hybrid method."""
        strategy = optimizer.optimize_debt_payoff(make_profile(inverted_debts, age=25)).unwrap()

        assert strategy.method == DebtPayoffMethod.HYBRID

    def test_large_debt_selects_avalanche(self, optimizer):
        """Test that large total debt selects the avalanche method."""
        debts = [make_debt("home", AccountType.MORTGAGE, "250000", rate=Decimal("5"))]

        strategy = optimizer.optimize_debt_payoff(make_profile(debts, income="120000")).unwrap()

        assert strategy.method == DebtPayoffMethod.AVALANCHE

    def test_interest_saved_estimate(self, optimizer):
        """Test the interest saved estimate for a single card."""
        debts = [make_debt("card", AccountType.CREDIT_CARD, "1000", rate=Decimal("20"))]

        # 1000 x 20% x 2 years x 30%
        assert optimizer.estimate_interest_saved(debts) == Money.of(120)

    def test_simulation_stops_at_horizon(self, optimizer):
        """Test that a hopeless plan stops at the simulation horizon."""
        debts = [
            Account(
                id="card",
                name="Card",
                account_type=AccountType.CREDIT_CARD,
                balance=Money.of(-10000),
                interest_rate=Decimal("30"),
                minimum_payment=Money.of(10),
            )
        ]

        interest, months = optimizer.simulate(debts, Money.zero())

        assert months is None
        assert interest.is_positive
