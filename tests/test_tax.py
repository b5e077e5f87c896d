"""Tests for TaxCalculator."""

from decimal import Decimal

import pytest

from finplan.domain.config import FEDERAL_BRACKETS, PROVINCIAL_BRACKETS, TaxTables, progressive_table
from finplan.domain.entities import Jurisdiction
from finplan.domain.money import Money
from finplan.domain.tax import TaxCalculator, bracket_tax

ALL_TABLES = [("federal", FEDERAL_BRACKETS)] + [
    (jurisdiction.value, table) for jurisdiction, table in PROVINCIAL_BRACKETS.items()
]


@pytest.fixture
def calculator():
    """Create a TaxCalculator with the default tables."""
    return TaxCalculator()


class TestTaxCalculator:
    """Tests for calculate_taxes."""

    def test_ontario_80k_federal_tax(self, calculator):
        """Test federal tax in the second bracket."""
        breakdown = calculator.calculate_taxes(Money.of(80000), Jurisdiction.ON)

        # 8380.05 + (80000 - 55867) * 0.205
        assert abs(breakdown.federal_tax.amount - Decimal("13326.81")) <= Decimal("1.00")
        assert breakdown.federal_tax == Money.of("13327.32")

    def test_ontario_80k_full_breakdown(self, calculator):
        """Test every component of an $80,000 Ontario breakdown."""
        breakdown = calculator.calculate_taxes(Money.of(80000), Jurisdiction.ON)

        assert breakdown.provincial_tax == Money.of("5210.71")
        assert breakdown.pension_contribution == Money.of("3754.45")
        assert breakdown.insurance_premium == Money.of("1049.12")
        assert breakdown.total_tax == Money.of("23341.60")
        assert breakdown.after_tax_income == Money.of("56658.40")
        assert breakdown.marginal_rate == Decimal("29.65")
        assert breakdown.average_rate == Decimal("29.18")
        assert breakdown.jurisdiction == Jurisdiction.ON

    @pytest.mark.parametrize(
        "income,expected",
        [
            ("150000", "30799.00"),  # 20849.58 + 38267 * 0.26
            ("200000", "44609.01"),  # 36838.46 + 26795 * 0.29
            ("300000", "75741.93"),  # 58170.09 + 53248 * 0.33
        ],
    )
    def test_federal_upper_brackets_use_published_bases(self, calculator, income, expected):
        """Test federal tax above $111,733 against the published base amounts."""
        breakdown = calculator.calculate_taxes(Money.of(income), Jurisdiction.ON)

        assert breakdown.federal_tax == Money.of(expected)

    @pytest.mark.parametrize(
        "jurisdiction,income,expected",
        [
            (Jurisdiction.ON, "120000", "9209.44"),
            (Jurisdiction.ON, "200000", "18636.77"),
            (Jurisdiction.BC, "200000", "20653.36"),
            (Jurisdiction.AB, "400000", "49301.16"),
            (Jurisdiction.QC, "150000", "28653.75"),
        ],
    )
    def test_provincial_tax_uses_published_bases(self, calculator, jurisdiction, income, expected):
        """Test provincial tax against the published base amounts."""
        breakdown = calculator.calculate_taxes(Money.of(income), jurisdiction)

        assert breakdown.provincial_tax == Money.of(expected)

    @pytest.mark.parametrize("income", ["0.01", "12345.67", "55867", "80000", "102894.99", "250000", "1000000"])
    @pytest.mark.parametrize("jurisdiction", [Jurisdiction.ON, Jurisdiction.BC, Jurisdiction.AB, Jurisdiction.QC])
    def test_after_tax_plus_tax_equals_gross(self, calculator, income, jurisdiction):
        """Test that after-tax income and total tax add back to gross exactly."""
        breakdown = calculator.calculate_taxes(Money.of(income), jurisdiction)

        assert breakdown.after_tax_income + breakdown.total_tax == breakdown.gross_income
        assert breakdown.total_tax == (
            breakdown.federal_tax
            + breakdown.provincial_tax
            + breakdown.pension_contribution
            + breakdown.insurance_premium
        )

    @pytest.mark.parametrize("jurisdiction", [Jurisdiction.ON, Jurisdiction.BC, Jurisdiction.AB, Jurisdiction.QC])
    def test_tax_never_decreases_with_income(self, calculator, jurisdiction):
        """Test that total tax is non-decreasing over a broad income sweep."""
        previous = Money.zero()
        for dollars in range(0, 400001, 250):
            total = calculator.calculate_taxes(Money.of(dollars), jurisdiction).total_tax
            assert total >= previous, f"tax dropped at {dollars}"
            previous = total

    def test_ontario_tax_held_until_next_tier_catches_up(self, calculator):
        """Test that tax just above $102,894 stays at the boundary amount."""
        at_boundary = calculator.calculate_taxes(Money.of(102894), Jurisdiction.ON)
        just_above = calculator.calculate_taxes(Money.of(102900), Jurisdiction.ON)
        past_window = calculator.calculate_taxes(Money.of(103000), Jurisdiction.ON)

        # 2598.02 + 51448 * 0.0915
        assert at_boundary.provincial_tax == Money.of("7305.51")
        assert just_above.provincial_tax == Money.of("7305.51")
        # 7300.41 + 106 * 0.1116
        assert past_window.provincial_tax == Money.of("7312.24")

    def test_zero_income_is_all_zero(self, calculator):
        """Test that zero income produces an all-zero breakdown."""
        breakdown = calculator.calculate_taxes(Money.zero(), Jurisdiction.ON)

        assert breakdown.total_tax == Money.zero()
        assert breakdown.after_tax_income == Money.zero()
        assert breakdown.marginal_rate == Decimal(0)
        assert breakdown.average_rate == Decimal(0)

    def test_negative_income_pays_no_tax(self, calculator):
        """Test that negative income owes nothing."""
        breakdown = calculator.calculate_taxes(Money.of(-5000), Jurisdiction.ON)

        assert breakdown.total_tax == Money.zero()
        assert breakdown.after_tax_income == Money.of(-5000)

    def test_unmapped_jurisdiction_uses_ontario_tables(self, calculator):
        """Test that provinces without tables fall back to Ontario."""
        ontario = calculator.calculate_taxes(Money.of(70000), Jurisdiction.ON)
        manitoba = calculator.calculate_taxes(Money.of(70000), Jurisdiction.MB)

        assert manitoba.provincial_tax == ontario.provincial_tax
        assert manitoba.marginal_rate == ontario.marginal_rate
        assert manitoba.jurisdiction == Jurisdiction.MB

    def test_payroll_deductions_are_capped(self, calculator):
        """Test pension and insurance below and above their caps."""
        low = calculator.calculate_taxes(Money.of(20000), Jurisdiction.ON)
        high = calculator.calculate_taxes(Money.of(500000), Jurisdiction.ON)

        assert low.pension_contribution == Money.of("1190.00")
        assert low.insurance_premium == Money.of("458.00")
        assert high.pension_contribution == Money.of("3754.45")
        assert high.insurance_premium == Money.of("1049.12")


class TestMarginalRate:
    """Tests for marginal rate lookup."""

    @pytest.mark.parametrize(
        "income,expected",
        [
            ("40000", "20.05"),
            ("51446", "20.05"),
            ("51447", "24.15"),
            ("80000", "29.65"),
            ("120000", "37.16"),
            ("500000", "46.16"),
        ],
    )
    def test_ontario_tiers(self, calculator, income, expected):
        """Test Ontario marginal rate tiers and their boundaries."""
        assert calculator.marginal_rate(Money.of(income), Jurisdiction.ON) == Decimal(expected)

    def test_other_provinces(self, calculator):
        """Test marginal rates for BC, Alberta and Quebec."""
        assert calculator.marginal_rate(Money.of(80000), Jurisdiction.BC) == Decimal("28.20")
        assert calculator.marginal_rate(Money.of(80000), Jurisdiction.AB) == Decimal("30.50")
        assert calculator.marginal_rate(Money.of(80000), Jurisdiction.QC) == Decimal("39.00")


class TestBracketTable:
    """Tests for bracket tables and bracket_tax."""

    def test_progressive_table_keeps_given_bases(self):
        """Test that tiers chain their bounds and keep the given base amounts."""
        table = progressive_table(("100", "0", "0.10"), ("200", "10", "0.20"), (None, "25", "0.30"))

        assert [b.lower_bound for b in table] == [Decimal(0), Decimal(100), Decimal(200)]
        assert [b.base_tax for b in table] == [Decimal(0), Decimal(10), Decimal(25)]
        assert table[-1].upper_bound is None

    def test_bracket_tax_holds_previous_tier_amount(self):
        """Test that a low base never lowers tax below the previous tier's top."""
        table = progressive_table(("100", "0", "0.10"), ("200", "10", "0.20"), (None, "25", "0.30"))

        assert bracket_tax(Decimal(0), table) == Decimal(0)
        assert bracket_tax(Decimal(200), table) == Decimal("30.00")
        assert bracket_tax(Decimal(210), table) == Decimal("30.00")
        assert bracket_tax(Decimal(250), table) == Decimal("40.00")

    @pytest.mark.parametrize("name,table", ALL_TABLES, ids=[name for name, _ in ALL_TABLES])
    def test_published_tables_are_monotonic_at_boundaries(self, name, table):
        """Test dollar-by-dollar around every boundary that tax never drops."""
        for bracket in table[:-1]:
            start = int(bracket.upper_bound) - 5
            previous = bracket_tax(Decimal(start), table)
            for dollars in range(start + 1, start + 400):
                current = bracket_tax(Decimal(dollars), table)
                assert current >= previous, f"{name} tax dropped at {dollars}"
                previous = current

    def test_custom_tables_are_used(self):
        """Test that a calculator honours the tables it is given."""
        tables = TaxTables(
            federal=progressive_table((None, "0", "0.10")),
            pension_rate=Decimal(0),
            insurance_rate=Decimal(0),
        )
        calculator = TaxCalculator(tables)

        breakdown = calculator.calculate_taxes(Money.of(1000), Jurisdiction.AB)

        assert breakdown.federal_tax == Money.of(100)
        assert breakdown.provincial_tax == Money.of(100)
