"""Tests for the finplan command line."""

import logging

import pytest

from finplan.cli.main import cli
from finplan.domain.defaults import seed_training_examples


@pytest.fixture(autouse=True)
def restore_root_logger():
    """The CLI reconfigures the root logger; put it back after each test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def run(cli_runner, temp_db):
    """Invoke the CLI against the temporary database."""

    def invoke(*args):
        return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args])

    return invoke


@pytest.fixture
def with_transactions(run):
    """Database holding a chequing account and two grocery purchases."""
    assert run("account", "add", "chequing", "--name", "Chequing", "--balance", "2500").exit_code == 0
    for txn_id, day in (("t1", "2024-03-01"), ("t2", "2024-03-08")):
        result = run(
            "add",
            "--id", txn_id,
            "--account", "chequing",
            "--date", day,
            "--amount", "-85.30",
            "--description", "LOBLAWS 1021",
            "--merchant", "Loblaws",
        )
        assert result.exit_code == 0
    return run


def test_help_does_not_touch_database(cli_runner, tmp_path):
    """Test that --help works without creating a database."""
    db_path = tmp_path / "never.db"

    result = cli_runner.invoke(cli, ["--db-path", str(db_path), "--help"])

    assert result.exit_code == 0
    assert "personal finance" in result.output
    assert not db_path.exists()


def test_init(run):
    """Test database initialization output."""
    result = run("init")

    assert result.exit_code == 0
    assert "Initialized database at" in result.output
    assert "20 default categories available" in result.output


class TestAccounts:
    """Tests for account commands."""

    def test_add_debt_account_stores_negative_balance(self, run, temp_db):
        """Test that a debt account's balance is stored as owed."""
        result = run("account", "add", "visa", "--type", "credit_card", "--balance", "2000", "--rate", "19.99%")

        assert result.exit_code == 0
        assert "Added credit_card account 'visa' (ID: visa)" in result.output
        assert temp_db.get_account("visa").balance.amount == -2000

    def test_list(self, run):
        """Test that listed balances are formatted with sign."""
        run("account", "add", "visa", "--type", "credit_card", "--balance", "2000")

        result = run("account", "list")

        assert result.exit_code == 0
        assert "-$2,000.00" in result.output

    def test_list_empty(self, run):
        """Test the message when no accounts exist."""
        assert "No accounts found." in run("account", "list").output

    def test_bad_rate(self, run):
        """Test that an unparseable rate exits with an error."""
        result = run("account", "add", "visa", "--type", "credit_card", "--rate", "lots")

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_duplicate(self, run):
        """Test that adding an existing account ID exits with an error."""
        run("account", "add", "chequing")

        result = run("account", "add", "chequing")

        assert result.exit_code == 1
        assert "already exists" in result.output


class TestAddTransaction:
    """Tests for the add command."""

    def test_add(self, with_transactions):
        """Test adding a transaction with an explicit ID."""
        result = with_transactions(
            "add", "--id", "t9", "--account", "chequing", "--date", "2024-03-09", "--amount", "-12.00"
        )

        assert result.exit_code == 0
        assert "Added transaction t9: -$12.00 on 2024-03-09" in result.output

    def test_unknown_account(self, run):
        """Test that an unknown account exits with an error."""
        result = run("add", "--account", "nope", "--date", "today", "--amount", "-1")

        assert result.exit_code == 1
        assert "Account 'nope' not found" in result.output

    def test_unknown_category(self, with_transactions):
        """Test that an unknown category exits with an error."""
        result = with_transactions(
            "add", "--account", "chequing", "--date", "today", "--amount", "-1", "--category", "nope"
        )

        assert result.exit_code == 1
        assert "Category 'nope' not found" in result.output

    def test_bad_amount(self, with_transactions):
        """Test that an unparseable amount exits with an error."""
        result = with_transactions("add", "--account", "chequing", "--date", "today", "--amount", "lots")

        assert result.exit_code == 1
        assert "Could not parse amount" in result.output


class TestCategorization:
    """Tests for categorize, feedback and retrain."""

    def test_categorize_by_id(self, with_transactions):
        """Test categorizing one stored transaction."""
        result = with_transactions("categorize", "t1")

        assert result.exit_code == 0
        assert "t1: groceries" in result.output

    def test_categorize_requires_target(self, run):
        """Test that categorize needs an ID or --uncategorized."""
        result = run("categorize")

        assert result.exit_code == 1
        assert "--uncategorized" in result.output

    def test_categorize_unknown_id(self, with_transactions):
        """Test that categorizing an unknown transaction exits with an error."""
        result = with_transactions("categorize", "zz")

        assert result.exit_code == 1
        assert "Transaction 'zz' not found" in result.output

    def test_apply_uncategorized(self, with_transactions, temp_db):
        """Test that --apply stores predictions for uncategorized transactions."""
        result = with_transactions("categorize", "--uncategorized", "--apply")

        assert result.exit_code == 0
        assert "Applied 2 of 2 predictions" in result.output
        assert temp_db.count_by_category("groceries") == 2

    def test_feedback_and_retrain(self, with_transactions, temp_db):
        """Test that feedback recategorizes and retraining counts it."""
        feedback = with_transactions("feedback", "t1", "shopping", "--confidence", "0.9")
        retrain = with_transactions("retrain")

        assert feedback.exit_code == 0
        assert "Transaction t1 categorized as 'shopping'" in feedback.output
        assert temp_db.get_transaction("t1").category_id == "shopping"
        assert f"Retrained models on {len(seed_training_examples()) + 1} examples" in retrain.output

    def test_feedback_unknown_category(self, with_transactions):
        """Test that feedback with an unknown category exits with an error."""
        result = with_transactions("feedback", "t1", "nope")

        assert result.exit_code == 1
        assert "Category 'nope' not found" in result.output


class TestCategories:
    """Tests for category commands."""

    def test_create_and_list(self, run):
        """Test creating a subcategory and seeing it in the list."""
        created = run("category", "create", "Coffee Shops", "--parent", "food", "--color", "#8B4513")
        listed = run("category", "list")

        assert created.exit_code == 0
        assert "Created category 'Coffee Shops' under 'food' (ID: coffee_shops)" in created.output
        assert "  Coffee Shops (ID: coffee_shops) *" in listed.output

    def test_create_under_subcategory_fails(self, run):
        """Test that categories cannot nest two levels deep."""
        result = run("category", "create", "Espresso", "--parent", "restaurants")

        assert result.exit_code == 1
        assert "is itself a subcategory" in result.output

    def test_default_cannot_be_deleted(self, run):
        """Test that deleting a default category exits with an error."""
        result = run("category", "delete", "groceries")

        assert result.exit_code == 1
        assert "default category" in result.output

    def test_delete_with_reassign(self, with_transactions):
        """Test that deleting a used category needs --reassign-to."""
        with_transactions("category", "create", "Market")
        with_transactions("feedback", "t1", "market")

        blocked = with_transactions("category", "delete", "market")
        moved = with_transactions("category", "delete", "market", "--reassign-to", "groceries")

        assert blocked.exit_code == 1
        assert "Supply a reassignment category" in blocked.output
        assert moved.exit_code == 0
        assert "Reassigned 1 transaction to 'groceries'" in moved.output

    def test_update_parent_flags_conflict(self, run):
        """Test that --parent and --no-parent cannot be combined."""
        run("category", "create", "Pets")

        result = run("category", "update", "pets", "--parent", "shopping", "--no-parent")

        assert result.exit_code == 1
        assert "cannot be combined" in result.output

    def test_merge(self, run):
        """Test merging one custom category into another."""
        run("category", "create", "Cafes")
        run("category", "create", "Coffee")

        result = run("category", "merge", "cafes", "coffee")

        assert result.exit_code == 0
        assert "Merged 'cafes' into 'Coffee'" in result.output

    def test_stats_and_suggest(self, with_transactions):
        """Test usage statistics and cleanup suggestions output."""
        with_transactions("category", "create", "Unused")
        with_transactions("categorize", "--uncategorized", "--apply")

        stats = with_transactions("category", "stats")
        suggest = with_transactions("category", "suggest")

        assert "Groceries" in stats.output
        assert "[delete_unused]" in suggest.output


class TestAnalysis:
    """Tests for anomalies, taxes and registered accounts."""

    def test_anomalies_none(self, run):
        """Test the message when nothing unusual is found."""
        result = run("anomalies")

        assert result.exit_code == 0
        assert "No unusual spending found." in result.output

    def test_anomalies_duplicate(self, with_transactions):
        """Test that a double charge is reported as high severity."""
        with_transactions(
            "add", "--id", "t3", "--account", "chequing", "--date", "2024-03-08",
            "--amount", "-85.30", "--merchant", "Loblaws",
        )

        result = with_transactions("anomalies", "--start-date", "2024-03-01", "--end-date", "2024-03-31")

        assert result.exit_code == 0
        assert "[HIGH] t2" in result.output

    def test_anomalies_min_severity_filters(self, with_transactions):
        """Test that --min-severity hides lower alerts."""
        result = with_transactions("anomalies", "--min-severity", "critical")

        assert "No unusual spending found." in result.output

    def test_anomalies_rejects_two_periods(self, run):
        """Test that two period flags exit with an error."""
        result = run("anomalies", "--this-month", "--last-month")

        assert result.exit_code == 1
        assert "Only one period option" in result.output

    def test_taxes(self, run):
        """Test the tax estimate for $80,000 in Ontario."""
        result = run("taxes", "80000")

        assert result.exit_code == 0
        assert "Tax estimate (ON)" in result.output
        assert "$13,327.32" in result.output
        assert "$56,658.40" in result.output
        assert "29.65%" in result.output

    def test_taxes_lowercase_jurisdiction(self, run):
        """Test that jurisdiction codes are case-insensitive."""
        result = run("taxes", "80000", "--jurisdiction", "bc")

        assert result.exit_code == 0
        assert "Tax estimate (BC)" in result.output

    def test_taxes_bad_income(self, run):
        """Test that an unparseable income exits with an error."""
        result = run("taxes", "lots")

        assert result.exit_code == 1
        assert "Could not parse amount" in result.output

    def test_registered(self, run):
        """Test registered account room and suggestions output."""
        result = run("registered", "80000")

        assert result.exit_code == 0
        assert "$7,200.00" in result.output
        assert "$3,500.00" in result.output
        assert "Maximize tax-deferred contribution" in result.output


class TestPlanning:
    """Tests for goals, debt and recommendations."""

    def test_goal_add_and_list(self, run):
        """Test adding a goal and listing its progress."""
        added = run("goal", "add", "house", "House", "--target", "60000", "--saved", "12000", "--by", "2030-06-01")
        listed = run("goal", "list")

        assert added.exit_code == 0
        assert "Added goal 'House' (ID: house) targeting $60,000.00 by 2030-06-01" in added.output
        assert "$12,000.00 of $60,000.00 (20%)" in listed.output

    def test_debt_without_debt(self, run):
        """Test the debt command with no debt accounts."""
        result = run("debt", "--income", "60000", "--age", "40")

        assert result.exit_code == 0
        assert "No outstanding debt to optimize." in result.output

    def test_debt_plan(self, run):
        """Test the debt plan for a card and a loan."""
        run("account", "add", "visa", "--type", "credit_card", "--balance", "2000", "--rate", "19.99")
        run("account", "add", "car", "--type", "loan", "--balance", "9000")

        result = run("debt", "--income", "60000", "--age", "40")

        assert result.exit_code == 0
        assert "Strategy: snowball" in result.output
        assert "1. visa" in result.output
        assert "Alternatives:" in result.output

    def test_recommend(self, run):
        """Test the ranked recommendation listing."""
        result = run("recommend", "--income", "80000", "--age", "40")

        assert result.exit_code == 0
        assert "[HIGH] Contribute to your tax-deferred account (ID: me:tax_deferred)" in result.output
        assert "(ID: me:tax_free)" in result.output

    def test_recommend_explain(self, run):
        """Test explaining one recommendation."""
        result = run("recommend", "--income", "80000", "--age", "40", "--explain", "me:tax_deferred")

        assert result.exit_code == 0
        assert result.output.startswith("Contribute to your tax-deferred account:")
        assert "Method:" in result.output
        assert "Calculation:" in result.output

    def test_recommend_explain_unknown(self, run):
        """Test that explaining an unknown ID exits with an error."""
        result = run("recommend", "--income", "80000", "--age", "40", "--explain", "me:nothing")

        assert result.exit_code == 1
        assert "Recommendation 'me:nothing' not found" in result.output

    def test_recommend_requires_income(self, run):
        """Test that --income is required."""
        result = run("recommend", "--age", "40")

        assert result.exit_code == 2

    def test_savings(self, run):
        """Test the savings strategy and contribution output."""
        result = run("savings", "--income", "90000", "--age", "41", "--risk", "aggressive")

        assert result.exit_code == 0
        assert "Tax-deferred contribution: $8,100.00" in result.output
        assert "Tax-free contribution: $3,500.00" in result.output
        assert "international_equity" in result.output
        assert "already meets" in result.output


def test_json_log_format(cli_runner, temp_db):
    """Test that --log-format json emits structured records."""
    result = cli_runner.invoke(
        cli,
        ["--db-path", temp_db.database_path, "--log-level", "INFO", "--log-format", "json", "retrain"],
    )

    assert result.exit_code == 0
    assert '"service": "finplan"' in result.output
