"""Built-in categories and seed training data."""

from datetime import date

from finplan.domain.entities import Category, TrainingExample, Transaction
from finplan.domain.money import Money

UNCATEGORIZED_ID = "uncategorized"

# (id, name, parent_id, color)
DEFAULT_CATEGORY_ROWS = [
    (UNCATEGORIZED_ID, "Uncategorized", None, "#9E9E9E"),
    ("food", "Food & Dining", None, "#FF9800"),
    ("groceries", "Groceries", "food", "#FFC107"),
    ("restaurants", "Restaurants", "food", "#FF5722"),
    ("transport", "Transportation", None, "#2196F3"),
    ("gas", "Gas & Fuel", "transport", "#1976D2"),
    ("public_transit", "Public Transit", "transport", "#03A9F4"),
    ("shopping", "Shopping", None, "#E91E63"),
    ("entertainment", "Entertainment", None, "#9C27B0"),
    ("bills", "Bills & Utilities", None, "#607D8B"),
    ("hydro", "Hydro/Electricity", "bills", "#455A64"),
    ("internet", "Internet & Phone", "bills", "#546E7A"),
    ("healthcare", "Healthcare", None, "#4CAF50"),
    ("education", "Education", None, "#FF9800"),
    ("travel", "Travel", None, "#00BCD4"),
    ("income", "Income", None, "#4CAF50"),
    ("salary", "Salary", "income", "#388E3C"),
    ("investment", "Investment", None, "#795548"),
    ("rrsp", "RRSP Contribution", "investment", "#5D4037"),
    ("tfsa", "TFSA Contribution", "investment", "#6D4C41"),
]

DEFAULT_CATEGORIES = tuple(
    Category(id=cat_id, name=name, parent_id=parent_id, color=color, is_custom=False)
    for cat_id, name, parent_id, color in DEFAULT_CATEGORY_ROWS
)

DEFAULT_CATEGORY_IDS = frozenset(category.id for category in DEFAULT_CATEGORIES)

# (description, merchant, signed amount, day, category_id, recurring)
SEED_TRANSACTIONS = [
    ("TIM HORTONS #1234", "Tim Hortons", "-4.50", date(2024, 1, 8), "restaurants", False),
    ("TIMS COFFEE", "Tim Hortons", "-3.25", date(2024, 1, 10), "restaurants", False),
    ("STARBUCKS 0087", "Starbucks", "-6.75", date(2024, 1, 12), "restaurants", False),
    ("SWISS CHALET", "Swiss Chalet", "-38.20", date(2024, 1, 19), "restaurants", False),
    ("LOBLAWS 1021", "Loblaws", "-85.30", date(2024, 1, 6), "groceries", False),
    ("METRO 455", "Metro", "-67.45", date(2024, 1, 13), "groceries", False),
    ("SOBEYS STORE 12", "Sobeys", "-92.15", date(2024, 1, 20), "groceries", False),
    ("NO FRILLS", "No Frills", "-54.10", date(2024, 1, 27), "groceries", False),
    ("PETRO-CANADA 8812", "Petro-Canada", "-55.00", date(2024, 1, 9), "gas", False),
    ("ESSO STATION", "Esso", "-48.75", date(2024, 1, 23), "gas", False),
    ("SHELL CANADA", "Shell", "-61.30", date(2024, 2, 4), "gas", False),
    ("PRESTO FARE", "Presto", "-3.30", date(2024, 1, 11), "public_transit", False),
    ("TTC MONTHLY PASS", "TTC", "-156.00", date(2024, 2, 1), "public_transit", True),
    ("HYDRO ONE", "Hydro One", "-125.50", date(2024, 1, 15), "hydro", True),
    ("BC HYDRO", "BC Hydro", "-98.40", date(2024, 2, 15), "hydro", True),
    ("ROGERS WIRELESS", "Rogers", "-89.99", date(2024, 1, 18), "internet", True),
    ("BELL CANADA", "Bell", "-95.00", date(2024, 1, 22), "internet", True),
    ("TELUS MOBILITY", "Telus", "-75.00", date(2024, 2, 22), "internet", True),
    ("CANADIAN TIRE", "Canadian Tire", "-45.99", date(2024, 1, 14), "shopping", False),
    ("SHOPPERS DRUG MART", "Shoppers Drug Mart", "-23.45", date(2024, 1, 17), "shopping", False),
    ("AMAZON.CA", "Amazon", "-64.99", date(2024, 2, 3), "shopping", False),
    ("CINEPLEX", "Cineplex", "-28.50", date(2024, 1, 26), "entertainment", False),
    ("NETFLIX.COM", "Netflix", "-16.49", date(2024, 2, 5), "entertainment", True),
    ("PAYROLL DEPOSIT", "Employer", "2850.00", date(2024, 1, 15), "salary", True),
    ("RRSP CONTRIBUTION", "RBC Direct Investing", "-500.00", date(2024, 2, 28), "rrsp", False),
    ("TFSA TRANSFER", "TD Bank", "-250.00", date(2024, 1, 31), "tfsa", False),
]


def seed_training_examples() -> list[TrainingExample]:
    """Build the labelled seed set used before any feedback exists."""
    examples = []
    for index, (description, merchant, amount, day, category_id, recurring) in enumerate(
        SEED_TRANSACTIONS, start=1
    ):
        transaction = Transaction(
            id=f"seed_{index}",
            account_id="seed",
            date=day,
            amount=Money.of(amount),
            description=description,
            merchant_name=merchant,
            category_id=category_id,
            is_recurring=recurring,
        )
        examples.append(TrainingExample(transaction=transaction, category_id=category_id))
    return examples
