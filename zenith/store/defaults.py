"""
Default Data

Seed data copied into the store: currencies on first run, and
categories/income sources for every new profile.
"""

from zenith.models.entities import Currency, Snapshot


DEFAULT_CURRENCIES: tuple[Currency, ...] = (
    Currency(code="USD", symbol="$", name="US Dollar"),
    Currency(code="EUR", symbol="€", name="Euro"),
    Currency(code="GBP", symbol="£", name="British Pound"),
    Currency(code="JPY", symbol="¥", name="Japanese Yen"),
    Currency(code="INR", symbol="₹", name="Indian Rupee"),
)

# (name, icon) templates. Each profile gets its own copies with fresh ids.
DEFAULT_CATEGORIES: tuple[tuple[str, str], ...] = (
    ("Food", "utensils"),
    ("Housing", "home"),
    ("Transport", "car"),
    ("Utilities", "bolt"),
    ("Shopping", "shopping-bag"),
    ("Entertainment", "film"),
    ("Health", "heart"),
    ("Other", "tag"),
)

DEFAULT_INCOME_SOURCES: tuple[tuple[str, str], ...] = (
    ("Salary", "briefcase"),
    ("Freelance", "laptop"),
    ("Investments", "chart-line"),
    ("Gifts", "gift"),
    ("Other", "tag"),
)


def initial_snapshot() -> Snapshot:
    """The state of a store that has never been saved."""
    return Snapshot(currencies=DEFAULT_CURRENCIES)
