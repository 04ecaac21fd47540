"""
Report Queries

DESIGN DECISION: Reports are DETERMINISTIC and read-only.
They take a ProfileData (a slice of one snapshot) and never touch the
store, so any snapshot, current or historical, can be reported on.

Dangling references (a category or source deleted after the
transaction was recorded) are resolved here, at display time,
to a placeholder label.
"""

from collections.abc import Iterable, Sequence
from datetime import date, timezone
from decimal import Decimal
from typing import Optional, Union

from zenith.models.entities import (
    Category,
    IncomeSource,
    ProfileData,
    Transaction,
    TransactionType,
)
from zenith.models.results import (
    MonthlyTotal,
    NamedTotal,
    PeriodSummary,
    TransactionFilter,
)


UNCATEGORIZED = "Uncategorized"


def _utc_day(transaction: Transaction) -> date:
    return transaction.date.astimezone(timezone.utc).date()


def resolve_label(
    transaction: Transaction,
    categories: Iterable[Category],
    income_sources: Iterable[IncomeSource],
    placeholder: str = UNCATEGORIZED,
) -> str:
    """Name of the transaction's category or income source, or `placeholder`."""
    pool: Iterable[Union[Category, IncomeSource]]
    if transaction.type == TransactionType.EXPENSE:
        pool = categories
    else:
        pool = income_sources
    for entity in pool:
        if entity.id == transaction.reference_id:
            return entity.name
    return placeholder


def filter_transactions(
    transactions: Iterable[Transaction],
    query: Optional[TransactionFilter] = None,
) -> list[Transaction]:
    """Apply a filter and sort newest first. Date bounds are inclusive."""
    query = query or TransactionFilter()
    results = []
    for t in transactions:
        day = _utc_day(t)
        if query.date_from and day < query.date_from:
            continue
        if query.date_to and day > query.date_to:
            continue
        if query.category_id and t.category_id != query.category_id:
            continue
        if query.payment_method and t.payment_method != query.payment_method:
            continue
        results.append(t)

    results.sort(key=lambda t: t.date, reverse=True)
    return results


def _sorted_totals(totals: dict[str, Decimal]) -> list[NamedTotal]:
    return [
        NamedTotal(name=name, total=total)
        for name, total in sorted(totals.items(), key=lambda item: item[1], reverse=True)
    ]


def summarize(
    profile_data: ProfileData,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> PeriodSummary:
    """
    Income and expense totals for a profile, grouped by name.

    Transactions whose category or source no longer exists are
    grouped under "Uncategorized".
    """
    transactions: Sequence[Transaction] = filter_transactions(
        profile_data.transactions,
        TransactionFilter(date_from=date_from, date_to=date_to),
    )

    total_income = Decimal("0")
    total_expense = Decimal("0")
    by_category: dict[str, Decimal] = {}
    by_source: dict[str, Decimal] = {}

    for t in transactions:
        label = resolve_label(t, profile_data.categories, profile_data.income_sources)
        if t.type == TransactionType.EXPENSE:
            total_expense += t.amount
            by_category[label] = by_category.get(label, Decimal("0")) + t.amount
        else:
            total_income += t.amount
            by_source[label] = by_source.get(label, Decimal("0")) + t.amount

    return PeriodSummary(
        date_from=date_from,
        date_to=date_to,
        transaction_count=len(transactions),
        total_income=total_income,
        total_expense=total_expense,
        expense_by_category=_sorted_totals(by_category),
        income_by_source=_sorted_totals(by_source),
    )


def monthly_totals(
    profile_data: ProfileData,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> list[MonthlyTotal]:
    """
    Income against expense per UTC calendar month, oldest first.

    Only months that have transactions are listed.
    """
    months: dict[date, MonthlyTotal] = {}
    transactions = filter_transactions(
        profile_data.transactions,
        TransactionFilter(date_from=date_from, date_to=date_to),
    )
    for t in transactions:
        month = _utc_day(t).replace(day=1)
        total = months.setdefault(month, MonthlyTotal(month=month))
        if t.type == TransactionType.EXPENSE:
            total.expense += t.amount
        else:
            total.income += t.amount

    return [months[month] for month in sorted(months)]
