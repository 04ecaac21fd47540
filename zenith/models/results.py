"""
Result Models for Zenith Finance

Outcomes reported back to callers: CSV import reports and
reporting queries over one profile's transactions.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from zenith.models.entities import PaymentMethod, TransactionDraft


# =============================================================================
# IMPORT MODELS
# =============================================================================

class SkippedRow(BaseModel):
    """A CSV row that was rejected during import."""

    line_number: int = Field(
        ...,
        ge=1,
        description="1-based line number in the source file"
    )
    reason: str = Field(
        ...,
        description="Human-readable reason the row was skipped"
    )


class CsvParseResult(BaseModel):
    """Rows accepted and rejected by the CSV parser. Nothing is committed yet."""

    drafts: list[TransactionDraft] = Field(default_factory=list)
    skipped: list[SkippedRow] = Field(default_factory=list)


class ImportReport(BaseModel):
    """
    Aggregate outcome of a CSV import.

    Partial success is reported as a count. The skipped rows are
    included for diagnostics only.
    """

    success: bool
    imported_count: int = Field(default=0, ge=0)
    skipped: list[SkippedRow] = Field(default_factory=list)
    message: str

    @property
    def skipped_lines(self) -> list[int]:
        return [row.line_number for row in self.skipped]


# =============================================================================
# REPORTING MODELS
# =============================================================================

class TransactionFilter(BaseModel):
    """Filters applied to a transaction listing. All are optional."""

    date_from: Optional[date] = None
    date_to: Optional[date] = None
    category_id: Optional[str] = None
    payment_method: Optional[PaymentMethod] = None


class NamedTotal(BaseModel):
    """Sum of amounts for one category or income source name."""

    name: str
    total: Decimal


class PeriodSummary(BaseModel):
    """Income and expense totals for one profile over a date range."""

    date_from: Optional[date] = None
    date_to: Optional[date] = None
    transaction_count: int = Field(default=0, ge=0)
    total_income: Decimal = Decimal("0")
    total_expense: Decimal = Decimal("0")
    expense_by_category: list[NamedTotal] = Field(default_factory=list)
    income_by_source: list[NamedTotal] = Field(default_factory=list)

    @property
    def balance(self) -> Decimal:
        return self.total_income - self.total_expense


class MonthlyTotal(BaseModel):
    """Income and expense for one calendar month (UTC)."""

    month: date = Field(..., description="First day of the month")
    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")

    @property
    def balance(self) -> Decimal:
        return self.income - self.expense
