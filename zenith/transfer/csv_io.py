"""
CSV Import and Export

Export writes one row per transaction of a profile. Import reads the
same format back, validates every row against the live categories and
income sources of the target profile, and commits the accepted rows
in a single batch through the store's public API.

DESIGN DECISION: Rows are tokenized with the csv module (RFC-4180
quoting). Export always quotes descriptions, so import must honor
quotes and embedded commas to read its own output back.

IMPORTANT: A bad row is never fatal. It is skipped, its line number
and reason are recorded, and the batch continues. Only a bad header
or an empty file fails the whole import.
"""

import csv
import io
from collections.abc import Iterable
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import IO, Optional, Union

from pydantic import ValidationError

from zenith.audit import AuditLogger, create_correlation_id
from zenith.models.audit import AuditEventBuilder
from zenith.models.entities import (
    Category,
    IncomeSource,
    PaymentMethod,
    ProfileData,
    Transaction,
    TransactionDraft,
    TransactionType,
)
from zenith.models.results import CsvParseResult, ImportReport, SkippedRow
from zenith.store import LedgerStore, ValidationFailure


CSV_HEADERS = ("date", "description", "amount", "type", "paymentMethod", "category", "source")
REQUIRED_HEADERS = ("date", "description", "amount", "type", "paymentMethod")

NO_VALID_ROWS_MESSAGE = (
    "No valid transactions found to import. "
    "Check file format and ensure categories/sources exist."
)

CsvSource = Union[str, bytes, IO]


# =============================================================================
# EXPORT
# =============================================================================

def _escape(value: str) -> str:
    """Quote a cell only when it needs it."""
    if any(ch in value for ch in ',"\r\n'):
        return _quote(value)
    return value


def _quote(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def _format_date(value: datetime) -> str:
    return value.astimezone(timezone.utc).date().isoformat()


def _format_amount(value: Decimal) -> str:
    return format(value, "f")


def transaction_to_row(
    transaction: Transaction,
    category_names: dict[str, str],
    source_names: dict[str, str],
) -> str:
    """One CSV line. Category/source are resolved by id; dangling ones export empty."""
    category = ""
    source = ""
    if transaction.type == TransactionType.EXPENSE:
        category = category_names.get(transaction.category_id, "")
    else:
        source = source_names.get(transaction.source_id, "")

    return ",".join([
        _format_date(transaction.date),
        _quote(transaction.description),
        _format_amount(transaction.amount),
        transaction.type.value,
        transaction.payment_method.value,
        _escape(category),
        _escape(source),
    ])


def export_transactions_csv(profile_data: ProfileData) -> str:
    """Export a profile's transactions, header first, newline-separated."""
    category_names = {c.id: c.name for c in profile_data.categories}
    source_names = {s.id: s.name for s in profile_data.income_sources}

    lines = [",".join(CSV_HEADERS)]
    lines.extend(
        transaction_to_row(t, category_names, source_names)
        for t in profile_data.transactions
    )
    return "\n".join(lines)


# =============================================================================
# IMPORT
# =============================================================================

def _read_text(source: CsvSource) -> str:
    """Read the whole input up front. Large files are not streamed."""
    if hasattr(source, "read"):
        source = source.read()
    if isinstance(source, bytes):
        try:
            return source.decode("utf-8-sig")
        except UnicodeDecodeError:
            raise ValidationFailure("CSV file is not valid UTF-8")
    return source.lstrip("\ufeff")


def _tokenize(text: str) -> tuple[list[tuple[int, list[str]]], list[SkippedRow]]:
    """
    Split text into non-blank rows, each with its line number.

    A row the tokenizer rejects (e.g. a field over the csv field size
    limit) is reported as skipped; the reader resumes on the next line.
    """
    reader = csv.reader(io.StringIO(text))
    rows: list[tuple[int, list[str]]] = []
    unreadable: list[SkippedRow] = []
    while True:
        try:
            row = next(reader)
        except StopIteration:
            break
        except csv.Error as e:
            unreadable.append(SkippedRow(line_number=reader.line_num, reason=f"Unreadable row: {e}"))
            continue
        if any(cell.strip() for cell in row):
            rows.append((reader.line_num, row))
    return rows, unreadable


def _names_to_ids(entities: Iterable[Union[Category, IncomeSource]]) -> dict[str, str]:
    """Lower-cased name -> id. The first entity with a given name wins."""
    lookup: dict[str, str] = {}
    for entity in entities:
        lookup.setdefault(entity.name.lower(), entity.id)
    return lookup


def _parse_date(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise ValidationFailure(f"Unparseable date: {value!r}")


def _parse_amount(value: str) -> Decimal:
    try:
        amount = Decimal(value)
    except (InvalidOperation, ValueError):
        raise ValidationFailure(f"Amount is not a number: {value!r}")
    if not amount.is_finite() or amount <= 0:
        raise ValidationFailure(f"Amount must be a positive number: {value!r}")
    return amount


def _parse_type(value: str) -> TransactionType:
    try:
        return TransactionType(value.lower())
    except ValueError:
        raise ValidationFailure(f"Unknown transaction type: {value!r}")


def _parse_payment_method(value: str) -> PaymentMethod:
    try:
        return PaymentMethod(value.lower())
    except ValueError:
        raise ValidationFailure(f"Unknown payment method: {value!r}")


def row_to_draft(
    record: dict[str, str],
    profile_id: str,
    category_ids: dict[str, str],
    source_ids: dict[str, str],
) -> TransactionDraft:
    """
    Validate one CSV record and turn it into a draft.

    Raises:
        ValidationFailure: If the row must be skipped
    """
    if not record.get("date"):
        raise ValidationFailure("Missing date")
    if not record.get("description"):
        raise ValidationFailure("Missing description")
    amount = _parse_amount(record.get("amount", ""))
    if not record.get("type"):
        raise ValidationFailure("Missing type")

    transaction_type = _parse_type(record["type"])
    category_id: Optional[str] = None
    source_id: Optional[str] = None
    if transaction_type == TransactionType.EXPENSE:
        name = record.get("category", "")
        category_id = category_ids.get(name.lower()) if name else None
        if category_id is None:
            raise ValidationFailure(f"Category not found: {name!r}")
    else:
        name = record.get("source", "")
        source_id = source_ids.get(name.lower()) if name else None
        if source_id is None:
            raise ValidationFailure(f"Income source not found: {name!r}")

    date = _parse_date(record["date"])
    payment_method = _parse_payment_method(record.get("paymentMethod", ""))

    try:
        return TransactionDraft(
            profile_id=profile_id,
            type=transaction_type,
            amount=amount,
            description=record["description"],
            date=date,
            payment_method=payment_method,
            category_id=category_id,
            source_id=source_id,
        )
    except ValidationError as e:
        raise ValidationFailure(f"Invalid transaction: {e.errors()[0]['msg']}")


def parse_transactions_csv(
    source: CsvSource,
    profile_id: str,
    categories: Iterable[Category],
    income_sources: Iterable[IncomeSource],
) -> CsvParseResult:
    """
    Parse and validate a CSV export against one profile.

    The header must contain date, description, amount, type and
    paymentMethod, in any order. Extra columns are ignored.
    Blank lines are ignored.

    Raises:
        ValidationFailure: If the file is not UTF-8 or lacks a usable
            header and data rows
    """
    rows, unreadable = _tokenize(_read_text(source))
    if not rows or (len(rows) < 2 and not unreadable):
        raise ValidationFailure("CSV file is empty or contains only a header.")
    if unreadable and unreadable[0].line_number < rows[0][0]:
        raise ValidationFailure(f"CSV header is unreadable: {unreadable[0].reason}")

    header = [name.strip() for name in rows[0][1]]
    if not all(name in header for name in REQUIRED_HEADERS):
        raise ValidationFailure(
            "CSV header is missing required columns. "
            f"Required: {', '.join(REQUIRED_HEADERS)}"
        )

    category_ids = _names_to_ids(categories)
    source_ids = _names_to_ids(income_sources)

    result = CsvParseResult(skipped=unreadable)
    for line_number, cells in rows[1:]:
        record = {
            name: (cells[index].strip() if index < len(cells) else "")
            for index, name in enumerate(header)
        }
        try:
            draft = row_to_draft(record, profile_id, category_ids, source_ids)
        except ValidationFailure as e:
            result.skipped.append(SkippedRow(line_number=line_number, reason=str(e)))
            continue
        result.drafts.append(draft)

    result.skipped.sort(key=lambda row: row.line_number)
    return result


def import_transactions_csv(
    store: LedgerStore,
    profile_id: str,
    source: CsvSource,
    audit_logger: Optional[AuditLogger] = None,
) -> ImportReport:
    """
    Import a CSV file into a profile.

    Accepted rows are committed with one add_transactions call.
    If no row is valid, nothing is committed and the report says so.

    Raises:
        NotFoundError: If the profile does not exist
        ValidationFailure: If the file is not UTF-8 or lacks a usable
            header and data rows
    """
    audit_logger = audit_logger or store.audit_logger
    profile_data = store.get_profile_data(profile_id)
    parsed = parse_transactions_csv(
        source,
        profile_id,
        profile_data.categories,
        profile_data.income_sources,
    )

    if parsed.drafts:
        _, added = store.add_transactions(parsed.drafts)
        report = ImportReport(
            success=True,
            imported_count=len(added),
            skipped=parsed.skipped,
            message=f"Successfully imported {len(added)} transactions.",
        )
    else:
        report = ImportReport(
            success=False,
            skipped=parsed.skipped,
            message=NO_VALID_ROWS_MESSAGE,
        )

    audit_logger.log(AuditEventBuilder.csv_import_completed(
        profile_id=profile_id,
        imported=report.imported_count,
        skipped_lines=report.skipped_lines,
        correlation_id=create_correlation_id(),
    ))
    return report
