"""
Row normalization and sign interpretation.
Turns raw CSV rows into Transactions: dates, amounts, merchant keys and categories.
"""
import re
import uuid
from datetime import datetime
from typing import Any, List, Optional, Sequence, Tuple

import pandas as pd

from core.categories import categorize
from core.logger import setup_logger
from core.parsing import RawRow
from core.schema import ColumnMap, Interpretation, Transaction

logger = setup_logger(__name__)

# Tried in order with strict matching before the permissive fallback
DATE_FORMATS: List[str] = [
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%d/%m/%Y",
    "%Y/%m/%d",
    "%b %d, %Y",
]

_NON_NUMERIC = re.compile(r"[^0-9.\-]")
_DIGITS = re.compile(r"[0-9]")
_WHITESPACE = re.compile(r"\s+")

MERCHANT_WORDS = 3


def clean_amount(value: Any) -> Optional[float]:
    """
    Clean and normalize a signed amount.
    Removes every character except digits, decimal point and minus sign.

    Args:
        value: Raw amount cell

    Returns:
        Float value, 0.0 for text without digits, or None if empty or unparseable
    """
    if value is None:
        return None

    amount_str = str(value).strip()
    if not amount_str:
        return None

    # Handles "PHP 1,250.00", "₱-190" and similar
    cleaned = _NON_NUMERIC.sub("", amount_str)
    if not cleaned:
        # Text-only cells such as "N/A" read as zero
        logger.debug(f"Amount without numeric content read as 0: '{value}'")
        return 0.0

    try:
        return float(cleaned)
    except ValueError:
        logger.debug(f"Failed to parse amount: '{value}' -> '{cleaned}'")
        return None


def normalize_date(value: Any) -> Optional[str]:
    """
    Normalize a date cell to YYYY-MM-DD.

    Explicit formats are tried first; anything else goes through pandas'
    permissive parser.

    Args:
        value: Raw date cell

    Returns:
        Canonical date string or None if the value is not a date
    """
    date_str = str(value if value is not None else "").strip()
    if not date_str:
        return None

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(date_str, fmt).date().isoformat()
        except ValueError:
            continue

    try:
        parsed = pd.to_datetime(date_str, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None

    if pd.isna(parsed):
        return None
    return parsed.date().isoformat()


def merchant_from_description(description: str) -> str:
    """Derive a short grouping key: upper-case, no digits, first three words."""
    cleaned = _WHITESPACE.sub(" ", _DIGITS.sub("", description.upper())).strip()
    return " ".join(cleaned.split()[:MERCHANT_WORDS])


def safe_get_string(row: RawRow, key: Optional[str], default: str = "") -> str:
    """
    Safely read a cell as a trimmed string.

    Args:
        row: Raw CSV row
        key: Column header (may be None)
        default: Value when the column or cell is missing

    Returns:
        Trimmed cell string or default
    """
    if key is None:
        return default
    value = row.get(key)
    if value is None:
        return default
    return str(value).strip()


def resolve_amount(row: RawRow, columns: ColumnMap) -> Optional[float]:
    """
    Read the signed amount of a row.

    A detected amount column wins; otherwise credit minus debit (both taken
    as magnitudes, a missing side counts as zero).

    Returns:
        Signed amount or None when the row has no usable amount
    """
    if columns.amount:
        return clean_amount(row.get(columns.amount))

    if columns.has_debit_or_credit:
        debit = abs(clean_amount(row.get(columns.debit)) or 0.0) if columns.debit else 0.0
        credit = abs(clean_amount(row.get(columns.credit)) or 0.0) if columns.credit else 0.0
        return credit - debit

    return None


def normalize_row(
    row: RawRow,
    headers: Sequence[str],
    columns: ColumnMap
) -> Optional[Transaction]:
    """
    Normalize a single CSV row into a Transaction.

    Undetected date and description columns fall back to the first and
    second header respectively.

    Args:
        row: Raw CSV row
        headers: Header strings in original order
        columns: Detected column map

    Returns:
        Transaction, or None when the row has no valid date, description or amount
    """
    date_key = columns.date or (headers[0] if headers else None)
    description_key = columns.description or (headers[1] if len(headers) > 1 else None)

    date = normalize_date(safe_get_string(row, date_key))
    if date is None:
        logger.debug(f"Dropping row with unparseable date: {row}")
        return None

    description = safe_get_string(row, description_key)
    if not description:
        logger.debug(f"Dropping row with empty description: {row}")
        return None

    amount = resolve_amount(row, columns)
    if amount is None:
        logger.debug(f"Dropping row without a usable amount: {row}")
        return None

    return Transaction(
        id=uuid.uuid4().hex,
        date=date,
        description=description,
        amount=amount,
        category=categorize(description, amount),
        merchant=merchant_from_description(description),
    )


def normalize_rows(
    rows: Sequence[RawRow],
    headers: Sequence[str],
    columns: ColumnMap
) -> List[Transaction]:
    """
    Normalize every row, silently dropping the ones that cannot be used.

    Args:
        rows: Raw CSV rows
        headers: Header strings in original order
        columns: Detected column map

    Returns:
        Transactions in original row order
    """
    transactions = []
    for row in rows:
        txn = normalize_row(row, headers, columns)
        if txn is not None:
            transactions.append(txn)

    dropped = len(rows) - len(transactions)
    logger.info(f"Normalized transactions: {len(rows)} rows -> {len(transactions)} kept ({dropped} dropped)")

    return transactions


def interpret_signs(transactions: Sequence[Transaction]) -> Tuple[List[Transaction], Interpretation]:
    """
    Decide once for the whole batch how amount signs are to be read.

    If any amount is negative the amounts are trusted as signed. Otherwise
    the export is assumed to list spend as positive numbers and every
    amount is turned into an outflow.

    Args:
        transactions: Normalized transactions

    Returns:
        Tuple of (sign-corrected transactions, interpretation)
    """
    if any(txn.amount < 0 for txn in transactions):
        return list(transactions), "signed"

    logger.info("No negative amounts found, treating every amount as spend")
    # `or 0.0` keeps zero amounts from becoming -0.0
    flipped = [
        txn.model_copy(update={"amount": -abs(txn.amount) or 0.0})
        for txn in transactions
    ]
    return flipped, "allPositiveSpend"
