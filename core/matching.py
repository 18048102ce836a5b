"""
Header keyword matching for column detection.

Headers are compared after lower-casing and removing whitespace and
underscores, by substring containment against ordered keyword lists.
"""
import re
from typing import Dict, List, Optional, Sequence

from core.logger import setup_logger
from core.schema import ColumnMap

logger = setup_logger(__name__)

COLUMN_KEYWORDS: Dict[str, List[str]] = {
    "date": ["date", "transactiondate", "posteddate"],
    "description": ["description", "details", "merchant", "narration", "memo"],
    "amount": ["amount", "amt", "value"],
    "debit": ["debit", "withdrawal", "dr"],
    "credit": ["credit", "deposit", "cr"],
}


def normalize_header(header: Optional[str]) -> str:
    """
    Normalize header for matching: lowercase, no whitespace, no underscores.

    Args:
        header: Raw header string

    Returns:
        Normalized key
    """
    if not header or not isinstance(header, str):
        return ""

    return re.sub(r"\s+", "", header.lower()).replace("_", "")


def pick_column(headers: Sequence[str], keywords: Sequence[str]) -> Optional[str]:
    """Return the first header (in original order) containing any keyword."""
    for header in headers:
        key = normalize_header(header)
        if any(keyword in key for keyword in keywords):
            return header
    return None


def detect_columns(headers: Sequence[str]) -> ColumnMap:
    """
    Guess which headers hold the date, description, amount, debit and credit.

    Each field is picked independently, so a single header can satisfy more
    than one field (e.g. "Description" contains "cr" and also fills the
    credit slot when no earlier header matches).

    Args:
        headers: Header strings from the first row, in original order

    Returns:
        ColumnMap with the detected header per field (None when not found)
    """
    detected = ColumnMap(**{
        field: pick_column(headers, keywords)
        for field, keywords in COLUMN_KEYWORDS.items()
    })

    logger.info(f"Detected columns: {detected.model_dump(exclude_none=True)}")
    return detected
