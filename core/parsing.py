"""
CSV text parsing.
Turns raw CSV text into an ordered list of header -> cell mappings.
"""
import csv
import io
from typing import Dict, List

import pandas as pd

from core.exceptions import ParsingError
from core.logger import setup_logger

logger = setup_logger(__name__)

RawRow = Dict[str, str]


def _read_frame(csv_text: str, **kwargs) -> pd.DataFrame:
    """Read every line (header included) as string data."""
    return pd.read_csv(
        io.StringIO(csv_text),
        header=None,
        dtype=object,
        keep_default_na=False,
        skip_blank_lines=True,
        engine="python",
        **kwargs
    )


def parse_csv_text(csv_text: str) -> List[RawRow]:
    """
    Parse CSV text whose first row is the header.

    Blank lines are skipped. Rows shorter than the header get empty strings
    for the missing cells, longer rows have their extra cells dropped.
    Headers and cells are trimmed.

    Args:
        csv_text: Raw CSV content (UTF-8 decoded)

    Returns:
        List of rows, each mapping header -> cell string. Empty when the text
        has no data rows.

    Raises:
        ParsingError: If the CSV structure is malformed
    """
    if not csv_text or not csv_text.strip():
        logger.info("Empty CSV payload, nothing to parse")
        return []

    try:
        width = _read_frame(csv_text, nrows=1).shape[1]
        df = _read_frame(csv_text, on_bad_lines=lambda bad_line: bad_line[:width])
    except pd.errors.EmptyDataError:
        return []
    except (pd.errors.ParserError, csv.Error) as e:
        logger.error(f"Failed to parse CSV: {e}")
        raise ParsingError(
            f"Malformed CSV: {e}",
            details={"error": str(e)}
        )

    records = df.fillna("").values.tolist()
    if not records:
        return []

    headers = [str(cell).strip() for cell in records[0]]
    rows = [
        dict(zip(headers, (str(cell).strip() for cell in record)))
        for record in records[1:]
    ]

    logger.info(f"Parsed {len(rows)} rows with {len(headers)} columns")
    logger.debug(f"Columns: {headers}")

    return rows
