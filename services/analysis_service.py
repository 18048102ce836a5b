"""
CSV analysis service.
Runs the parse -> detect -> normalize -> sign -> analytics pipeline and
assembles the AnalysisResult.
"""
from core.analytics import (
    compute_summary,
    detect_anomalies,
    detect_recurring,
    spend_by_category,
    spend_by_day,
    top_merchants,
)
from core.logger import setup_logger
from core.matching import detect_columns
from core.normalize import interpret_signs, normalize_rows
from core.parsing import parse_csv_text
from core.schema import CURRENCY, AnalysisResult, Meta

logger = setup_logger(__name__)

DEMO_CSV = """date,description,amount
2026-01-01,STARBUCKS,-190
2026-01-01,GRAB RIDE,-240
2026-01-02,NETFLIX,-549
2026-01-03,SALARY,45000
2026-01-03,SHOPEE,-1299
2026-01-10,MERALCO BILL,-2150
2026-01-15,NETFLIX,-549
2026-01-18,FOODPANDA,-420
2026-01-18,FOODPANDA,-390
2026-01-20,SM SUPERMARKET,-2380"""


class AnalysisService:
    """Stateless service turning CSV exports into spending analyses."""

    def analyze_csv_text(self, csv_text: str) -> AnalysisResult:
        """
        Analyze a CSV export of bank or card transactions.

        Rows that cannot be normalized are dropped; an empty export yields
        an empty analysis.

        Args:
            csv_text: Raw CSV text, first row is the header

        Returns:
            AnalysisResult for the whole batch

        Raises:
            ParsingError: If the CSV structure is malformed
        """
        rows = parse_csv_text(csv_text)
        headers = list(rows[0].keys()) if rows else []

        columns = detect_columns(headers)
        normalized = normalize_rows(rows, headers, columns)
        transactions, interpretation = interpret_signs(normalized)

        result = AnalysisResult(
            meta=Meta(
                rows=len(transactions),
                currency=CURRENCY,
                detected=columns,
                interpretation=interpretation,
            ),
            summary=compute_summary(transactions),
            by_category=spend_by_category(transactions),
            daily_out=spend_by_day(transactions),
            top_merchants=top_merchants(transactions),
            anomalies=detect_anomalies(transactions),
            recurring=detect_recurring(transactions),
            transactions=transactions,
        )

        logger.info(
            f"Analysis complete: {len(transactions)} transactions, "
            f"interpretation={interpretation}, "
            f"in={result.summary.total_in:,.2f}, out={result.summary.total_out:,.2f}"
        )

        return result

    def analyze_demo(self) -> AnalysisResult:
        """Analyze the built-in sample export."""
        return self.analyze_csv_text(DEMO_CSV)
