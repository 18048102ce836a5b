"""
Spending analytics over sign-corrected transactions.

All aggregates except the totals only look at outflows (negative amounts).
Money values are rounded to two decimals on output.
"""
import math
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from core.logger import setup_logger
from core.schema import (
    BiggestOut,
    CategoryTotal,
    DailyTotal,
    MerchantTotal,
    RecurringPayment,
    Summary,
    Transaction,
)

logger = setup_logger(__name__)

ANOMALY_PERCENTILE = 0.95
MAX_ANOMALIES = 10
MAX_TOP_MERCHANTS = 8

# Recurring payment heuristics
MAX_RECURRING = 8
MIN_RECURRING_OCCURRENCES = 3
AMOUNT_TOLERANCE = 0.15
MIN_SIMILAR_AMOUNTS = 3
MONTHLY_GAP_DAYS = (26, 35)
MIN_MONTHLY_GAPS = 2

CENT = Decimal("0.01")


def round_money(value: float) -> float:
    """Round to cents, ties away from zero."""
    return float(Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def days_between(start: str, end: str) -> int:
    """Whole days from one YYYY-MM-DD date to another."""
    return (date.fromisoformat(end) - date.fromisoformat(start)).days


def outflows(transactions: Iterable[Transaction]) -> List[Transaction]:
    return [txn for txn in transactions if txn.is_outflow]


def group_sum(
    transactions: Iterable[Transaction],
    key: Callable[[Transaction], str]
) -> Dict[str, Tuple[float, int]]:
    """
    Fold transactions into key -> (total magnitude, count).
    Keys keep first-seen order.
    """
    groups: Dict[str, Tuple[float, int]] = {}
    for txn in transactions:
        group = key(txn)
        total, count = groups.get(group, (0.0, 0))
        groups[group] = (total + txn.magnitude, count + 1)
    return groups


def percentile(values: Sequence[float], p: float) -> float:
    """
    Nearest-rank percentile without interpolation.

    Args:
        values: Values in any order
        p: Percentile as a fraction (0.95 for p95)

    Returns:
        sorted(values)[floor((n - 1) * p)], or 0 for no values
    """
    if not values:
        return 0.0
    ordered = sorted(values)
    return ordered[math.floor((len(ordered) - 1) * p)]


def compute_summary(transactions: Sequence[Transaction]) -> Summary:
    """
    Compute totals, date span, average daily spend and the biggest outflow.

    Args:
        transactions: Sign-corrected transactions

    Returns:
        Summary with money values rounded to two decimals
    """
    total_in = 0.0
    total_out = 0.0
    for txn in transactions:
        if txn.amount >= 0:
            total_in += txn.amount
        else:
            total_out += txn.magnitude

    dates = sorted(txn.date for txn in transactions)
    date_from = dates[0] if dates else None
    date_to = dates[-1] if dates else None

    day_count = max(1, days_between(date_from, date_to) + 1) if dates else 1

    # sorted() is stable, ties keep row order
    spend = sorted(outflows(transactions), key=lambda txn: txn.magnitude, reverse=True)
    biggest: Optional[BiggestOut] = None
    if spend:
        biggest = BiggestOut(
            amount=round_money(spend[0].magnitude),
            date=spend[0].date,
            description=spend[0].description,
        )

    return Summary(
        total_in=round_money(total_in),
        total_out=round_money(total_out),
        net=round_money(total_in - total_out),
        avg_daily_out=round_money(total_out / day_count),
        date_from=date_from,
        date_to=date_to,
        biggest_out=biggest,
    )


def detect_anomalies(transactions: Sequence[Transaction]) -> List[Transaction]:
    """
    Flag outflows at or above the 95th percentile of outflow magnitudes.

    Args:
        transactions: Sign-corrected transactions

    Returns:
        Up to 10 anomalous outflows, largest first
    """
    spend = outflows(transactions)
    threshold = percentile([txn.magnitude for txn in spend], ANOMALY_PERCENTILE)

    flagged = [txn for txn in spend if txn.magnitude >= threshold and txn.magnitude > 0]
    flagged.sort(key=lambda txn: txn.magnitude, reverse=True)

    logger.debug(f"Anomaly threshold p95={threshold:.2f}, flagged {len(flagged)} outflows")
    return flagged[:MAX_ANOMALIES]


def spend_by_category(transactions: Sequence[Transaction]) -> List[CategoryTotal]:
    groups = group_sum(outflows(transactions), lambda txn: txn.category)
    totals = [
        CategoryTotal(category=category, total_out=round_money(total), count=count)
        for category, (total, count) in groups.items()
    ]
    return sorted(totals, key=lambda item: item.total_out, reverse=True)


def spend_by_day(transactions: Sequence[Transaction]) -> List[DailyTotal]:
    groups = group_sum(outflows(transactions), lambda txn: txn.date)
    totals = [
        DailyTotal(date=day, total_out=round_money(total))
        for day, (total, _) in groups.items()
    ]
    return sorted(totals, key=lambda item: item.date)


def top_merchants(transactions: Sequence[Transaction]) -> List[MerchantTotal]:
    groups = group_sum(outflows(transactions), lambda txn: txn.merchant)
    totals = [
        MerchantTotal(merchant=merchant, total_out=round_money(total), count=count)
        for merchant, (total, count) in groups.items()
    ]
    return sorted(totals, key=lambda item: item.total_out, reverse=True)[:MAX_TOP_MERCHANTS]


def _recurring_candidate(merchant: str, history: Sequence[Transaction]) -> Optional[RecurringPayment]:
    """
    Check one merchant's outflows for a regular amount and a near-monthly cadence.

    Args:
        merchant: Merchant key
        history: Outflows for that merchant (at least three)

    Returns:
        RecurringPayment, or None if either check fails
    """
    ordered = sorted(history, key=lambda txn: txn.date)
    amounts = [txn.magnitude for txn in ordered]
    average = sum(amounts) / len(amounts)

    similar = [amount for amount in amounts if abs(amount - average) <= average * AMOUNT_TOLERANCE]
    if len(similar) < MIN_SIMILAR_AMOUNTS:
        return None

    gaps = [
        days_between(previous.date, current.date)
        for previous, current in zip(ordered, ordered[1:])
    ]
    low, high = MONTHLY_GAP_DAYS
    monthly = [gap for gap in gaps if low <= gap <= high]
    if len(monthly) < MIN_MONTHLY_GAPS:
        return None

    return RecurringPayment(
        merchant=merchant,
        approx_period_days=round_half_up(sum(gaps) / len(gaps)),
        count=len(ordered),
        average_amount=round_money(average),
        last_date=ordered[-1].date,
    )


def detect_recurring(transactions: Sequence[Transaction]) -> List[RecurringPayment]:
    """
    Find merchants that look like monthly subscriptions.

    A merchant qualifies with at least three outflows, at least three of
    them within 15% of the merchant's average amount, and at least two
    consecutive gaps of 26-35 days.

    Args:
        transactions: Sign-corrected transactions

    Returns:
        Up to 8 recurring payments, most occurrences first
    """
    by_merchant: Dict[str, List[Transaction]] = {}
    for txn in outflows(transactions):
        by_merchant.setdefault(txn.merchant, []).append(txn)

    candidates = []
    for merchant, history in by_merchant.items():
        if len(history) < MIN_RECURRING_OCCURRENCES:
            continue
        candidate = _recurring_candidate(merchant, history)
        if candidate is not None:
            candidates.append(candidate)

    logger.debug(f"Recurring payments detected: {[c.merchant for c in candidates]}")

    candidates.sort(key=lambda item: item.count, reverse=True)
    return candidates[:MAX_RECURRING]
