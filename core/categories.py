"""
Keyword rules mapping transaction descriptions to spending categories.
Rules are evaluated in order and the first match wins.
"""
import re
from typing import List, Pattern, Tuple

# Only applied to inflows (amount > 0)
INCOME_PATTERN: Pattern[str] = re.compile(r"salary|payroll|income|transfer in|cash in")

CATEGORY_RULES: List[Tuple[str, Pattern[str]]] = [
    ("Food", re.compile(r"foodpanda|grabfood|restaurant|jollibee|mcdo|starbucks|coffee|milktea")),
    ("Transport", re.compile(r"grab|uber|angkas|joyride|gas|petrol|shell|caltex|toll")),
    ("Bills", re.compile(r"meralco|pldt|globe|converge|water|electric|internet|bill")),
    ("Shopping", re.compile(r"shopee|lazada|amazon|mall|department store")),
    ("Groceries", re.compile(r"supermarket|grocery|savemore|sm supermarket|waltermart")),
    ("Entertainment", re.compile(r"netflix|spotify|steam|disney|youtube")),
    ("Health", re.compile(r"pharmacy|hospital|clinic|drug")),
]

DEFAULT_CATEGORY = "Other"


def categorize(description: str, amount: float) -> str:
    """
    Categorize a transaction by its description.

    Args:
        description: Transaction description
        amount: Signed amount as read from the row

    Returns:
        Category name from the closed category set
    """
    text = description.lower()

    if amount > 0 and INCOME_PATTERN.search(text):
        return "Income"

    for category, pattern in CATEGORY_RULES:
        if pattern.search(text):
            return category

    return DEFAULT_CATEGORY
