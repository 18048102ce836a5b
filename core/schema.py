"""
Pydantic models for the analysis result.

Attributes are snake_case in Python; the serialized JSON uses the camelCase
field names consumed by the dashboard (``totalIn``, ``byCategory``, ...).
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

CURRENCY = "PHP"

Category = Literal[
    "Income",
    "Food",
    "Transport",
    "Bills",
    "Shopping",
    "Groceries",
    "Entertainment",
    "Health",
    "Other",
]

Interpretation = Literal["signed", "allPositiveSpend"]


class CamelModel(BaseModel):
    """Base model serializing field names in camelCase."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ColumnMap(CamelModel):
    """Header names guessed for each semantic column (None when undetected)."""
    date: Optional[str] = None
    description: Optional[str] = None
    amount: Optional[str] = None
    debit: Optional[str] = None
    credit: Optional[str] = None

    @property
    def has_debit_or_credit(self) -> bool:
        return bool(self.debit or self.credit)


class Transaction(CamelModel):
    """A normalized transaction. Positive amounts are inflows, negative are outflows."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")
    description: str = Field(..., min_length=1)
    amount: float
    category: Category
    merchant: str

    @property
    def magnitude(self) -> float:
        return abs(self.amount)

    @property
    def is_outflow(self) -> bool:
        return self.amount < 0


class Meta(CamelModel):
    rows: int
    currency: str = CURRENCY
    detected: ColumnMap
    interpretation: Interpretation


class BiggestOut(CamelModel):
    amount: float
    date: str
    description: str


class Summary(CamelModel):
    total_in: float
    total_out: float
    net: float
    avg_daily_out: float
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    biggest_out: Optional[BiggestOut] = None


class CategoryTotal(CamelModel):
    category: Category
    total_out: float
    count: int


class DailyTotal(CamelModel):
    date: str
    total_out: float


class MerchantTotal(CamelModel):
    merchant: str
    total_out: float
    count: int


class RecurringPayment(CamelModel):
    """A merchant whose outflows look like a monthly subscription."""
    merchant: str
    approx_period_days: int
    count: int
    average_amount: float
    last_date: str


class AnalysisResult(CamelModel):
    """Aggregate root returned for one analyzed CSV."""
    meta: Meta
    summary: Summary
    by_category: List[CategoryTotal] = Field(default_factory=list)
    daily_out: List[DailyTotal] = Field(default_factory=list)
    top_merchants: List[MerchantTotal] = Field(default_factory=list)
    anomalies: List[Transaction] = Field(default_factory=list)
    recurring: List[RecurringPayment] = Field(default_factory=list)
    transactions: List[Transaction] = Field(default_factory=list)

    def to_response(self) -> dict:
        """Serialize to the JSON shape consumed by the dashboard; absent optionals are omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class AnalyzeRequest(BaseModel):
    """Inline JSON payload for the analyze endpoint."""
    csv: str = Field(..., min_length=1)
