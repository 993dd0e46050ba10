"""
Pydantic models for customer records, risk assessments and batch analysis results.
Field names serialise in camelCase so responses line up with the uploaded records.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from risk_analyzer.config import FIBONACCI_INPUT, FIBONACCI_MAX_INPUT


class RiskCategory(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RiskAssessment(CamelModel):
    """Score and category computed for a single raw record."""

    risk_score: int = Field(..., ge=1, le=100)
    risk_category: RiskCategory
    warnings: list[str] = Field(default_factory=list, description="Numeric fields that could not be parsed")


class ValidationResult(CamelModel):
    is_valid: bool
    errors: list[str] = Field(default_factory=list)


class Customer(CamelModel):
    """A record that passed validation. Immutable once built."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    name: str
    email: str
    country: str
    account_balance: str = Field(..., description="String-encoded integer balance")
    suspicious_activity_score: str = Field(..., description="String-encoded float in [0, 1]")
    has_previous_fraud: bool = False
    location_mismatch: bool = False
    is_account_verified: bool = False
    risk_score: int = Field(..., ge=1, le=100)
    risk_category: RiskCategory


class CountryCount(CamelModel):
    country: str
    count: int = Field(..., ge=1)


class RejectedRecord(CamelModel):
    """Position of a dropped record in the input array and why it was dropped."""

    index: int = Field(..., ge=0)
    errors: list[str]


class AnalysisSummary(CamelModel):
    total_records: int = Field(..., ge=0)
    valid_records: int = Field(..., ge=0)
    invalid_records: int = Field(..., ge=0)
    top_countries: list[CountryCount] = Field(default_factory=list)
    rejected_records: list[RejectedRecord] = Field(default_factory=list)


class AnalysisResult(AnalysisSummary):
    """Aggregate over one uploaded batch."""

    customers: list[Customer] = Field(default_factory=list)

    def summary(self) -> AnalysisSummary:
        return AnalysisSummary(**self.model_dump(exclude={"customers"}))


class CustomerPage(CamelModel):
    page: int = Field(..., ge=1)
    page_size: int = Field(..., ge=1)
    total_items: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=0)
    customers: list[Customer] = Field(default_factory=list)


class FibonacciRequest(CamelModel):
    n: int = Field(FIBONACCI_INPUT, ge=0, le=FIBONACCI_MAX_INPUT, description="Fibonacci index to compute")
    timeout_seconds: Optional[float] = Field(None, gt=0, description="Overrides the worker default timeout")

    model_config = ConfigDict(extra="forbid")


class FibonacciResponse(CamelModel):
    n: int
    result: int
    elapsed_seconds: float
