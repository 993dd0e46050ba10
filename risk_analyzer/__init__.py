"""
Customer Risk Analyzer
========================
Scores, validates and summarises an uploaded batch of customer records.

Pipeline (per record):
    1. Risk score        (1–100, Low / Medium / High)
    2. Name synthesis    (firstName + lastName)
    3. Validation        (id, name, email, country)

Batch Summary:
    total / valid / invalid counts, top 5 countries, valid customers in input order
"""

from .core.engine import analyze_customer_data
from .core.loader import load_records, RecordLoadError, UnsupportedFileTypeError
from .core.risk import analyze_risk_score
from .core.validator import validate_customer

__all__ = [
    "analyze_customer_data",
    "analyze_risk_score",
    "validate_customer",
    "load_records",
    "RecordLoadError",
    "UnsupportedFileTypeError",
]
