"""
Analysis Engine — main orchestrator for one uploaded batch.

This is the single entry point: analyze_customer_data(records)
It chains together, per record: score risk → synthesize name → validate → keep or reject.
Then over the kept customers: count countries → rank top countries.
"""

import json
import logging
from collections import Counter
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

from risk_analyzer.config import TOP_COUNTRIES_LIMIT
from risk_analyzer.core.models import (
    AnalysisResult,
    CountryCount,
    Customer,
    RejectedRecord,
    RiskAssessment,
)
from risk_analyzer.core.risk import analyze_risk_score, is_truthy
from risk_analyzer.core.validator import validate_customer

logger = logging.getLogger(__name__)

NOT_AN_OBJECT = "Record is not an object"


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value)


def synthesize_name(first_name: Any, last_name: Any) -> str:
    """Always two parts joined by one space. A missing part becomes an empty string."""
    return f"{_as_text(first_name)} {_as_text(last_name)}"


def build_candidate(record: Mapping[str, Any], assessment: RiskAssessment) -> dict:
    """Copy of the raw record with the synthesized name and risk fields merged in."""
    return {
        **record,
        "name": synthesize_name(record.get("firstName"), record.get("lastName")),
        "riskScore": assessment.risk_score,
        "riskCategory": assessment.risk_category,
    }


def _to_customer(candidate: Mapping[str, Any]) -> Customer:
    return Customer(
        id=candidate["id"],
        name=candidate["name"],
        email=candidate["email"],
        country=candidate["country"],
        account_balance=_as_text(candidate.get("accountBalance")),
        suspicious_activity_score=_as_text(candidate.get("suspiciousActivityScore")),
        has_previous_fraud=is_truthy(candidate.get("hasPreviousFraud")),
        location_mismatch=is_truthy(candidate.get("locationMismatch")),
        is_account_verified=is_truthy(candidate.get("isAccountVerified")),
        risk_score=candidate["riskScore"],
        risk_category=candidate["riskCategory"],
    )


def evaluate_record(index: int, record: Any) -> Union[Customer, RejectedRecord]:
    """Score and validate one raw record. Returns a Customer or the reasons it was dropped."""
    if not isinstance(record, Mapping):
        return RejectedRecord(index=index, errors=[NOT_AN_OBJECT])

    assessment = analyze_risk_score(record)
    if assessment.warnings:
        logger.debug("Record %d has unparseable numeric fields: %s", index, ", ".join(assessment.warnings))

    candidate = build_candidate(record, assessment)
    validation = validate_customer(candidate)
    if not validation.is_valid:
        return RejectedRecord(index=index, errors=validation.errors)

    return _to_customer(candidate)


def count_countries(customers: Iterable[Customer]) -> Mapping[str, int]:
    """Read-only country → count mapping, keys in first-seen order."""
    return MappingProxyType(dict(Counter(customer.country for customer in customers)))


def rank_countries(counts: Mapping[str, int], limit: int = TOP_COUNTRIES_LIMIT) -> list[CountryCount]:
    """Most frequent countries first. Ties keep first-seen order."""
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [CountryCount(country=country, count=count) for country, count in ranked[:limit]]


def analyze_customer_data(records: Sequence[Any], top_limit: Optional[int] = None) -> AnalysisResult:
    """
    Main entry point. Takes the raw parsed array, returns a complete AnalysisResult.

    Pipeline:
        1. evaluate_record()   → Customer or RejectedRecord, input order kept
        2. count_countries()   → country frequencies over valid customers
        3. rank_countries()    → top N {country, count} pairs
    """
    limit = TOP_COUNTRIES_LIMIT if top_limit is None else top_limit

    customers: list[Customer] = []
    rejected: list[RejectedRecord] = []

    for index, record in enumerate(records):
        outcome = evaluate_record(index, record)
        if isinstance(outcome, Customer):
            customers.append(outcome)
        else:
            rejected.append(outcome)
            logger.debug("Dropped record %d: %s", index, "; ".join(outcome.errors))

    total = len(records)
    top_countries = rank_countries(count_countries(customers), limit)

    logger.info("Analysed %d records: %d valid, %d invalid", total, len(customers), total - len(customers))

    return AnalysisResult(
        total_records=total,
        valid_records=len(customers),
        invalid_records=total - len(customers),
        top_countries=top_countries,
        customers=customers,
        rejected_records=rejected,
    )
