"""
Record Validator — checks a scored candidate record before it becomes a Customer.

Check Order:
    1 → id
    2 → name
    3 → email (presence, then format)
    4 → country

Every check runs; failures are collected in order rather than stopping at the first.
"""

import re
from typing import Any, Mapping

from risk_analyzer.core.models import ValidationResult

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

INVALID_EMAIL_FORMAT = "Invalid email format"

REQUIRED_FIELD_RULES = [
    {"field": "id", "error": "Missing or invalid id"},
    {"field": "name", "error": "Missing or invalid name"},
    {"field": "email", "error": "Missing or invalid email"},
    {"field": "country", "error": "Missing or invalid country"},
]


def is_valid_email(email: str) -> bool:
    return EMAIL_PATTERN.fullmatch(email) is not None


def _is_present_string(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def validate_customer(candidate: Mapping[str, Any]) -> ValidationResult:
    """
    Validate a candidate record (name and risk fields already attached).
    Returns a ValidationResult listing every failed check.
    """
    errors: list[str] = []

    for rule in REQUIRED_FIELD_RULES:
        field_name: str = rule["field"]
        value = candidate.get(field_name)

        if not _is_present_string(value):
            errors.append(rule["error"])
        elif field_name == "email" and not is_valid_email(value):
            errors.append(INVALID_EMAIL_FORMAT)

    return ValidationResult(is_valid=not errors, errors=errors)
