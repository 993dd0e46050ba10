"""
Risk Scorer — computes a bounded 1–100 risk score and category for one raw record.

Scoring Logic:
    base                              → 1
    accountBalance (integer)          → +5 / +2 / +1 / +0 by threshold
    suspiciousActivityScore (float)   → + round(value × 100)
    hasPreviousFraud                  → +30
    locationMismatch                  → +10
    not isAccountVerified             → +10
    clamp                             → [1, 100]

Category Bands:
    67–100 → High
    34–66  → Medium
    1–33   → Low

Numeric fields are parsed leniently (longest numeric prefix). A field with no
numeric prefix contributes nothing and is reported in ``RiskAssessment.warnings``.
"""

import math
import re
from typing import Any, Mapping, Optional

from risk_analyzer.core.models import RiskAssessment, RiskCategory

MIN_SCORE = 1
MAX_SCORE = 100

# Evaluated top to bottom, first match wins. Any balance under 500,000 hits the
# first band, so the smaller increments are unreachable.
BALANCE_THRESHOLDS = [
    (500_000, 5),
    (300_000, 2),
    (100_000, 1),
]

FLAG_POINTS = {
    "hasPreviousFraud": 30,
    "locationMismatch": 10,
}
UNVERIFIED_POINTS = 10

HIGH_THRESHOLD = 67
MEDIUM_THRESHOLD = 34

_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))")


def parse_int(value: Any) -> Optional[int]:
    """Parse the leading integer of ``value``. Returns None when there is none."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return math.trunc(value) if math.isfinite(value) else None
    if isinstance(value, str):
        match = _INT_PREFIX.match(value)
        if match:
            return int(match.group(1))
    return None


def parse_float(value: Any) -> Optional[float]:
    """Parse the leading decimal number of ``value``. Returns None when there is none."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return None if math.isnan(number) else number
    if isinstance(value, str):
        match = _FLOAT_PREFIX.match(value)
        if match:
            return float(match.group(1))
    return None


def balance_points(balance: int) -> int:
    for threshold, points in BALANCE_THRESHOLDS:
        if balance < threshold:
            return points
    return 0


def activity_points(activity_score: float) -> float:
    """Scale to 0–100 and round half up. Infinite inputs pass through for the clamp."""
    scaled = activity_score * 100
    if not math.isfinite(scaled):
        return scaled
    return math.floor(scaled + 0.5)


def is_truthy(value: Any) -> bool:
    """Flag truthiness of the upload format: only None, false, 0, NaN and "" are unset. Empty lists and objects count as set."""
    if value is None or value is False or value == "":
        return False
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value != 0 and not math.isnan(value)
    return True


def flag_points(record: Mapping[str, Any]) -> int:
    points = 0
    for flag, value in FLAG_POINTS.items():
        if is_truthy(record.get(flag)):
            points += value
    if not is_truthy(record.get("isAccountVerified")):
        points += UNVERIFIED_POINTS
    return points


def clamp_score(score: float) -> int:
    return int(max(MIN_SCORE, min(MAX_SCORE, score)))


def categorize_risk(score: int) -> RiskCategory:
    if score >= HIGH_THRESHOLD:
        return RiskCategory.HIGH
    if score >= MEDIUM_THRESHOLD:
        return RiskCategory.MEDIUM
    return RiskCategory.LOW


def analyze_risk_score(record: Mapping[str, Any]) -> RiskAssessment:
    """Score one raw record. Never raises for malformed field values."""
    score: float = MIN_SCORE
    warnings: list[str] = []

    balance = parse_int(record.get("accountBalance"))
    if balance is None:
        warnings.append("accountBalance")
    else:
        score += balance_points(balance)

    activity = parse_float(record.get("suspiciousActivityScore"))
    if activity is None:
        warnings.append("suspiciousActivityScore")
    else:
        score += activity_points(activity)

    score += flag_points(record)

    final_score = clamp_score(score)
    return RiskAssessment(
        risk_score=final_score,
        risk_category=categorize_risk(final_score),
        warnings=warnings,
    )
