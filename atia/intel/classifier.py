"""
ATIA Risk Classifier

Maps raw risk scores and reputation strings to presentation tiers.
All functions are pure and memoized.
"""

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache

from atia.intel.models import Indicator


class Severity(str, Enum):
    """Severity tier derived from the risk score."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ReputationTier(str, Enum):
    """Reputation tier derived from the reputation string."""

    MALICIOUS = "malicious"
    SUSPICIOUS = "suspicious"
    NEUTRAL = "neutral"


class AlertSeverity(str, Enum):
    """Severity used in the outbound alert envelope."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# Cut points are strict: a score equal to a threshold stays in the lower tier
HIGH_THRESHOLD = 70.0
MEDIUM_THRESHOLD = 40.0

ALERT_CRITICAL_THRESHOLD = 70.0
ALERT_HIGH_THRESHOLD = 50.0
ALERT_MEDIUM_THRESHOLD = 30.0


@dataclass(frozen=True)
class Classification:
    """Presentation categories for one indicator."""

    severity: Severity
    reputation: ReputationTier


@lru_cache(maxsize=1024)
def classify_severity(score: float) -> Severity:
    """
    Classify a risk score.

    Out-of-range scores land in the nearest boundary tier; NaN is low.
    """
    if score > HIGH_THRESHOLD:
        return Severity.HIGH
    if score > MEDIUM_THRESHOLD:
        return Severity.MEDIUM
    return Severity.LOW


@lru_cache(maxsize=256)
def classify_reputation(reputation: str | None) -> ReputationTier:
    """Classify a reputation string by exact match."""
    if reputation == "malicious":
        return ReputationTier.MALICIOUS
    if reputation == "suspicious":
        return ReputationTier.SUSPICIOUS
    return ReputationTier.NEUTRAL


def classify(indicator: Indicator) -> Classification:
    """Classify an indicator for rendering."""
    return Classification(
        severity=classify_severity(indicator.risk_score),
        reputation=classify_reputation(indicator.reputation),
    )


@lru_cache(maxsize=1024)
def classify_alert_severity(score: float) -> AlertSeverity:
    """Classify a risk score on the four-level alert scale."""
    if score > ALERT_CRITICAL_THRESHOLD:
        return AlertSeverity.CRITICAL
    if score > ALERT_HIGH_THRESHOLD:
        return AlertSeverity.HIGH
    if score > ALERT_MEDIUM_THRESHOLD:
        return AlertSeverity.MEDIUM
    return AlertSeverity.LOW
