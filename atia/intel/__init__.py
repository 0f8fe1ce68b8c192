"""
ATIA Threat Intelligence Layer

Canonical indicator models, response normalization, risk classification
and the aggregation service client.
"""

from atia.intel.classifier import (
    Classification,
    ReputationTier,
    Severity,
    classify,
    classify_reputation,
    classify_severity,
)
from atia.intel.client import ThreatIntelClient
from atia.intel.events import build_threat_event
from atia.intel.models import (
    HealthStatus,
    Indicator,
    IndicatorHistory,
    IndicatorKind,
    SourceVerdict,
)

__all__ = [
    "Classification",
    "ReputationTier",
    "Severity",
    "classify",
    "classify_reputation",
    "classify_severity",
    "build_threat_event",
    "ThreatIntelClient",
    "HealthStatus",
    "Indicator",
    "IndicatorHistory",
    "IndicatorKind",
    "SourceVerdict",
]
