"""
ATIA Alert Event Builder

Builds the JSON envelope that downstream automation (the webhook
collaborator) consumes for each analyzed indicator. Delivery is not
done here.
"""

from datetime import datetime, timezone
from typing import Any

from atia.intel.classifier import classify_alert_severity
from atia.intel.models import Indicator

EVENT_THREAT_ANALYZED = "threat_analyzed"


def build_threat_event(
    indicator: Indicator,
    timestamp: datetime | None = None,
    event_type: str = EVENT_THREAT_ANALYZED,
) -> dict[str, Any]:
    """
    Build the alert envelope for an analyzed indicator.

    Args:
        indicator: The analyzed indicator
        timestamp: Event time (defaults to now, UTC)
        event_type: Event type tag

    Returns:
        JSON-serializable envelope dictionary
    """
    timestamp = timestamp or datetime.now(timezone.utc)
    return {
        "event_type": event_type,
        "timestamp": timestamp.isoformat(),
        "threat": {
            "indicator": indicator.indicator,
            "type": indicator.kind.value,
            "risk_score": indicator.risk_score,
            "reputation": indicator.reputation,
            "sources_count": indicator.sources_count,
            "malicious_vote": indicator.malicious_votes,
        },
        "risk_severity": classify_alert_severity(indicator.risk_score).value,
    }
