"""
ATIA Indicator Data Models

Canonical in-memory records for threat indicators, per-source verdicts,
service health and indicator history. Records are only ever built from
service payloads and are immutable once parsed.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from atia.errors import ShapeError


class IndicatorKind(str, Enum):
    """Kinds of indicator the aggregation service analyzes."""

    IP = "ip"
    DOMAIN = "domain"
    HASH = "hash"
    URL = "url"

    @classmethod
    def parse(cls, value: Any) -> "IndicatorKind":
        """Parse a kind from a string, raising ShapeError if unknown."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ShapeError(f"indicator type must be a string, got {type(value).__name__}")
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ShapeError(f"unknown indicator type: {value!r}") from None


# =============================================================================
# Field helpers
# =============================================================================


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _to_float(value: int | float, name: str) -> float:
    try:
        return float(value)
    except OverflowError:
        raise ShapeError(f"field '{name}' is out of range") from None


def _first_present(data: dict[str, Any], *keys: str) -> Any:
    """Get the first key present in data (snake_case first, then camelCase)."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return None


def _require_str(data: dict[str, Any], *keys: str, non_empty: bool = False) -> str:
    value = _first_present(data, *keys)
    if value is None:
        raise ShapeError(f"missing required field '{keys[0]}'")
    if not isinstance(value, str):
        raise ShapeError(f"field '{keys[0]}' must be a string")
    if non_empty and not value.strip():
        raise ShapeError(f"field '{keys[0]}' must not be empty")
    return value


def _require_number(data: dict[str, Any], *keys: str) -> float:
    value = _first_present(data, *keys)
    if value is None:
        raise ShapeError(f"missing required field '{keys[0]}'")
    if not _is_number(value):
        raise ShapeError(f"field '{keys[0]}' must be a number")
    return _to_float(value, keys[0])


def _optional_str(data: dict[str, Any], *keys: str) -> str:
    value = _first_present(data, *keys)
    return value if isinstance(value, str) else ""


def _optional_mapping(data: dict[str, Any], *keys: str) -> dict[str, Any]:
    value = _first_present(data, *keys)
    return dict(value) if isinstance(value, dict) else {}


def _dedupe_tags(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    seen: dict[str, None] = {}
    for tag in value:
        if isinstance(tag, str) and tag not in seen:
            seen[tag] = None
    return tuple(seen)


# =============================================================================
# Records
# =============================================================================


@dataclass(frozen=True)
class SourceVerdict:
    """A single intelligence source's opinion on an indicator."""

    name: str
    verdict: str
    score: float = 0.0
    details: dict[str, Any] = field(default_factory=dict, compare=False)
    timestamp: str = ""

    @classmethod
    def from_payload(cls, data: Any) -> "SourceVerdict":
        if not isinstance(data, dict):
            raise ShapeError("source entry must be an object")
        score = _first_present(data, "score")
        if score is not None and not _is_number(score):
            raise ShapeError("source field 'score' must be a number")
        return cls(
            name=_optional_str(data, "name"),
            verdict=_optional_str(data, "verdict"),
            score=_to_float(score, "score") if score is not None else 0.0,
            details=_optional_mapping(data, "details"),
            timestamp=_optional_str(data, "timestamp"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "name": self.name,
            "verdict": self.verdict,
            "score": self.score,
            "details": self.details,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class Indicator:
    """
    A threat indicator as reported by the aggregation service.

    Identity is the service-assigned id, falling back to the raw
    indicator string when no id is present.
    """

    indicator: str
    kind: IndicatorKind
    risk_score: float
    reputation: str
    sources: tuple[SourceVerdict, ...] = ()
    id: str = ""
    first_seen: str = ""
    last_updated: str = ""
    tags: tuple[str, ...] = ()
    metadata: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def identity(self) -> str:
        """Stable key across polling cycles."""
        return self.id or self.indicator

    @property
    def sources_count(self) -> int:
        """Number of sources, always derived from the sources list."""
        return len(self.sources)

    @property
    def malicious_votes(self) -> int:
        """Number of sources that judged the indicator malicious."""
        return sum(1 for s in self.sources if s.verdict == "malicious")

    @property
    def has_valid_score(self) -> bool:
        """Check whether the score lies in the expected 0-100 range."""
        return not math.isnan(self.risk_score) and 0.0 <= self.risk_score <= 100.0

    @classmethod
    def from_payload(cls, data: Any) -> "Indicator":
        """
        Parse a service record into an Indicator.

        Args:
            data: Decoded JSON object for one indicator

        Returns:
            Parsed Indicator

        Raises:
            ShapeError: If a required field is missing or has the wrong type
        """
        if not isinstance(data, dict):
            raise ShapeError(f"indicator record must be an object, got {type(data).__name__}")

        value = _require_str(data, "indicator", non_empty=True)
        kind_value = _first_present(data, "type", "kind")
        if kind_value is None:
            raise ShapeError("missing required field 'type'")

        raw_sources = _first_present(data, "sources")
        if raw_sources is not None and not isinstance(raw_sources, list):
            raise ShapeError("field 'sources' must be a list")

        record_id = _first_present(data, "id", "_id")

        return cls(
            indicator=value,
            kind=IndicatorKind.parse(kind_value),
            risk_score=_require_number(data, "risk_score", "riskScore"),
            reputation=_require_str(data, "reputation"),
            sources=tuple(SourceVerdict.from_payload(s) for s in raw_sources or []),
            id=str(record_id) if record_id is not None else "",
            first_seen=_optional_str(data, "first_seen", "firstSeen"),
            last_updated=_optional_str(data, "last_updated", "lastUpdated"),
            tags=_dedupe_tags(_first_present(data, "tags")),
            metadata=_optional_mapping(data, "metadata"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary using the service's field names."""
        return {
            "id": self.id,
            "indicator": self.indicator,
            "type": self.kind.value,
            "risk_score": self.risk_score,
            "reputation": self.reputation,
            "sources": [s.to_dict() for s in self.sources],
            "first_seen": self.first_seen,
            "last_updated": self.last_updated,
            "tags": list(self.tags),
            "metadata": self.metadata,
        }


@dataclass(frozen=True)
class HealthStatus:
    """Health report of the aggregation service."""

    service_name: str
    status: str

    @property
    def is_healthy(self) -> bool:
        """Only an exact 'healthy' counts; anything else is degraded."""
        return self.status == "healthy"

    @classmethod
    def from_payload(cls, data: Any) -> "HealthStatus":
        if not isinstance(data, dict):
            raise ShapeError("health response must be an object")
        return cls(
            service_name=_optional_str(data, "serviceName", "service_name", "service"),
            status=_require_str(data, "status"),
        )


@dataclass(frozen=True)
class IndicatorHistory:
    """Past analysis records of one indicator, oldest first as returned."""

    indicator: str
    history: tuple[Indicator, ...] = ()

    @classmethod
    def from_payload(cls, data: Any) -> "IndicatorHistory":
        if not isinstance(data, dict):
            raise ShapeError("history response must be an object")
        raw_history = data.get("history")
        if raw_history is None:
            raw_history = []
        if not isinstance(raw_history, list):
            raise ShapeError("field 'history' must be a list")
        return cls(
            indicator=_optional_str(data, "indicator"),
            history=tuple(Indicator.from_payload(item) for item in raw_history),
        )
