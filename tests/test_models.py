"""
Tests for the ATIA indicator models.
"""

import pytest

from atia.errors import ErrorKind, ShapeError
from atia.intel.models import HealthStatus, Indicator, IndicatorHistory, IndicatorKind


class TestIndicatorParsing:
    """Tests for Indicator.from_payload."""

    def test_parses_full_record(self, indicator_payload):
        """Should map every service field onto the model."""
        threat = Indicator.from_payload(indicator_payload)

        assert threat.indicator == "evil.com"
        assert threat.kind is IndicatorKind.DOMAIN
        assert threat.risk_score == 85.0
        assert threat.reputation == "malicious"
        assert threat.id == "65f1c0ffee"
        assert threat.first_seen == "2024-05-01T10:00:00Z"
        assert [s.name for s in threat.sources] == ["VirusTotal", "OTX"]
        assert threat.sources[0].details == {"malicious": 12, "total": 90}

    def test_accepts_camel_case_keys(self):
        """riskScore and kind are accepted alongside the snake_case keys."""
        threat = Indicator.from_payload({
            "indicator": "1.2.3.4",
            "kind": "ip",
            "riskScore": 12,
            "reputation": "clean",
        })

        assert threat.kind is IndicatorKind.IP
        assert threat.risk_score == 12.0

    def test_optional_fields_default_empty(self):
        """Absent optional fields parse to empty values."""
        threat = Indicator.from_payload({
            "indicator": "d41d8cd98f00b204e9800998ecf8427e",
            "type": "hash",
            "risk_score": 0,
            "reputation": "unknown",
        })

        assert threat.sources == ()
        assert threat.tags == ()
        assert threat.id == ""
        assert threat.first_seen == ""
        assert threat.metadata == {}

    def test_tags_deduplicated_in_order(self, indicator_payload):
        """Duplicate tags are dropped, first occurrence wins."""
        threat = Indicator.from_payload(indicator_payload)
        assert threat.tags == ("phishing", "c2")

    def test_sources_count_matches_sources(self, indicator_payload):
        """Source count and malicious votes derive from the sources list."""
        threat = Indicator.from_payload(indicator_payload)
        assert threat.sources_count == len(threat.sources) == 2
        assert threat.malicious_votes == 1

    def test_identity_falls_back_to_indicator(self, make_payload):
        """Identity is the id when present, else the indicator value."""
        with_id = Indicator.from_payload(make_payload(id="abc"))
        without_id = Indicator.from_payload(make_payload(id=None))

        assert with_id.identity == "abc"
        assert without_id.identity == "evil.com"

    @pytest.mark.parametrize("missing", ["indicator", "type", "risk_score", "reputation"])
    def test_missing_required_field(self, missing, make_payload):
        """Each required field is enforced."""
        payload = make_payload()
        del payload[missing]

        with pytest.raises(ShapeError) as exc_info:
            Indicator.from_payload(payload)
        assert exc_info.value.kind is ErrorKind.SHAPE

    @pytest.mark.parametrize(
        "overrides",
        [
            {"risk_score": "85"},
            {"risk_score": True},
            {"reputation": 3},
            {"indicator": ""},
            {"indicator": 42},
            {"type": "email"},
            {"sources": "VirusTotal"},
            {"sources": ["VirusTotal"]},
        ],
    )
    def test_wrong_types_rejected(self, overrides, make_payload):
        """Badly typed fields fail with a shape error."""
        with pytest.raises(ShapeError):
            Indicator.from_payload(make_payload(**overrides))

    def test_non_object_rejected(self):
        """A record must be a JSON object."""
        with pytest.raises(ShapeError):
            Indicator.from_payload(["evil.com"])

    def test_out_of_range_score_tolerated(self, make_payload):
        """Scores above 100 parse but are flagged as invalid."""
        threat = Indicator.from_payload(make_payload(risk_score=140))
        assert threat.risk_score == 140.0
        assert threat.has_valid_score is False

    @pytest.mark.parametrize("field", ["risk_score", "riskScore"])
    def test_huge_integer_score_rejected(self, field, make_payload):
        """Integers too large for a float fail as shape errors."""
        payload = make_payload()
        del payload["risk_score"]
        payload[field] = 10**400

        with pytest.raises(ShapeError, match="out of range"):
            Indicator.from_payload(payload)

    def test_huge_integer_source_score_rejected(self, make_payload):
        """Source scores get the same range check."""
        payload = make_payload()
        payload["sources"][0]["score"] = -(10**400)

        with pytest.raises(ShapeError):
            Indicator.from_payload(payload)

    def test_models_are_immutable(self, indicator_payload):
        """Parsed records cannot be mutated."""
        threat = Indicator.from_payload(indicator_payload)
        with pytest.raises(AttributeError):
            threat.risk_score = 10.0

    def test_to_dict_uses_service_field_names(self, indicator_payload):
        """Serialization uses the service field names."""
        data = Indicator.from_payload(indicator_payload).to_dict()

        assert data["type"] == "domain"
        assert data["risk_score"] == 85.0
        assert data["tags"] == ["phishing", "c2"]


class TestHealthStatus:
    """Tests for HealthStatus parsing."""

    def test_backend_shape(self):
        """The backend reports its name under 'service'."""
        health = HealthStatus.from_payload({"status": "healthy", "service": "ATIA Backend"})
        assert health.service_name == "ATIA Backend"
        assert health.is_healthy

    def test_service_name_key(self):
        """serviceName is accepted as the name key."""
        health = HealthStatus.from_payload({"status": "degraded", "serviceName": "atia"})
        assert health.service_name == "atia"
        assert not health.is_healthy

    def test_only_exact_healthy_counts(self):
        """Only the exact status 'healthy' is healthy."""
        assert not HealthStatus("atia", "Healthy").is_healthy
        assert not HealthStatus("atia", "ok").is_healthy

    def test_missing_status(self):
        """A health body without status is malformed."""
        with pytest.raises(ShapeError):
            HealthStatus.from_payload({"service": "atia"})


class TestIndicatorHistory:
    """Tests for IndicatorHistory parsing."""

    def test_parses_history(self, make_payload):
        """Each history entry parses as an Indicator, in order."""
        history = IndicatorHistory.from_payload({
            "indicator": "evil.com",
            "history": [make_payload(risk_score=40), make_payload(risk_score=85)],
        })

        assert history.indicator == "evil.com"
        assert [r.risk_score for r in history.history] == [40.0, 85.0]

    def test_null_history_is_empty(self):
        """A null history list means no past analyses."""
        history = IndicatorHistory.from_payload({"indicator": "evil.com", "history": None})
        assert history.history == ()
