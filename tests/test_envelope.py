"""
Tests for response envelope normalization.
"""

import pytest

from atia.errors import ProtocolError, ShapeError
from atia.intel.envelope import server_error_message, unwrap_list, unwrap_record
from atia.intel.models import Indicator


class TestUnwrapRecord:
    """Tests for single-record envelopes."""

    def test_bare_and_wrapped_parse_identically(self, indicator_payload):
        """All record envelopes unwrap to the same record."""
        bare = Indicator.from_payload(unwrap_record(indicator_payload))
        wrapped = Indicator.from_payload(unwrap_record({"data": indicator_payload}))
        success = Indicator.from_payload(
            unwrap_record({"success": True, "data": indicator_payload})
        )

        assert bare == wrapped == success

    def test_failure_envelope_raises_protocol_error(self):
        """success: false raises with the server text."""
        with pytest.raises(ProtocolError) as exc_info:
            unwrap_record({"success": False, "error": "unsupported indicator type"})

        assert not isinstance(exc_info.value, ShapeError)
        assert exc_info.value.user_message == "unsupported indicator type"

    def test_error_field_without_data(self):
        """An error field with no data is a failure."""
        with pytest.raises(ProtocolError):
            unwrap_record({"error": "Threat not found"})

    def test_non_object_data_is_shape_error(self):
        """A non-object data field is a shape error."""
        with pytest.raises(ShapeError):
            unwrap_record({"data": ["evil.com"]})

    def test_non_object_body_is_shape_error(self):
        """A non-object body is a shape error."""
        with pytest.raises(ShapeError):
            unwrap_record("evil.com")


class TestUnwrapList:
    """Tests for list envelopes."""

    def test_bare_and_wrapped_parse_identically(self, make_payload):
        """All list envelopes unwrap to the same list."""
        records = [make_payload(), make_payload(id="2", indicator="8.8.8.8", type="ip")]

        bare = [Indicator.from_payload(r) for r in unwrap_list(records)]
        wrapped = [Indicator.from_payload(r) for r in unwrap_list({"data": records})]

        assert bare == wrapped
        assert [t.indicator for t in bare] == ["evil.com", "8.8.8.8"]

    @pytest.mark.parametrize("body", [None, [], {"data": None}, {"data": []}])
    def test_empty_shapes(self, body):
        """Null bodies and null data are empty lists."""
        assert unwrap_list(body) == []

    def test_failure_envelope(self):
        """List failures raise with the server text."""
        with pytest.raises(ProtocolError):
            unwrap_list({"error": "database unavailable"})

    @pytest.mark.parametrize("body", [{"data": {"indicator": "x"}}, {"threats": []}, "oops", 3])
    def test_unrecognized_shapes(self, body):
        """Anything else is a shape error."""
        with pytest.raises(ShapeError):
            unwrap_list(body)


class TestServerErrorMessage:
    """Tests for server error text extraction."""

    def test_string_error(self):
        """A string error field is the message."""
        assert server_error_message({"error": "boom"}) == "boom"

    def test_nested_error(self):
        """A nested error message is found."""
        assert server_error_message({"error": {"message": "boom"}}) == "boom"

    def test_absent(self):
        """No error field gives no message."""
        assert server_error_message({"status": "ok"}) is None
        assert server_error_message(None) is None
        assert server_error_message({"error": "  "}) is None
