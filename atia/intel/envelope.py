"""
ATIA Response Envelope Normalization

The aggregation service has answered with several envelope shapes over
time. All unwrapping happens here so the accepted shapes stay in one
auditable place.

Accepted record shapes (submit, get, history):
    {...record...}
    {"data": {...record...}}
    {"success": true, "data": {...record...}}

Accepted list shapes (recent threats):
    [...records...]
    {"data": [...records...]}
    null / {"data": null}          -> empty list

A body carrying an error field, or "success": false, is reported as a
failure even with a 2xx status.
"""

from typing import Any

from atia.errors import ProtocolError, ShapeError


def server_error_message(body: Any) -> str | None:
    """Extract the server-supplied error text from a body, if any."""
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if isinstance(error, str) and error.strip():
        return error
    if isinstance(error, dict):
        message = error.get("message")
        if isinstance(message, str) and message.strip():
            return message
    return None


def check_failure_envelope(body: Any) -> None:
    """Raise ProtocolError if a 2xx body reports a failure."""
    if not isinstance(body, dict):
        return
    message = server_error_message(body)
    if body.get("success") is False or (message and body.get("data") is None):
        raise ProtocolError(server_message=message)


def unwrap_record(body: Any) -> dict[str, Any]:
    """
    Unwrap a single-record response.

    Raises:
        ProtocolError: If the envelope reports a failure
        ShapeError: If no record object can be found
    """
    check_failure_envelope(body)
    if isinstance(body, dict):
        data = body.get("data")
        if isinstance(data, dict):
            return data
        if "data" in body and data is not None:
            raise ShapeError("'data' field must be an object")
        return body
    raise ShapeError(f"expected an object, got {type(body).__name__}")


def unwrap_list(body: Any) -> list[Any]:
    """
    Unwrap a list response.

    Raises:
        ProtocolError: If the envelope reports a failure
        ShapeError: If no list can be found
    """
    if body is None:
        return []
    if isinstance(body, list):
        return body
    check_failure_envelope(body)
    if isinstance(body, dict) and "data" in body:
        data = body["data"]
        if data is None:
            return []
        if isinstance(data, list):
            return data
        raise ShapeError("'data' field must be a list")
    raise ShapeError(f"expected a list, got {type(body).__name__}")
