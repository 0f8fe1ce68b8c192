"""
ATIA Threat Intelligence Service Client

Typed boundary to the remote aggregation service. Every operation either
returns canonical model objects or raises one of the classified dashboard
errors; raw httpx exceptions never leave this module.
"""

import asyncio
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from atia.config import settings
from atia.errors import (
    ProtocolError,
    ShapeError,
    TransportCause,
    TransportError,
    ValidationError,
)
from atia.intel.envelope import (
    check_failure_envelope,
    server_error_message,
    unwrap_list,
    unwrap_record,
)
from atia.intel.models import HealthStatus, Indicator, IndicatorHistory, IndicatorKind

logger = structlog.get_logger(__name__)

DEFAULT_LIST_LIMIT = 50


class ThreatIntelClient:
    """
    Client for the aggregation service REST API.

    Endpoints:
    - GET  /health
    - POST /api/v1/analyze
    - GET  /api/v1/threats?limit=N
    - GET  /api/v1/threats/{indicator}
    - GET  /api/v1/threats/{indicator}/history
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Service URL (defaults to the configured context URL)
            timeout: Per-request timeout in seconds (defaults to settings)
            transport: Optional httpx transport, used by tests
        """
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.request_timeout_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the underlying HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={"Accept": "application/json"},
                timeout=float(self.timeout),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ThreatIntelClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # =========================================================================
    # Transport
    # =========================================================================

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """
        Send a request and decode the JSON body.

        Raises:
            TransportError: No response was received
            ProtocolError: Non-2xx status, or a body that is not JSON
        """
        endpoint = f"{self.base_url}{path}"

        try:
            # httpx applies the timeout per phase; wait_for bounds the whole exchange
            response = await asyncio.wait_for(
                self._get_client().request(method, path, params=params, json=json),
                timeout=self.timeout,
            )
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            logger.warning("threat_intel_timeout", endpoint=endpoint, timeout=self.timeout)
            raise TransportError(endpoint, TransportCause.TIMEOUT, str(e)) from e
        except httpx.RequestError as e:
            logger.error("threat_intel_connection_error", endpoint=endpoint, error=str(e))
            raise TransportError(endpoint, TransportCause.CONNECTION, str(e)) from e

        if not response.is_success:
            try:
                body = response.json()
            except ValueError:
                body = None
            logger.warning(
                "threat_intel_http_error",
                endpoint=endpoint,
                status=response.status_code,
            )
            raise ProtocolError(
                status_code=response.status_code,
                reason=response.reason_phrase,
                server_message=server_error_message(body),
            )

        try:
            return response.json()
        except ValueError as e:
            logger.warning("threat_intel_malformed_body", endpoint=endpoint, error=str(e))
            raise ProtocolError(
                message=f"Malformed response body from {endpoint}",
                status_code=response.status_code,
            ) from e

    def _log_shape_error(self, operation: str, error: ShapeError) -> None:
        logger.warning(
            "threat_intel_shape_error",
            operation=operation,
            error_kind=error.kind.value,
            error=error.message,
        )

    # =========================================================================
    # Operations
    # =========================================================================

    async def check_health(self) -> HealthStatus:
        """
        Check service health.

        Returns:
            HealthStatus as reported by the service
        """
        body = await self._request("GET", "/health")
        check_failure_envelope(body)
        try:
            return HealthStatus.from_payload(body)
        except ShapeError as e:
            self._log_shape_error("check_health", e)
            raise

    async def submit_for_analysis(
        self,
        indicator: str,
        kind: IndicatorKind | str,
    ) -> Indicator:
        """
        Submit an indicator for analysis.

        Args:
            indicator: Raw indicator value (surrounding whitespace is dropped)
            kind: Indicator kind

        Returns:
            The analyzed Indicator
        """
        value = indicator.strip() if isinstance(indicator, str) else ""
        if not value:
            raise ValidationError("Please enter an indicator")
        try:
            kind = IndicatorKind.parse(kind)
        except ShapeError:
            raise ValidationError(f"Unsupported indicator type: {kind}") from None

        logger.info("threat_analysis_submitting", indicator=value, kind=kind.value)

        body = await self._request(
            "POST",
            "/api/v1/analyze",
            json={"indicator": value, "type": kind.value},
        )
        try:
            result = Indicator.from_payload(unwrap_record(body))
        except ShapeError as e:
            self._log_shape_error("submit_for_analysis", e)
            raise

        logger.info(
            "threat_analysis_complete",
            indicator=result.indicator,
            risk_score=result.risk_score,
            reputation=result.reputation,
        )
        return result

    async def list_recent(self, limit: int = DEFAULT_LIST_LIMIT) -> tuple[Indicator, ...]:
        """
        List recently analyzed indicators.

        Args:
            limit: Maximum number of records (positive integer)

        Returns:
            Indicators in the order the service returned them
        """
        if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
            raise ValidationError(f"limit must be a positive integer, got {limit!r}")

        body = await self._request("GET", "/api/v1/threats", params={"limit": limit})
        try:
            items = unwrap_list(body)
            threats = []
            for index, item in enumerate(items):
                try:
                    threats.append(Indicator.from_payload(item))
                except ShapeError as e:
                    raise ShapeError(f"record {index}: {e.message}") from e
        except ShapeError as e:
            self._log_shape_error("list_recent", e)
            raise

        logger.debug("threats_listed", count=len(threats), limit=limit)
        return tuple(threats)

    async def get_threat(self, indicator: str) -> Indicator:
        """Fetch the stored record for one indicator."""
        value = indicator.strip() if isinstance(indicator, str) else ""
        if not value:
            raise ValidationError("Please enter an indicator")

        body = await self._request("GET", f"/api/v1/threats/{quote(value, safe='')}")
        try:
            return Indicator.from_payload(unwrap_record(body))
        except ShapeError as e:
            self._log_shape_error("get_threat", e)
            raise

    async def get_history(self, indicator: str) -> IndicatorHistory:
        """Fetch the analysis history of one indicator."""
        value = indicator.strip() if isinstance(indicator, str) else ""
        if not value:
            raise ValidationError("Please enter an indicator")

        body = await self._request(
            "GET",
            f"/api/v1/threats/{quote(value, safe='')}/history",
        )
        try:
            return IndicatorHistory.from_payload(unwrap_record(body))
        except ShapeError as e:
            self._log_shape_error("get_history", e)
            raise

