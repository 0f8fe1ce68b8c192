"""
ATIA Submission Controller

Validates and sends new analysis requests. A successful submission does
not touch any local snapshot; it asks the synchronizer to refresh the
threats list, and the new indicator becomes visible through that refresh.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

import structlog

from atia.errors import DashboardError, ErrorKind, ValidationError, describe_error
from atia.intel.models import Indicator, IndicatorKind

logger = structlog.get_logger(__name__)

FALLBACK_FAILURE_MESSAGE = "Failed to analyze indicator"


class SubmissionPhase(Enum):
    """Submission lifecycle phase."""

    IDLE = "idle"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class SubmissionState:
    """Current state of the submission form."""

    phase: SubmissionPhase = SubmissionPhase.IDLE
    input_value: str = ""
    kind: IndicatorKind = IndicatorKind.IP
    message: str | None = None
    error_kind: ErrorKind | None = None
    result: Indicator | None = None

    @property
    def in_flight(self) -> bool:
        return self.phase in (SubmissionPhase.VALIDATING, SubmissionPhase.SUBMITTING)

    @property
    def succeeded(self) -> bool:
        return self.phase is SubmissionPhase.SUCCEEDED

    @property
    def failed(self) -> bool:
        return self.phase is SubmissionPhase.FAILED


class SubmissionController:
    """
    Drives one analysis form.

    Terminal phases (succeeded, failed) persist until the next submit.
    """

    def __init__(self, client: Any, synchronizer: Any):
        """
        Initialize the controller.

        Args:
            client: Service client exposing submit_for_analysis()
            synchronizer: Synchronizer exposing request_refresh()
        """
        self.client = client
        self.synchronizer = synchronizer
        self._state = SubmissionState()

    @property
    def state(self) -> SubmissionState:
        return self._state

    def set_input(self, value: str) -> None:
        """Update the typed indicator value."""
        self._state = replace(self._state, input_value=value)

    def set_kind(self, kind: IndicatorKind | str) -> None:
        """Update the selected indicator kind."""
        self._state = replace(self._state, kind=IndicatorKind(kind))

    async def submit(self) -> SubmissionState:
        """
        Validate and submit the current input.

        Never raises; the outcome is recorded in the returned state.
        """
        if self._state.in_flight:
            logger.debug("submission_ignored", reason="in_flight")
            return self._state

        self._state = replace(
            self._state,
            phase=SubmissionPhase.VALIDATING,
            message=None,
            error_kind=None,
            result=None,
        )

        value = self._state.input_value.strip()
        kind = self._state.kind
        if not value:
            return self._fail(ValidationError("Please enter an indicator"))

        self._state = replace(self._state, phase=SubmissionPhase.SUBMITTING)

        try:
            result = await self.client.submit_for_analysis(value, kind)
        except DashboardError as e:
            return self._fail(e)
        except Exception as e:
            logger.error("submission_unexpected_error", indicator=value, error=str(e), exc_info=True)
            return self._fail(e)

        self._state = replace(
            self._state,
            phase=SubmissionPhase.SUCCEEDED,
            input_value="",
            message=f"Analysis completed for {value}",
            result=result,
        )
        logger.info("submission_succeeded", indicator=value, kind=kind.value)

        self.synchronizer.request_refresh()
        return self._state

    def _fail(self, error: Exception) -> SubmissionState:
        kind = error.kind if isinstance(error, DashboardError) else None
        logger.warning(
            "submission_failed",
            error_kind=kind.value if kind else "unknown",
            error=str(error),
        )
        self._state = replace(
            self._state,
            phase=SubmissionPhase.FAILED,
            message=describe_error(error, fallback=FALLBACK_FAILURE_MESSAGE),
            error_kind=kind,
        )
        return self._state
