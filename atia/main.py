"""
ATIA Dashboard - Session Wiring

Logging configuration and the DashboardSession that connects the service
client, synchronizer, submission controller and view state.
"""

import logging
from typing import Callable

import structlog

from atia.config import settings
from atia.intel.client import ThreatIntelClient
from atia.intel.models import Indicator, IndicatorKind
from atia.sync.scheduler import Scheduler
from atia.sync.submission import SubmissionController, SubmissionState
from atia.sync.synchronizer import Synchronizer
from atia.ui.view_state import NoticeLevel, ViewStateController

# =============================================================================
# Logging Configuration
# =============================================================================


def configure_logging() -> None:
    """Configure structured logging with structlog."""
    # Map log level string to logging module level
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    # Determine processors based on log format
    if settings.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


logger = structlog.get_logger(__name__)


# =============================================================================
# Dashboard Session
# =============================================================================


class DashboardSession:
    """
    One dashboard session.

    Each component has a single owner here: the synchronizer owns the
    snapshots, the submission controller owns the form, and the view
    controller owns tab, selection and notice.
    """

    def __init__(
        self,
        client: ThreatIntelClient | None = None,
        scheduler: Scheduler | None = None,
    ):
        self.client = client or ThreatIntelClient()
        self.synchronizer = Synchronizer(self.client, scheduler=scheduler)
        self.submission = SubmissionController(self.client, self.synchronizer)
        self.view = ViewStateController()
        self._unsubscribers: list[Callable[[], None]] = []

    @property
    def is_attached(self) -> bool:
        return bool(self._unsubscribers)

    def attach(self, on_change: Callable[[], None]) -> None:
        """Start polling both streams, calling on_change after each update."""
        if self.is_attached:
            return
        logger.info("dashboard_attached", base_url=self.client.base_url)
        self._unsubscribers = [
            self.synchronizer.subscribe_health(lambda _state: on_change()),
            self.synchronizer.subscribe_threats(lambda _state: on_change()),
        ]

    def detach(self) -> None:
        """Stop polling; no timers remain afterwards."""
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        logger.info("dashboard_detached")

    async def submit(self, value: str, kind: IndicatorKind | str) -> SubmissionState:
        """Submit an indicator and mirror the outcome as a notice."""
        self.submission.set_kind(kind)
        self.submission.set_input(value)
        state = await self.submission.submit()
        if state.message:
            level = NoticeLevel.SUCCESS if state.succeeded else NoticeLevel.ERROR
            self.view.show_notice(level, state.message)
        return state

    def open_indicator(self, identity: str) -> Indicator | None:
        """Open the detail overlay for an indicator in the current snapshot."""
        for threat in self.synchronizer.threats_snapshot:
            if threat.identity == identity or threat.indicator == identity:
                self.view.select_indicator(threat)
                return threat
        return None

    async def close(self) -> None:
        self.detach()
        await self.synchronizer.wait_idle()
        await self.client.close()
