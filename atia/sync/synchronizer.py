"""
ATIA Synchronizer

Keeps local snapshots of the remote service current by polling two
independent streams:

- health: service status, every 30 seconds
- threats: recent indicators, every 60 seconds

Each stream allows at most one fetch in flight. A tick or refresh that
arrives while a fetch is outstanding is skipped, not queued, so snapshots
are always applied in the order their fetches started. A completed fetch
replaces the whole snapshot; a failed fetch keeps the previous snapshot
and raises the stream's error flag until the next success.
"""

import asyncio
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, TypeVar

import structlog

from atia.config import settings
from atia.errors import DashboardError, ErrorKind, describe_error
from atia.intel.models import HealthStatus, Indicator
from atia.sync.scheduler import AsyncioScheduler, Scheduler, TimerHandle

logger = structlog.get_logger(__name__)

T = TypeVar("T")

Listener = Callable[["StreamState[Any]"], None]


class StreamPhase(Enum):
    """Lifecycle phase of a polling stream."""

    IDLE = "idle"
    FETCHING = "fetching"
    SETTLED = "settled"
    FAILED = "failed"


@dataclass(frozen=True)
class StreamState(Generic[T]):
    """Latest known state of one stream."""

    phase: StreamPhase = StreamPhase.IDLE
    snapshot: T | None = None
    error: str | None = None
    error_kind: ErrorKind | None = None
    updated_at: datetime | None = None

    @property
    def is_fetching(self) -> bool:
        return self.phase is StreamPhase.FETCHING

    @property
    def has_error(self) -> bool:
        return self.error is not None

    @property
    def is_stale(self) -> bool:
        """A snapshot is held, but the most recent fetch failed."""
        return self.has_error and self.snapshot is not None


class PollingStream(Generic[T]):
    """
    One independently polled data source.

    Polling starts when the first listener subscribes and stops when
    the last one unsubscribes.
    """

    def __init__(
        self,
        name: str,
        fetch: Callable[[], Awaitable[T]],
        interval: float,
        scheduler: Scheduler | None = None,
    ):
        """
        Initialize the stream.

        Args:
            name: Stream name used in logs
            fetch: Coroutine function producing a full snapshot
            interval: Seconds between timer ticks
            scheduler: Timer source (defaults to the asyncio loop)
        """
        self.name = name
        self.interval = interval
        self._fetch = fetch
        self._scheduler = scheduler or AsyncioScheduler()
        self._state: StreamState[T] = StreamState()
        self._listeners: list[Listener] = []
        self._timer: TimerHandle | None = None
        self._inflight: asyncio.Task[None] | None = None

    @property
    def state(self) -> StreamState[T]:
        return self._state

    @property
    def is_active(self) -> bool:
        """Check if any listener is attached."""
        return bool(self._listeners)

    @property
    def is_fetching(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    # =========================================================================
    # Subscription lifecycle
    # =========================================================================

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Attach a listener, starting the stream if it is the first.

        Returns:
            Function that detaches the listener
        """
        self._listeners.append(listener)
        if len(self._listeners) == 1:
            self._start()

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)
                if not self._listeners:
                    self._stop()

        return unsubscribe

    def _start(self) -> None:
        logger.info("stream_started", stream=self.name, interval=self.interval)
        self._arm_timer()
        self.refresh()

    def _stop(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        logger.info("stream_stopped", stream=self.name, fetch_in_flight=self.is_fetching)

    def _arm_timer(self) -> None:
        self._timer = self._scheduler.call_later(self.interval, self._on_tick)

    def _on_tick(self) -> None:
        if not self.is_active:
            return
        self._arm_timer()
        self.refresh()

    # =========================================================================
    # Fetching
    # =========================================================================

    def refresh(self) -> asyncio.Task[None]:
        """
        Start a fetch unless one is already in flight.

        Returns:
            The task of the fetch now running (new or already outstanding)
        """
        if self._inflight is not None and not self._inflight.done():
            logger.debug("stream_refresh_skipped", stream=self.name, reason="in_flight")
            return self._inflight

        self._inflight = asyncio.get_running_loop().create_task(self._run_fetch())
        return self._inflight

    async def wait(self) -> None:
        """Wait for the outstanding fetch, if any, to finish."""
        if self._inflight is not None:
            await asyncio.shield(self._inflight)

    async def _run_fetch(self) -> None:
        self._set_state(replace(self._state, phase=StreamPhase.FETCHING))

        try:
            snapshot = await self._fetch()
        except DashboardError as e:
            self._apply_failure(describe_error(e), e.kind, e)
            return
        except Exception as e:
            logger.error("stream_fetch_unexpected_error", stream=self.name, error=str(e), exc_info=True)
            self._apply_failure(describe_error(e), None, e)
            return

        if not self.is_active:
            logger.debug("stream_result_discarded", stream=self.name)
            self._state = replace(self._state, phase=StreamPhase.IDLE)
            return

        self._set_state(
            StreamState(
                phase=StreamPhase.SETTLED,
                snapshot=snapshot,
                updated_at=datetime.now(timezone.utc),
            )
        )

    def _apply_failure(
        self,
        message: str,
        kind: ErrorKind | None,
        error: Exception,
    ) -> None:
        logger.warning(
            "stream_fetch_failed",
            stream=self.name,
            error_kind=kind.value if kind else "unknown",
            error=str(error),
            retry_in=self.interval,
        )
        if not self.is_active:
            self._state = replace(self._state, phase=StreamPhase.IDLE)
            return
        self._set_state(
            replace(
                self._state,
                phase=StreamPhase.FAILED,
                error=message,
                error_kind=kind,
            )
        )

    def _set_state(self, state: StreamState[T]) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as e:
                logger.error("stream_listener_error", stream=self.name, error=str(e))


class Synchronizer:
    """
    Owns the health and threats streams for one dashboard session.

    Listeners subscribe per stream; the latest snapshots are available
    as properties at any time.
    """

    def __init__(
        self,
        client: Any,
        scheduler: Scheduler | None = None,
        health_interval: float | None = None,
        threats_interval: float | None = None,
        threats_limit: int | None = None,
    ):
        """
        Initialize the synchronizer.

        Args:
            client: Service client (ThreatIntelClient or compatible)
            scheduler: Timer source shared by both streams
            health_interval: Health poll interval in seconds
            threats_interval: Threats poll interval in seconds
            threats_limit: Number of recent threats to fetch
        """
        self.client = client
        self.threats_limit = threats_limit or settings.threats_limit
        scheduler = scheduler or AsyncioScheduler()

        self.health: PollingStream[HealthStatus] = PollingStream(
            "health",
            self._fetch_health,
            health_interval or settings.health_poll_seconds,
            scheduler,
        )
        self.threats: PollingStream[tuple[Indicator, ...]] = PollingStream(
            "threats",
            self._fetch_threats,
            threats_interval or settings.threats_poll_seconds,
            scheduler,
        )

    async def _fetch_health(self) -> HealthStatus:
        return await self.client.check_health()

    async def _fetch_threats(self) -> tuple[Indicator, ...]:
        threats = await self.client.list_recent(self.threats_limit)
        logger.info("threats_refreshed", count=len(threats))
        return tuple(threats)

    def subscribe_health(self, listener: Listener) -> Callable[[], None]:
        return self.health.subscribe(listener)

    def subscribe_threats(self, listener: Listener) -> Callable[[], None]:
        return self.threats.subscribe(listener)

    def request_refresh(self) -> asyncio.Task[None]:
        """Fetch the threats list now, outside the timer cadence."""
        logger.debug("threats_refresh_requested")
        return self.threats.refresh()

    @property
    def health_status(self) -> HealthStatus | None:
        return self.health.state.snapshot

    @property
    def threats_snapshot(self) -> tuple[Indicator, ...]:
        return self.threats.state.snapshot or ()

    @property
    def threats_error(self) -> str | None:
        """Banner text for the last failed threats fetch, if any."""
        return self.threats.state.error

    async def wait_idle(self) -> None:
        """Wait until neither stream has a fetch in flight."""
        await asyncio.gather(self.health.wait(), self.threats.wait())
