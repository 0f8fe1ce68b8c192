"""
ATIA View State Controller

Tracks which dashboard tab is active, which indicator is open in the
detail overlay, and the current transient notice. Purely local state.
"""

from dataclasses import dataclass, replace
from enum import Enum

import structlog

from atia.intel.models import Indicator

logger = structlog.get_logger(__name__)


class ActiveView(Enum):
    """Dashboard tabs."""

    DASHBOARD = "dashboard"
    ANALYTICS = "analytics"
    AUTOMATION = "automation"
    SETTINGS = "settings"


class NoticeLevel(Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass(frozen=True)
class Notice:
    """A transient message shown until cleared."""

    level: NoticeLevel
    text: str


@dataclass(frozen=True)
class ViewState:
    active_view: ActiveView = ActiveView.DASHBOARD
    selected_indicator: Indicator | None = None
    notice: Notice | None = None

    @property
    def detail_open(self) -> bool:
        return self.selected_indicator is not None


class ViewStateController:
    """
    Holds the dashboard view state.

    The selected indicator is the record as it was when clicked; later
    snapshots do not update or close it.
    """

    def __init__(self) -> None:
        self._state = ViewState()

    @property
    def state(self) -> ViewState:
        return self._state

    def select_view(self, view: ActiveView | str) -> ViewState:
        """Switch to a tab by enum or name."""
        view = ActiveView(view)
        self._state = replace(self._state, active_view=view)
        logger.debug("view_selected", view=view.value)
        return self._state

    def select_indicator(self, indicator: Indicator) -> ViewState:
        """Open the detail overlay for an indicator."""
        self._state = replace(self._state, selected_indicator=indicator)
        logger.debug("indicator_selected", indicator=indicator.identity)
        return self._state

    def close_detail(self) -> ViewState:
        """Close the detail overlay."""
        self._state = replace(self._state, selected_indicator=None)
        return self._state

    def show_notice(self, level: NoticeLevel | str, text: str) -> ViewState:
        self._state = replace(self._state, notice=Notice(NoticeLevel(level), text))
        return self._state

    def clear_notice(self) -> ViewState:
        self._state = replace(self._state, notice=None)
        return self._state
