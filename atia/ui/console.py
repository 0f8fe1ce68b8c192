"""
ATIA Console Output Module

Rich console rendering of the dashboard: service status header, tab bar,
threat cards, the detail overlay and transient notices.
"""

from rich.box import ROUNDED
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from atia.intel.classifier import ReputationTier, Severity, classify, classify_reputation
from atia.intel.models import HealthStatus, Indicator, IndicatorHistory
from atia.sync.submission import SubmissionState
from atia.sync.synchronizer import StreamState
from atia.ui.settings_store import DashboardSettings
from atia.ui.view_state import ActiveView, Notice, NoticeLevel, ViewState


# =============================================================================
# Constants
# =============================================================================

TITLE = "ATIA"
SUBTITLE = "Advanced Threat Intelligence Aggregator"

SEVERITY_COLORS = {
    Severity.HIGH: "red bold",
    Severity.MEDIUM: "dark_orange",
    Severity.LOW: "green",
}

REPUTATION_COLORS = {
    ReputationTier.MALICIOUS: "white on red",
    ReputationTier.SUSPICIOUS: "black on yellow",
    ReputationTier.NEUTRAL: "black on green",
}

NOTICE_STYLES = {
    NoticeLevel.SUCCESS: ("green", "✓"),
    NoticeLevel.ERROR: ("red", "✗"),
    NoticeLevel.INFO: ("cyan", "ℹ"),
}

TAB_LABELS = {
    ActiveView.DASHBOARD: "Dashboard",
    ActiveView.ANALYTICS: "Analytics",
    ActiveView.AUTOMATION: "Automation",
    ActiveView.SETTINGS: "Settings",
}


def reputation_badge(reputation: str) -> Text:
    """Badge text for a reputation or verdict string."""
    tier = classify_reputation(reputation)
    return Text(f" {(reputation or 'unknown').upper()} ", style=REPUTATION_COLORS[tier])


def health_label(state: StreamState) -> Text:
    """Status text for the header; no snapshot yet reads as checking."""
    health: HealthStatus | None = state.snapshot
    if health is None:
        return Text("CHECKING...", style="dim")
    style = "green bold" if health.is_healthy else "red bold"
    return Text(health.status.upper(), style=style)


# =============================================================================
# Console Display Class
# =============================================================================


class DashboardConsole:
    """Rich console interface for the ATIA dashboard."""

    def __init__(self, console: Console | None = None):
        """Initialize the console."""
        self.console = console or Console()

    def clear(self) -> None:
        """Clear the console."""
        self.console.clear()

    def print_success(self, text: str) -> None:
        self.console.print(f"  [green]✓[/green] {text}")

    def print_warning(self, text: str) -> None:
        self.console.print(f"  [yellow]⚠[/yellow] {text}")

    def print_error(self, text: str) -> None:
        self.console.print(f"  [red]✗[/red] {text}")

    def print_info(self, text: str) -> None:
        self.console.print(f"  [cyan]ℹ[/cyan] {text}")

    # =========================================================================
    # Header and Navigation
    # =========================================================================

    def print_header(self, health: StreamState) -> None:
        """Print the title bar with the service status."""
        table = Table.grid(expand=True)
        table.add_column(justify="left")
        table.add_column(justify="right")

        title = Text()
        title.append(TITLE, style="bold bright_white")
        title.append(f"  {SUBTITLE}", style="dim")

        status = Text("Service Status: ", style="dim")
        status.append_text(health_label(health))

        table.add_row(title, status)
        self.console.print(Panel(table, border_style="bright_blue", box=ROUNDED))

    def print_tabs(self, view: ViewState) -> None:
        """Print the tab bar with the active tab highlighted."""
        tabs = Text()
        for active_view, label in TAB_LABELS.items():
            if active_view is view.active_view:
                tabs.append(f" {label} ", style="bold black on bright_blue")
            else:
                tabs.append(f" {label} ", style="dim")
            tabs.append(" ")
        self.console.print(tabs)
        self.console.print()

    def print_notice(self, notice: Notice | None) -> None:
        if notice is None:
            return
        style, icon = NOTICE_STYLES[notice.level]
        self.console.print(f"  [{style}]{icon}[/{style}] {notice.text}")

    def print_banner(self, message: str) -> None:
        """Print a non-blocking error banner."""
        self.console.print(Panel(
            Text(message, style="red"),
            border_style="red",
            box=ROUNDED,
        ))

    # =========================================================================
    # Threats
    # =========================================================================

    def build_threat_table(self, threats: tuple[Indicator, ...]) -> Table:
        """Build the recent threats table (one row per card)."""
        table = Table(
            title=f"Recent Threats ({len(threats)} total)",
            box=ROUNDED,
            border_style="bright_blue",
            header_style="bold bright_white",
            title_style="bold cyan",
        )
        table.add_column("#", style="bright_yellow", justify="center", width=4)
        table.add_column("Indicator", style="bright_white", min_width=24, overflow="fold")
        table.add_column("Type", style="dim", width=8)
        table.add_column("Reputation", justify="center")
        table.add_column("Risk Score", justify="right")
        table.add_column("Severity", justify="center")
        table.add_column("Sources", style="bright_blue", justify="right")

        for i, threat in enumerate(threats, 1):
            result = classify(threat)
            severity_style = SEVERITY_COLORS[result.severity]
            table.add_row(
                str(i),
                threat.indicator,
                threat.kind.value,
                reputation_badge(threat.reputation),
                Text(f"{threat.risk_score:.1f}", style=severity_style),
                Text(result.severity.value.upper(), style=severity_style),
                str(threat.sources_count),
            )

        return table

    def print_threats(self, state: StreamState) -> None:
        """Print the threats stream: banner, loading, empty or table."""
        if state.error:
            self.print_banner(state.error)

        threats = state.snapshot
        if threats is None:
            self.console.print("[dim]Loading threats...[/dim]")
            return
        if not threats:
            self.console.print("[dim]No threats found. Analyze an indicator to get started.[/dim]")
            return
        self.console.print(self.build_threat_table(threats))

    def print_detail(self, threat: Indicator) -> None:
        """Print the detail overlay for one indicator."""
        result = classify(threat)

        summary = Table(box=None, show_header=False, padding=(0, 2))
        summary.add_column("Label", style="dim")
        summary.add_column("Value", style="bright_white")
        summary.add_row("Type", threat.kind.value.capitalize())
        summary.add_row(
            "Risk Score",
            Text(f"{threat.risk_score:.1f}", style=SEVERITY_COLORS[result.severity]),
        )
        summary.add_row("Reputation", threat.reputation.capitalize())
        summary.add_row("Sources", str(threat.sources_count))
        if threat.first_seen:
            summary.add_row("First Seen", threat.first_seen)
        if threat.last_updated:
            summary.add_row("Last Updated", threat.last_updated)

        self.console.print(Panel(
            summary,
            title=f"[bold]{threat.indicator}[/bold]",
            border_style="bright_blue",
            box=ROUNDED,
        ))

        if threat.sources:
            sources = Table(
                title="Intelligence Sources",
                box=ROUNDED,
                border_style="dim",
                title_style="bold cyan",
            )
            sources.add_column("Source", style="bright_white")
            sources.add_column("Verdict", justify="center")
            sources.add_column("Score", justify="right")
            sources.add_column("Timestamp", style="dim")
            for source in threat.sources:
                sources.add_row(
                    source.name,
                    reputation_badge(source.verdict),
                    f"{source.score:.1f}",
                    source.timestamp,
                )
            self.console.print(sources)

        if threat.tags:
            self.console.print("[bold]Tags:[/bold] " + "  ".join(f"[reverse] {t} [/reverse]" for t in threat.tags))

    def print_history(self, history: IndicatorHistory) -> None:
        """Print past analyses of one indicator."""
        if not history.history:
            self.print_info(f"No history recorded for {history.indicator}")
            return

        table = Table(
            title=f"History: {history.indicator}",
            box=ROUNDED,
            border_style="dim",
            title_style="bold cyan",
        )
        table.add_column("Last Updated", style="dim")
        table.add_column("Reputation", justify="center")
        table.add_column("Risk Score", justify="right")
        table.add_column("Sources", justify="right")
        for record in history.history:
            severity = classify(record).severity
            table.add_row(
                record.last_updated,
                reputation_badge(record.reputation),
                Text(f"{record.risk_score:.1f}", style=SEVERITY_COLORS[severity]),
                str(record.sources_count),
            )
        self.console.print(table)

    # =========================================================================
    # Submission and Settings
    # =========================================================================

    def print_submission(self, state: SubmissionState) -> None:
        """Print the outcome of the last submission."""
        if state.message is None:
            return
        if state.succeeded:
            self.print_success(state.message)
        elif state.failed:
            self.print_error(state.message)

    def print_settings(self, record: DashboardSettings) -> None:
        table = Table(title="Settings", box=ROUNDED, border_style="dim", title_style="bold cyan")
        table.add_column("Key", style="dim")
        table.add_column("Value", style="bright_white", overflow="fold")
        for key, value in record.model_dump().items():
            table.add_row(key, value or "[dim](not set)[/dim]")
        self.console.print(table)

    # =========================================================================
    # Full Dashboard
    # =========================================================================

    def render_dashboard(
        self,
        health: StreamState,
        threats: StreamState,
        view: ViewState,
    ) -> None:
        """Render one full frame of the dashboard."""
        self.print_header(health)
        self.print_tabs(view)
        self.print_notice(view.notice)

        if view.active_view is ActiveView.DASHBOARD:
            self.print_threats(threats)
        else:
            self.console.print(f"[dim]{TAB_LABELS[view.active_view]} view[/dim]")

        if view.selected_indicator is not None:
            self.console.print()
            self.print_detail(view.selected_indicator)


_console_instance: DashboardConsole | None = None


def get_console() -> DashboardConsole:
    """Get or create the global console instance."""
    global _console_instance
    if _console_instance is None:
        _console_instance = DashboardConsole()
    return _console_instance
