#!/usr/bin/env python3
"""
ATIA CLI - Command Line Interface

Terminal front end for the threat intelligence dashboard.

Usage:
    atia health
    atia list --limit 20
    atia analyze 8.8.8.8 --type ip
    atia analyze evil.com --type domain --event
    atia show evil.com --history
    atia watch
    atia settings show
    atia settings set webhook_url=https://hooks.example/atia
"""

import argparse
import asyncio
import sys

from atia.config import settings
from atia.errors import DashboardError
from atia.intel.client import ThreatIntelClient
from atia.intel.events import build_threat_event
from atia.intel.models import IndicatorKind
from atia.main import DashboardSession, configure_logging
from atia.ui.console import DashboardConsole, get_console
from atia.ui.settings_store import DashboardSettings, SettingsStore


# =============================================================================
# Commands
# =============================================================================


async def cmd_health(client: ThreatIntelClient, console: DashboardConsole, args) -> int:
    health = await client.check_health()
    label = health.service_name or "service"
    if health.is_healthy:
        console.print_success(f"{label}: {health.status.upper()}")
        return 0
    console.print_warning(f"{label}: {health.status.upper()}")
    return 1


async def cmd_list(client: ThreatIntelClient, console: DashboardConsole, args) -> int:
    threats = await client.list_recent(args.limit)
    if not threats:
        console.print_info("No threats found. Analyze an indicator to get started.")
        return 0
    console.console.print(console.build_threat_table(threats))
    return 0


async def cmd_show(client: ThreatIntelClient, console: DashboardConsole, args) -> int:
    threat = await client.get_threat(args.indicator)
    console.print_detail(threat)
    if args.history:
        console.console.print()
        console.print_history(await client.get_history(args.indicator))
    return 0


async def cmd_analyze(client: ThreatIntelClient, console: DashboardConsole, args) -> int:
    session = DashboardSession(client=client)
    session.attach(lambda: None)
    try:
        # Let the initial fetches settle so the refresh after submit is not skipped
        await session.synchronizer.wait_idle()
        state = await session.submit(args.indicator, args.type)
        await session.synchronizer.wait_idle()

        console.print_notice(session.view.state.notice)
        if not state.succeeded:
            return 1

        console.console.print()
        console.print_detail(state.result)
        if args.event:
            console.console.print()
            console.console.print_json(data=build_threat_event(state.result))
        console.console.print()
        console.print_threats(session.synchronizer.threats.state)
        return 0
    finally:
        session.detach()


async def cmd_watch(client: ThreatIntelClient, console: DashboardConsole, args) -> int:
    session = DashboardSession(client=client)

    def render() -> None:
        console.clear()
        console.render_dashboard(
            session.synchronizer.health.state,
            session.synchronizer.threats.state,
            session.view.state,
        )

    session.attach(render)
    try:
        if args.duration:
            await asyncio.sleep(args.duration)
        else:
            await asyncio.Event().wait()
    finally:
        session.detach()
    return 0


def cmd_settings(console: DashboardConsole, args) -> int:
    store = SettingsStore()
    record = store.load()

    if args.settings_action == "set":
        updates = {}
        for pair in args.pairs:
            key, sep, value = pair.partition("=")
            if not sep or key not in DashboardSettings.model_fields:
                console.print_error(f"Invalid setting: {pair}")
                return 1
            updates[key] = value
        record = record.model_copy(update=updates)
        store.save(record)
        console.print_success(f"Settings saved to {store.path}")

    console.print_settings(record)
    return 0


COMMANDS = {
    "health": cmd_health,
    "list": cmd_list,
    "show": cmd_show,
    "analyze": cmd_analyze,
    "watch": cmd_watch,
}


async def run_command(args, console: DashboardConsole) -> int:
    """Run one network command with a client bound to the resolved URL."""
    base_url = args.base_url or settings.resolve_base_url(args.context)
    async with ThreatIntelClient(base_url=base_url) as client:
        try:
            return await COMMANDS[args.command](client, console, args)
        except DashboardError as e:
            console.print_error(e.user_message)
            return 1


# =============================================================================
# Entry Point
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="atia",
        description="ATIA - Advanced Threat Intelligence Aggregator dashboard",
    )
    parser.add_argument(
        "--base-url",
        help="Aggregation service URL (overrides the configured context URL)",
    )
    parser.add_argument(
        "--context",
        choices=["client", "server"],
        default=None,
        help="Execution context used to pick the default service URL",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("health", help="Check service health")

    list_parser = subparsers.add_parser("list", help="List recent threats")
    list_parser.add_argument("--limit", type=int, default=settings.threats_limit)

    analyze_parser = subparsers.add_parser("analyze", help="Submit an indicator for analysis")
    analyze_parser.add_argument("indicator")
    analyze_parser.add_argument(
        "--type",
        choices=[k.value for k in IndicatorKind],
        default=IndicatorKind.IP.value,
    )
    analyze_parser.add_argument(
        "--event",
        action="store_true",
        help="Print the webhook event payload for the result",
    )

    show_parser = subparsers.add_parser("show", help="Show one indicator in detail")
    show_parser.add_argument("indicator")
    show_parser.add_argument("--history", action="store_true", help="Include past analyses")

    watch_parser = subparsers.add_parser("watch", help="Live dashboard (Ctrl-C to stop)")
    watch_parser.add_argument("--duration", type=float, default=None, help="Stop after N seconds")

    settings_parser = subparsers.add_parser("settings", help="Show or edit local settings")
    settings_sub = settings_parser.add_subparsers(dest="settings_action", required=True)
    settings_sub.add_parser("show")
    set_parser = settings_sub.add_parser("set")
    set_parser.add_argument("pairs", nargs="+", metavar="KEY=VALUE")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    configure_logging()
    console = get_console()

    try:
        if args.command == "settings":
            return cmd_settings(console, args)
        return asyncio.run(run_command(args, console))
    except KeyboardInterrupt:
        console.console.print("\n[dim]Interrupted[/dim]")
        return 130
    except Exception as e:
        console.print_error(str(e))
        if args.verbose:
            import traceback
            console.console.print(f"\n[dim]{traceback.format_exc()}[/dim]")
        return 1


if __name__ == "__main__":
    sys.exit(main())
