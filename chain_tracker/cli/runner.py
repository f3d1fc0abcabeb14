# chain_tracker/cli/runner.py

"""Headless commands: serve, record once, print views, health check."""

import json
import logging
import signal
import sys
from typing import Any

from rich.console import Console
from rich.table import Table

from chain_tracker.config.settings import Settings
from chain_tracker.context import AppContext
from chain_tracker.models.snapshot import ms_to_iso
from chain_tracker.providers.base_provider import ProviderError
from chain_tracker.services.query_service import (
    ActivitySummary,
    CurrentStats,
    HistoryView,
    format_change,
)
from chain_tracker.storage.snapshot_store import StorageError

logger = logging.getLogger("chain_tracker.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


def _dump_json(payload: dict[str, Any]) -> None:
    json.dump(payload, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")


def _print_stats(stats: CurrentStats) -> None:
    table = Table(
        title="Current Balances",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Chain", style="bold")
    table.add_column("Balance", justify="right", style="green")
    table.add_column("Change", justify="right")
    table.add_column("Gas (gwei)", justify="right", style="dim")
    table.add_row(
        "Base",
        f"{stats.base_balance} ETH",
        f"{format_change(stats.base_change)}%",
        stats.base_gas_price,
    )
    table.add_row(
        "Solana",
        f"{stats.solana_balance} SOL",
        f"{format_change(stats.solana_change)}%",
        "—",
    )
    Console().print(table)
    since = (
        ms_to_iso(stats.tracking_since)
        if stats.tracking_since is not None
        else "not yet"
    )
    _err.print(
        f"[dim]{stats.snapshots_recorded:,} snapshots, "
        f"tracking since {since}[/dim]"
    )


def _print_history(view: HistoryView) -> None:
    table = Table(
        title=f"Balance History (last {view.hours:g}h)",
        show_lines=False,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=5)
    table.add_column("Date")
    table.add_column("ETH", justify="right", style="green")
    table.add_column("SOL", justify="right", style="magenta")
    for idx, s in enumerate(view.snapshots, 1):
        table.add_row(
            str(idx),
            s.iso_date,
            f"{s.base_balance:.6f}",
            f"{s.solana_balance:.9f}",
        )
    Console().print(table)


def _print_activity(summary: ActivitySummary) -> None:
    table = Table(
        title="Recording Activity",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    def _avg(value: float | None, unit: str) -> str:
        return f"{value:.6f} {unit}" if value is not None else "no data"

    table.add_row("Snapshots (24h)", str(summary.last_24h))
    table.add_row("Snapshots (7d)", str(summary.last_7d))
    table.add_row("Snapshots (total)", str(summary.total))
    table.add_row("Avg ETH (7d)", _avg(summary.avg_base_balance, "ETH"))
    table.add_row("Avg SOL (7d)", _avg(summary.avg_solana_balance, "SOL"))
    Console().print(table)


async def run_record_once(context: AppContext) -> int:
    """Record a single snapshot; exit code 0 only if a row was stored."""
    _err.print("[bold]Recording balance snapshot...[/bold]")
    snapshot = await context.recorder.record_snapshot()
    if snapshot is None:
        _err.print("[red]Snapshot aborted, see log for details.[/red]")
        return 1
    _err.print(
        f"[green]✓ Snapshot {snapshot.id}: "
        f"{snapshot.base_balance} ETH, {snapshot.solana_balance} SOL[/green]"
    )
    return 0


async def run_stats(context: AppContext, output_format: str) -> int:
    """Print live balances and change since the first snapshot."""
    try:
        stats = await context.query_service.current_stats()
    except (ProviderError, StorageError) as exc:
        logger.error("Stats failed: %s", exc, exc_info=True)
        _err.print(f"[red]Error: {exc}[/red]")
        return 1
    if output_format == "table":
        _print_stats(stats)
    else:
        _dump_json(stats.to_dict())
    return 0


def run_history(
    context: AppContext, hours: object, output_format: str,
) -> int:
    """Print stored snapshots from the trailing window."""
    try:
        view = context.query_service.history(hours)
    except StorageError as exc:
        logger.error("History failed: %s", exc, exc_info=True)
        _err.print(f"[red]Error: {exc}[/red]")
        return 1
    if not view.snapshots:
        _err.print("[yellow]No snapshots in this window.[/yellow]")
    if output_format == "table":
        _print_history(view)
    else:
        _dump_json(view.to_dict())
    return 0


def run_activity(context: AppContext, output_format: str) -> int:
    """Print recording counts and weekly averages."""
    try:
        summary = context.query_service.activity()
    except StorageError as exc:
        logger.error("Activity failed: %s", exc, exc_info=True)
        _err.print(f"[red]Error: {exc}[/red]")
        return 1
    if output_format == "table":
        _print_activity(summary)
    else:
        _dump_json(summary.to_dict())
    return 0


async def run_health_check(context: AppContext) -> int:
    """Run connectivity health check on both RPC endpoints."""
    from chain_tracker.services.health_checker import HealthChecker

    _err.print("[bold]Running RPC health check...[/bold]")
    checker = HealthChecker(context.providers)
    results = await checker.check_all()

    table = Table(
        title="RPC Health Check",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Chain", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Latency", justify="right")
    table.add_column("Notes", style="dim")

    any_down = False
    for r in results:
        if r.status == "ok":
            status = "[green]✅ OK[/green]"
        elif r.status == "slow":
            status = "[yellow]⚠️  SLOW[/yellow]"
        else:
            status = "[red]❌ DOWN[/red]"
            any_down = True

        latency = (
            f"{r.latency_ms:.0f}ms"
            if r.latency_ms > 0
            else "—"
        )
        table.add_row(r.chain, status, latency, r.message)

    Console().print(table)
    return 1 if any_down else 0


def run_server(context: AppContext) -> int:
    """Start the recording scheduler and serve the HTTP API."""
    from chain_tracker.api.app import create_app
    from chain_tracker.services.scheduler import RecordingScheduler

    scheduler = RecordingScheduler(context.recorder)
    app = create_app(context)

    def _stop(signum: int, _frame: object) -> None:
        logger.info("Received signal %d, shutting down", signum)
        raise SystemExit(0)

    signal.signal(signal.SIGTERM, _stop)

    logger.info("Tracking Base wallet %s", Settings.BASE_ADDRESS)
    logger.info("Tracking Solana wallet %s", Settings.SOLANA_ADDRESS)
    logger.info(
        "Snapshot store holds %d snapshots", context.store.count(),
    )
    _err.print(
        f"[bold]📊 chain_tracker on {Settings.HOST}:{Settings.PORT}[/bold]\n"
        f"[dim]   Base:   {Settings.BASE_ADDRESS}\n"
        f"   Solana: {Settings.SOLANA_ADDRESS}[/dim]"
    )

    scheduler.start()
    try:
        app.run(
            host=Settings.HOST,
            port=Settings.PORT,
            threaded=True,
            use_reloader=False,
        )
    finally:
        scheduler.shutdown(wait=True)
    return 0
