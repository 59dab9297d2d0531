"""Tickler CLI: main entry point."""

from __future__ import annotations

import asyncio
from datetime import datetime

import click
from rich.console import Console
from rich.table import Table

from tickler.config import get_settings
from tickler.errors import ReminderError
from tickler.log import configure_logging
from tickler.models.base import ensure_utc

console = Console()


@click.group()
@click.version_option(package_name="tickler")
@click.option("--log-level", default=None, help="Override LOG_LEVEL from settings")
def cli(log_level: str | None):
    """Tickler: reminder scheduling and delivery."""
    configure_logging(log_level or get_settings().log_level)


@cli.command()
def daemon():
    """Start the reminder daemon (tick loop + daily sweep)."""
    from tickler.core.loop import run_daemon

    click.echo("Starting reminder daemon...")
    asyncio.run(run_daemon())


@cli.command()
def tick():
    """Run a single delivery pass and print the outcome."""
    from tickler.core.loop import build_scheduler

    report = asyncio.run(build_scheduler().tick())
    table = Table(title="Tick", show_header=True)
    table.add_column("Outcome")
    table.add_column("Count", justify="right")
    table.add_row("delivered", str(len(report.delivered)))
    table.add_row("skipped", str(len(report.skipped)))
    table.add_row("failed", str(len(report.failed)))
    console.print(table)
    if report.failed:
        raise SystemExit(1)


@cli.command()
def sweep():
    """Run the due-task sweep once."""
    from tickler.core.loop import build_scheduler

    tasks = asyncio.run(build_scheduler().sweep_due_tasks())
    if not tasks:
        console.print("[dim]No overdue tasks without reminders[/dim]")
        return
    for t in tasks:
        console.print(f"  • [cyan]{t.id}[/cyan]: {t.title}")


@cli.command()
def channels():
    """List registered channels and whether they are ready."""
    from tickler.channels.base import build_registry

    registry = build_registry()
    health = asyncio.run(registry.health())
    table = Table(title="Channels", show_header=True)
    table.add_column("Type")
    table.add_column("Ready")
    for name, ok in health.items():
        table.add_row(name, "[green]yes[/green]" if ok else "[yellow]no[/yellow]")
    console.print(table)


@cli.command()
@click.argument("reminder_id")
def cancel(reminder_id: str):
    """Delete a reminder by id."""
    from tickler.core.loop import build_scheduler

    try:
        asyncio.run(build_scheduler().cancel_reminder(reminder_id))
    except ReminderError as exc:
        console.print(f"[bold red]{exc}[/bold red]")
        raise SystemExit(1) from exc
    console.print(f"Cancelled reminder [cyan]{reminder_id}[/cyan]")


@cli.command()
@click.argument("reminder_id")
@click.argument("when", type=click.DateTime(formats=["%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M"]))
def reschedule(reminder_id: str, when: datetime):
    """Move a reminder to WHEN (UTC) and mark it undelivered."""
    from tickler.core.loop import build_scheduler

    try:
        reminder = asyncio.run(build_scheduler().reschedule_reminder(reminder_id, ensure_utc(when)))
    except ReminderError as exc:
        console.print(f"[bold red]{exc}[/bold red]")
        raise SystemExit(1) from exc
    console.print(f"Reminder [cyan]{reminder.id}[/cyan] now due {reminder.due_at_utc.isoformat()}")


@cli.command()
def status():
    """Show schedule settings, registered channels and the pending backlog."""
    asyncio.run(_show_status())


async def _show_status() -> None:
    from tickler.core.cron import describe_cron
    from tickler.core.loop import build_scheduler
    from tickler.models.base import utcnow

    settings = get_settings()
    console.print(f"\n[bold magenta]{settings.app_name} Status[/bold magenta]\n")
    console.print(f"[bold]Tick interval:[/bold] {settings.reminder_tick_seconds}s")
    console.print(f"[bold]Due-task sweep:[/bold] {describe_cron(settings.task_sweep_cron)}")

    try:
        scheduler = build_scheduler(settings)
        console.print(
            f"[bold]Channels:[/bold] {', '.join(scheduler.registry.channel_types()) or 'none'}"
        )
        pending = await scheduler.reminders.find_pending(utcnow())
        console.print(f"[bold]Due reminders waiting:[/bold] {len(pending)}")
    except Exception as e:
        console.print(f"[yellow]Could not reach the reminder store: {e}[/yellow]")

    console.print()
