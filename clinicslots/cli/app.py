"""
Main CLI application using Typer.
"""

import logging
from pathlib import Path
from typing import Annotated, List, NoReturn, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.session_source import JsonSessionSource
from ..adapters.settings_store import YamlSettingsStore
from ..config import get_default_config_path
from ..domain.exceptions import SchedulingError
from ..domain.models import DATE_FORMAT
from ..services.scheduling import SchedulingService

app = typer.Typer(
    name="clinicslots",
    help="Find free appointment slots for clinic therapy sessions",
    add_completion=False
)

console = Console()

WEEKDAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to settings file. Defaults to ./clinicslots.yaml"),
]
SessionsOption = Annotated[
    Optional[Path],
    typer.Option("--sessions", "-s", help="JSON file with booked sessions. Defaults to the demo calendar."),
]
DurationOption = Annotated[
    Optional[int],
    typer.Option("--duration", "-d", help="Session duration in minutes"),
]
DoctorOption = Annotated[
    Optional[str],
    typer.Option("--doctor", help="Only check conflicts for this doctor id"),
]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")] = False,
):
    """
    Appointment slot allocation for clinic scheduling.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _build_service(config_file: Optional[Path], sessions_file: Optional[Path]) -> SchedulingService:
    config_path = config_file or get_default_config_path()
    source = JsonSessionSource(sessions_file)

    if source.is_demo:
        console.print("[yellow]⚠  DEMO MODE: using bundled sample sessions[/yellow]\n")

    return SchedulingService(
        settings_store=YamlSettingsStore(config_path),
        session_source=source,
    )


def _fail(error: Exception) -> NoReturn:
    console.print(f"[bold red]Error:[/bold red] {error}")
    raise typer.Exit(1)


@app.command()
def slots(
    date: Annotated[str, typer.Argument(help="Date to check (YYYY-MM-DD)")],
    duration: DurationOption = None,
    doctor: DoctorOption = None,
    config_file: ConfigOption = None,
    sessions_file: SessionsOption = None,
):
    """
    List free start times on one date.

    Examples:

        clinicslots slots 2024-01-15
        clinicslots slots 2024-01-15 --duration 90 --doctor dr-sharma
    """
    try:
        service = _build_service(config_file, sessions_file)
        available = service.get_available_time_slots(date, duration_minutes=duration, doctor_id=doctor)
    except (FileNotFoundError, ValueError, SchedulingError) as e:
        _fail(e)

    if not available:
        console.print(f"[yellow]⚠ No free slots on {date}.[/yellow]")
        return

    console.print(f"[bold green]✓ {len(available)} free slot(s) on {date}:[/bold green]\n")
    for time in available:
        console.print(f"  {time}")
    console.print()


@app.command(name="next")
def next_slot(
    start_date: Annotated[Optional[str], typer.Argument(help="First date to check (YYYY-MM-DD). Defaults to today.")] = None,
    duration: DurationOption = None,
    doctor: DoctorOption = None,
    config_file: ConfigOption = None,
    sessions_file: SessionsOption = None,
):
    """
    Find the earliest free slot on a working day within the next 30 days.
    """
    try:
        service = _build_service(config_file, sessions_file)
        start = start_date or pendulum.now(service.get_settings().timezone).format(DATE_FORMAT)
        slot = service.get_next_available_slot(start, duration_minutes=duration, doctor_id=doctor)
    except (FileNotFoundError, ValueError, SchedulingError) as e:
        _fail(e)

    if slot is None:
        console.print(
            "[yellow]⚠ No free slot found in the next 30 days.[/yellow]\n"
            "Try a shorter duration or another doctor."
        )
        return

    console.print(f"[bold green]✓ Next free slot:[/bold green] {slot.format_display()}\n")


@app.command()
def suggest(
    date: Annotated[str, typer.Argument(help="Preferred date (YYYY-MM-DD)")],
    duration: DurationOption = None,
    doctor: DoctorOption = None,
    config_file: ConfigOption = None,
    sessions_file: SessionsOption = None,
):
    """
    Show up to ten ranked appointment suggestions around a preferred date.
    """
    try:
        service = _build_service(config_file, sessions_file)
        suggestions = service.suggest_appointment_times(date, duration_minutes=duration, doctor_id=doctor)
    except (FileNotFoundError, ValueError, SchedulingError) as e:
        _fail(e)

    if not suggestions:
        console.print(f"[yellow]⚠ No free slots in the week from {date}.[/yellow]")
        return

    table = Table(title="Suggested appointments", show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Date", style="bold")
    table.add_column("Time")
    table.add_column("Score", justify="right", style="green")

    for rank, suggestion in enumerate(suggestions, 1):
        table.add_row(str(rank), suggestion.date, suggestion.time, str(suggestion.score))

    console.print()
    console.print(table)
    console.print()


@app.command()
def reminders(
    now: Annotated[Optional[str], typer.Option("--now", help="Evaluate at this timestamp instead of the current time")] = None,
    config_file: ConfigOption = None,
    sessions_file: SessionsOption = None,
):
    """
    List sessions whose reminder is due now.
    """
    try:
        service = _build_service(config_file, sessions_file)
        settings = service.get_settings()
        moment = pendulum.parse(now, tz=settings.timezone) if now else None
        due = service.sessions_due_for_reminder(now=moment)
    except (FileNotFoundError, ValueError, SchedulingError) as e:
        _fail(e)

    if not settings.auto_reminders_enabled:
        console.print("[yellow]Automatic reminders are disabled.[/yellow]")
        return

    if not due:
        console.print("No reminders due.")
        return

    console.print(f"[bold green]✓ {len(due)} reminder(s) due:[/bold green]\n")
    for session in due:
        who = session.doctor_id or session.practitioner_name or "unassigned"
        console.print(f"  {session.date} {session.time} ({session.duration_minutes} min, {who})")
    console.print()


@app.command()
def show_settings(config_file: ConfigOption = None):
    """
    Show the current scheduling settings.
    """
    config_path = config_file or get_default_config_path()

    try:
        settings = YamlSettingsStore(config_path).load()
    except SchedulingError as e:
        _fail(e)

    table = Table(title="Scheduling settings", show_header=True, header_style="bold cyan")
    table.add_column("Setting", style="bold yellow")
    table.add_column("Value")

    excluded = ", ".join(WEEKDAY_NAMES[day] for day in settings.exclude_weekdays) or "none"

    table.add_row("Default duration", f"{settings.default_duration_minutes} min")
    table.add_row("Reminder lead time", f"{settings.notification_lead_time_hours} h")
    table.add_row(
        "Working hours",
        f"{settings.working_hours_start:%H:%M} - {settings.working_hours_end:%H:%M}",
    )
    table.add_row("Buffer", f"{settings.buffer_minutes} min")
    table.add_row("Automatic reminders", "on" if settings.auto_reminders_enabled else "off")
    table.add_row("Automatic confirmation", "on" if settings.auto_confirmation_enabled else "off")
    table.add_row("Closed on", excluded)
    table.add_row("Timezone", settings.timezone)

    console.print()
    console.print(table)
    console.print(f"[dim]Source: {config_path}[/dim]\n")


@app.command()
def set_settings(
    config_file: ConfigOption = None,
    duration: Annotated[Optional[int], typer.Option("--duration", help="Default session duration in minutes")] = None,
    lead_time: Annotated[Optional[int], typer.Option("--lead-time", help="Reminder lead time in hours")] = None,
    start: Annotated[Optional[str], typer.Option("--start", help="Working hours start (HH:MM)")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="Working hours end (HH:MM)")] = None,
    buffer: Annotated[Optional[int], typer.Option("--buffer", help="Buffer after each session in minutes")] = None,
    reminders_enabled: Annotated[Optional[bool], typer.Option("--reminders/--no-reminders", help="Automatic reminders")] = None,
    confirmation_enabled: Annotated[Optional[bool], typer.Option("--confirmation/--no-confirmation", help="Automatic confirmation")] = None,
    exclude_day: Annotated[Optional[List[int]], typer.Option("--exclude-day", help="Closed weekday, 0=Monday (repeatable)")] = None,
    timezone: Annotated[Optional[str], typer.Option("--timezone", help="IANA timezone for reminders")] = None,
):
    """
    Change one or more scheduling settings.
    """
    changes = {
        "default_duration_minutes": duration,
        "notification_lead_time_hours": lead_time,
        "working_hours_start": start,
        "working_hours_end": end,
        "buffer_minutes": buffer,
        "auto_reminders_enabled": reminders_enabled,
        "auto_confirmation_enabled": confirmation_enabled,
        "exclude_weekdays": list(exclude_day) if exclude_day else None,
        "timezone": timezone,
    }
    changes = {key: value for key, value in changes.items() if value is not None}

    if not changes:
        console.print("[yellow]Nothing to change.[/yellow]")
        return

    config_path = config_file or get_default_config_path()

    try:
        service = SchedulingService(settings_store=YamlSettingsStore(config_path))
        service.update_settings(**changes)
    except SchedulingError as e:
        _fail(e)

    console.print(f"[green]✓ Settings saved to {config_path}[/green]")


@app.command()
def reset_settings(config_file: ConfigOption = None):
    """
    Restore the default scheduling settings.
    """
    config_path = config_file or get_default_config_path()

    try:
        YamlSettingsStore(config_path).reset()
    except SchedulingError as e:
        _fail(e)

    console.print("[green]✓ Settings reset to defaults.[/green]")


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]clinicslots[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
