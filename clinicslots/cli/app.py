"""
Main CLI application using Typer.
"""

import asyncio
import logging
from datetime import date
from pathlib import Path
from typing import Annotated, List, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.api_client import ClinicApiClient
from ..adapters.json_source import JsonClinicDataSource
from ..adapters.records import time_of_day_from_appointment
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import ClinicSlotsError, DateBlockedError
from ..domain.models import Slot
from ..domain.rules import PaymentFilter, filter_by_payment
from ..domain.slot_calculator import SlotCalculator
from ..services.slot_finder import ClinicDataSourceProtocol, SlotFinderService

app = typer.Typer(
    name="clinicslots",
    help="Find bookable appointment slots from doctors' weekly schedules",
    add_completion=False
)

console = Console()

WEEKDAY_NAMES = {
    1: "Monday",
    2: "Tuesday",
    3: "Wednesday",
    4: "Thursday",
    5: "Friday",
    6: "Saturday",
    7: "Sunday",
}

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")
]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")] = False,
):
    """Configure logging for all commands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    config_path = config_file or get_default_config_path()
    return AppConfig.load_from_yaml(config_path)


def _build_data_source(config: AppConfig) -> ClinicDataSourceProtocol:
    if config.api is not None:
        return ClinicApiClient(
            base_url=config.api.base_url,
            access_token=config.api.access_token,
            timeout=config.api.timeout_seconds,
        )
    return JsonClinicDataSource.from_file(config.data_file)


def _build_service(config: AppConfig) -> SlotFinderService:
    return SlotFinderService(
        data_source=_build_data_source(config),
        slot_calculator=SlotCalculator(include_booked=config.show_booked_slots),
        default_duration_minutes=config.defaults.duration_minutes,
    )


def _parse_date(value: Optional[str], tz: str) -> date:
    """Parse YYYY-MM-DD, defaulting to today in the configured timezone."""
    if not value:
        return pendulum.today(tz).date()
    try:
        return pendulum.from_format(value, "YYYY-MM-DD", tz=tz).date()
    except ValueError as e:
        console.print(f"[red]Could not parse date {value!r}: {e}[/red]")
        raise typer.Exit(1)


def _print_slots(found: List[Slot], target_date: date, payment: PaymentFilter) -> None:
    slots = filter_by_payment(found, payment)
    console.print()
    if found and not slots:
        console.print(
            f"[yellow]⚠ No {payment.value} slots on this date.[/yellow]\n"
            f"None of the {len(found)} open slot(s) match the '{payment.value}' payment filter."
        )
        return
    if not slots:
        console.print(
            "[yellow]⚠ No bookable slots on this date.[/yellow]\n"
            "The doctor may not work that day, or every slot is taken."
        )
        return

    weekday = WEEKDAY_NAMES[target_date.isoweekday()]
    console.print(
        f"[bold green]✓ {len(slots)} slot(s) on {weekday}, "
        f"{target_date.strftime('%d.%m.%Y')}:[/bold green]\n"
    )
    for slot in slots:
        style = "magenta" if slot.is_paid else "cyan"
        if not slot.available:
            style = "dim"
        console.print(f"  [{style}]{slot.format_display()}[/{style}]")
    console.print()


@app.command()
def slots(
    employee_id: Annotated[str, typer.Argument(help="Doctor (employee) id")],
    on: Annotated[Optional[str], typer.Option("--date", "-d", help="Date (YYYY-MM-DD), defaults to today")] = None,
    service_id: Annotated[Optional[str], typer.Option("--service", "-s", help="Service id to take the duration from")] = None,
    duration: Annotated[Optional[int], typer.Option("--duration", help="Slot length in minutes, overrides the service")] = None,
    payment: Annotated[PaymentFilter, typer.Option("--filter", "-f", help="Show all, only free or only paid slots")] = PaymentFilter.ALL,
    config_file: ConfigOption = None,
):
    """
    List bookable slots for a doctor on a date.

    Examples:

        clinicslots slots 7f3c --date 2026-11-02 --service 12

        clinicslots slots 7f3c --duration 20 --filter paid
    """
    try:
        config = _load_config(config_file)
        target_date = _parse_date(on, config.timezone)
        service = _build_service(config)

        found = asyncio.run(
            service.find_slots(
                employee_id=employee_id,
                target_date=target_date,
                now=pendulum.now(config.timezone),
                service_id=service_id,
                duration_minutes=duration,
            )
        )
        _print_slots(found, target_date, payment)

    except (FileNotFoundError, ValueError, ClinicSlotsError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def reschedule(
    appointment_id: Annotated[str, typer.Argument(help="Appointment to move")],
    employee_id: Annotated[str, typer.Option("--employee", "-e", help="Doctor to move the appointment to")],
    on: Annotated[Optional[str], typer.Option("--date", "-d", help="New date (YYYY-MM-DD)")] = None,
    payment: Annotated[PaymentFilter, typer.Option("--filter", "-f", help="Show all, only free or only paid slots")] = PaymentFilter.ALL,
    config_file: ConfigOption = None,
):
    """
    List slots an existing appointment can be moved to.
    """
    try:
        config = _load_config(config_file)
        target_date = _parse_date(on, config.timezone)
        service = _build_service(config)

        found = asyncio.run(
            service.find_reschedule_slots(
                appointment_id=appointment_id,
                employee_id=employee_id,
                target_date=target_date,
                now=pendulum.now(config.timezone),
            )
        )
        _print_slots(found, target_date, payment)

    except DateBlockedError as e:
        console.print(f"[yellow]⚠ {e}[/yellow]")
        if e.exception.reason:
            console.print(f"   Reason: {e.exception.reason}")
        raise typer.Exit(1)

    except (FileNotFoundError, ValueError, ClinicSlotsError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def affected(
    employee_id: Annotated[str, typer.Argument(help="Doctor (employee) id")],
    config_file: ConfigOption = None,
):
    """
    List upcoming appointments that fall into a doctor's schedule exceptions.
    """
    try:
        config = _load_config(config_file)
        service = _build_service(config)

        found = asyncio.run(
            service.find_affected_appointments(
                employee_id=employee_id,
                today=pendulum.today(config.timezone).date(),
            )
        )

        if not found:
            console.print("\n[green]✓ No appointments need rescheduling.[/green]\n")
            return

        table = Table(
            title="Appointments to reschedule",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Appointment", style="bold yellow")
        table.add_column("Date")
        table.add_column("Time")
        table.add_column("Patient")
        table.add_column("Exception", style="dim")

        for item in found:
            appointment = item.appointment
            table.add_row(
                appointment.appointment_id,
                appointment.appointment_date.strftime("%d.%m.%Y") if appointment.appointment_date else "-",
                str(time_of_day_from_appointment(appointment.start_time) or "-"),
                appointment.patient_name or "-",
                f"{item.exception.exception_type.label} "
                f"({item.exception.date_from.strftime('%d.%m')}–{item.exception.date_to.strftime('%d.%m')})",
            )

        console.print()
        console.print(table)
        console.print()

    except (FileNotFoundError, ValueError, ClinicSlotsError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def schedule(
    employee_id: Annotated[str, typer.Argument(help="Doctor (employee) id")],
    config_file: ConfigOption = None,
):
    """
    Show a doctor's weekly schedule entries.
    """
    try:
        config = _load_config(config_file)
        data_source = _build_data_source(config)
        entries = asyncio.run(data_source.get_schedules(employee_id))

        if not entries:
            console.print("[yellow]No schedule entries for this doctor.[/yellow]")
            return

        table = Table(
            title="Weekly schedule",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Day", style="bold yellow")
        table.add_column("Hours")
        table.add_column("Paid hours")
        table.add_column("Effective", style="dim")

        for entry in sorted(entries, key=lambda e: (e.day_of_week, e.effective_from)):
            hours = (
                f"{entry.start_time} – {entry.end_time}"
                if entry.start_time and entry.end_time else "-"
            )
            paid = (
                f"{entry.paid_window.start} – {entry.paid_window.end}"
                if entry.paid_window else "-"
            )
            until = entry.effective_to.isoformat() if entry.effective_to else "open"
            table.add_row(
                WEEKDAY_NAMES[entry.day_of_week],
                hours,
                paid,
                f"{entry.effective_from.isoformat()} → {until}",
            )

        console.print()
        console.print(table)
        console.print()

    except (FileNotFoundError, ValueError, ClinicSlotsError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]clinicslots[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
