"""
Main CLI application using Typer.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Annotated, Iterator, List, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ..adapters.mock_supabase_client import MockSupabaseAuthenticator, MockSupabaseClient
from ..adapters.supabase_auth import SupabaseAuthenticator
from ..adapters.supabase_client import SupabaseClient
from ..config import AppConfig, get_default_config_path
from ..domain.calendar import format_day_label, format_long_date, upcoming_booking_dates
from ..domain.exceptions import (
    BarbershopError,
    BookingConflictError,
    InvalidInputError,
    StoreError,
)
from ..domain.models import (
    AppointmentStatus,
    Barber,
    BookingRequest,
    ServiceType,
    parse_date,
    service_label,
)
from ..domain.slot_calculator import SlotCalculator
from ..services.admin import AdminService
from ..services.booking import BookingService

app = typer.Typer(
    name="elitecuts",
    help="Book appointments at Elite Cuts and manage barber availability",
    add_completion=False
)
admin_app = typer.Typer(help="Admin dashboard: appointments and barber availability")
app.add_typer(admin_app, name="admin")

console = Console()
err_console = Console(stderr=True)


@dataclass
class CliState:
    config_file: Optional[Path] = None
    mock: bool = False


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    mock: Annotated[bool, typer.Option("--mock", help="Use in-memory demo data instead of Supabase.")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """
    Elite Cuts booking tools.
    """
    _configure_logging(verbose)
    ctx.obj = CliState(config_file=config_file, mock=mock)


@contextmanager
def _handle_errors() -> Iterator[None]:
    """Print known failures and exit with status 1."""
    try:
        yield
    except FileNotFoundError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)
    except BookingConflictError as e:
        console.print(
            "[bold red]Booking failed:[/bold red] that time was just taken. "
            "Please choose another slot."
        )
        logging.getLogger(__name__).debug("Conflict: %s", e)
        raise typer.Exit(1)
    except StoreError as e:
        console.print(f"[bold red]Something went wrong.[/bold red] Please try again.\n[dim]{e}[/dim]")
        raise typer.Exit(1)
    except (BarbershopError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


def _load_config(ctx: typer.Context) -> AppConfig:
    state: CliState = ctx.obj or CliState()
    config_path = state.config_file or get_default_config_path()
    return AppConfig.load_from_yaml(config_path)


def _is_mock(ctx: typer.Context) -> bool:
    return bool(ctx.obj and ctx.obj.mock)


def _today(config: AppConfig) -> date:
    return pendulum.today(config.timezone).date()


def _build_store(ctx: typer.Context, config: AppConfig):
    if _is_mock(ctx):
        return MockSupabaseClient(
            data_file=config.mock_data_file,
            today=_today(config),
            seed_days=config.defaults.booking_horizon_days
        )
    return SupabaseClient(url=config.supabase_url, api_key=config.supabase_anon_key)


def _build_booking_service(ctx: typer.Context, config: AppConfig) -> BookingService:
    return BookingService(
        store=_build_store(ctx, config),
        slot_calculator=SlotCalculator(step_minutes=config.defaults.slot_minutes)
    )


def _build_admin_service(ctx: typer.Context, config: AppConfig) -> AdminService:
    if _is_mock(ctx):
        authenticator = MockSupabaseAuthenticator()
    else:
        authenticator = SupabaseAuthenticator(
            url=config.supabase_url,
            api_key=config.supabase_anon_key,
            cache_file=config.session_cache_file
        )
    return AdminService(
        store=_build_store(ctx, config),
        authenticator=authenticator,
        default_start=config.defaults.get_start_time(),
        default_end=config.defaults.get_end_time()
    )


def _print_mock_banner(ctx: typer.Context) -> None:
    if _is_mock(ctx):
        console.print("[yellow]⚠  MOCK MODE: demo data, changes are not saved[/yellow]\n")


def _pick(options: List[str], prompt: str, default: int = 1) -> int:
    """Prompt for a 1-based choice and return the 0-based index."""
    for idx, option in enumerate(options, 1):
        console.print(f"  {idx}. {option}")

    choice = typer.prompt(prompt, default=default, type=int)
    if not 1 <= choice <= len(options):
        raise InvalidInputError(f"Choice {choice} is out of range 1-{len(options)}")
    return choice - 1


# ========== Booking flow ==========


@app.command()
def barbers(ctx: typer.Context):
    """
    List barbers that can be booked.
    """
    with _handle_errors():
        config = _load_config(ctx)
        service = _build_booking_service(ctx, config)
        _print_mock_banner(ctx)

        barber_list = service.list_barbers()
        if not barber_list:
            console.print("[yellow]No barbers are currently taking bookings.[/yellow]")
            return

        table = Table(title="Barbers", show_header=True, header_style="bold cyan")
        table.add_column("#", style="dim")
        table.add_column("Name", style="bold yellow")
        table.add_column("ID", style="dim")

        for idx, barber in enumerate(barber_list, 1):
            table.add_row(str(idx), barber.name, barber.id)

        console.print(table)


@app.command()
def dates(
    ctx: typer.Context,
    lang: Annotated[Optional[str], typer.Option("--lang", help="Locale for day names (en, da, ar)")] = None,
):
    """
    Show the dates open for booking (tomorrow onwards).
    """
    with _handle_errors():
        config = _load_config(ctx)
        locale = lang or config.language

        for day in upcoming_booking_dates(_today(config), config.defaults.booking_horizon_days):
            console.print(f"  {day.isoformat()}  {format_day_label(day, locale)}")


@app.command()
def slots(
    ctx: typer.Context,
    barber: Annotated[str, typer.Argument(help="Barber name, ID or list number")],
    day: Annotated[str, typer.Argument(metavar="DATE", help="Date (YYYY-MM-DD)")],
):
    """
    Show free time slots for a barber on a date.
    """
    with _handle_errors():
        config = _load_config(ctx)
        service = _build_booking_service(ctx, config)
        _print_mock_banner(ctx)

        selected = service.resolve_barber(barber)
        selected_day = parse_date(day)
        free = service.available_slots(selected.id, selected_day)

        if not free:
            console.print(
                f"[yellow]⚠ No available time slots for {selected.name} on "
                f"{selected_day.isoformat()}.[/yellow]"
            )
            return

        console.print(
            f"[bold green]✓ {len(free)} free slot(s) with {selected.name} on "
            f"{selected_day.isoformat()}:[/bold green]\n"
        )
        console.print("  " + "  ".join(free))


def _run_booking_wizard(
    service: BookingService,
    config: AppConfig,
    locale: str,
    barber: Optional[str],
    day: Optional[str],
    slot: Optional[str],
) -> tuple[Barber, date, str]:
    """
    Walk through barber, date and time selection, skipping given answers.

    Returns:
        Selected barber, date and slot label
    """
    # 1. Barber
    if barber:
        selected = service.resolve_barber(barber)
    else:
        console.print("[bold]1️⃣  Select barber[/bold]")
        barber_list = service.list_barbers()
        if not barber_list:
            raise InvalidInputError("No barbers are currently taking bookings.")
        selected = barber_list[_pick([b.name for b in barber_list], "→ Barber")]

    # 2. Date
    if day:
        selected_day = parse_date(day)
    else:
        console.print("\n[bold]2️⃣  Select date[/bold]")
        options = upcoming_booking_dates(_today(config), config.defaults.booking_horizon_days)
        labels = [f"{d.isoformat()} ({format_day_label(d, locale)})" for d in options]
        selected_day = options[_pick(labels, "→ Date")]

    # 3. Time
    if slot:
        return selected, selected_day, service.check_slot(selected.id, selected_day, slot)

    console.print("\n[bold]3️⃣  Select time[/bold]")
    free = service.available_slots(selected.id, selected_day)
    if not free:
        raise InvalidInputError(
            f"No available time slots for {selected.name} on {selected_day.isoformat()}"
        )
    return selected, selected_day, free[_pick(free, "→ Time")]


@app.command()
def book(
    ctx: typer.Context,
    barber: Annotated[Optional[str], typer.Option("--barber", "-b", help="Barber name, ID or list number")] = None,
    day: Annotated[Optional[str], typer.Option("--date", "-d", help="Date (YYYY-MM-DD)")] = None,
    slot: Annotated[Optional[str], typer.Option("--time", "-t", help="Time slot (HH:MM)")] = None,
    name: Annotated[Optional[str], typer.Option("--name", help="Your full name")] = None,
    email: Annotated[Optional[str], typer.Option("--email", help="Your e-mail address")] = None,
    phone: Annotated[Optional[str], typer.Option("--phone", help="Your phone number")] = None,
    service_type: Annotated[Optional[ServiceType], typer.Option("--service", help="Requested service")] = None,
    lang: Annotated[Optional[str], typer.Option("--lang", help="Locale for day names (en, da, ar)")] = None,
):
    """
    Book an appointment - interactive, or fully scripted with options.

    Examples:

        # Interactive mode
        elitecuts book

        # Batch mode
        elitecuts book --barber Ahmad --date 2024-11-25 --time 10:30 \\
            --name "John Doe" --email john@example.com --phone "+45 12 34 56 78"
    """
    with _handle_errors():
        config = _load_config(ctx)
        service = _build_booking_service(ctx, config)
        _print_mock_banner(ctx)

        console.print("[bold cyan]✂️  Book your appointment[/bold cyan]\n")

        selected, selected_day, selected_slot = _run_booking_wizard(
            service, config, lang or config.language, barber, day, slot
        )

        if not (name and email and phone):
            console.print("\n[bold]4️⃣  Customer details[/bold]")
        request = BookingRequest.from_form(
            customer_name=name or typer.prompt("→ Full name"),
            customer_email=email or typer.prompt("→ E-mail address"),
            customer_phone=phone or typer.prompt("→ Phone number"),
            barber_id=selected.id,
            appointment_date=selected_day,
            appointment_time=selected_slot,
            service_type=service_type,
        )

        appointment = service.book(request)

        console.print()
        console.print(Panel.fit(
            f"[bold green]✓ Your appointment has been successfully booked.[/bold green]\n\n"
            f"[bold]Date:[/bold] {appointment.appointment_date.isoformat()}\n"
            f"[bold]Time:[/bold] {appointment.appointment_time}\n"
            f"[bold]Barber:[/bold] {selected.name}",
            title="Booking Confirmed!"
        ))


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]elitecuts[/bold cyan] version [bold]{__version__}[/bold]\n")


# ========== Admin dashboard ==========


def _resolve_any_barber(service: AdminService, identifier: str) -> Barber:
    for barber in service.barbers():
        if barber.id == identifier or barber.name.lower() == identifier.lower():
            return barber
    raise InvalidInputError(f"Unknown barber: '{identifier}'")


@admin_app.command("login")
def admin_login(
    ctx: typer.Context,
    email: Annotated[str, typer.Option("--email", prompt=True, help="Admin e-mail")],
    password: Annotated[str, typer.Option("--password", prompt=True, hide_input=True, help="Password")],
):
    """
    Sign in to the admin dashboard.
    """
    with _handle_errors():
        config = _load_config(ctx)
        service = _build_admin_service(ctx, config)
        session = service.login(email, password)
        console.print(f"[green]✓ Signed in as {session.email}[/green]")


@admin_app.command("logout")
def admin_logout(ctx: typer.Context):
    """
    Sign out and clear the cached session.
    """
    with _handle_errors():
        config = _load_config(ctx)
        _build_admin_service(ctx, config).logout()
        console.print("[green]✓ You have been successfully logged out.[/green]")


@admin_app.command("appointments")
def admin_appointments(ctx: typer.Context):
    """
    Show appointment statistics and all appointments.
    """
    with _handle_errors():
        config = _load_config(ctx)
        service = _build_admin_service(ctx, config)
        _print_mock_banner(ctx)

        summary = service.dashboard(_today(config))
        names = {barber.id: barber.name for barber in summary.barbers}
        appointments = summary.appointments

        console.print(
            f"[bold]Total:[/bold] {summary.total}   "
            f"[bold]Today:[/bold] {summary.today}   "
            f"[bold]Upcoming:[/bold] {summary.upcoming}\n"
        )

        if not appointments:
            console.print("[yellow]No appointments found.[/yellow]")
            return

        table = Table(title="All Appointments", show_header=True, header_style="bold cyan")
        for column in ("ID", "Customer", "Contact", "Date & Time", "Service", "Barber", "Status", "Booked"):
            table.add_column(column)

        status_styles = {
            AppointmentStatus.CONFIRMED: "green",
            AppointmentStatus.CANCELLED: "red",
            AppointmentStatus.COMPLETED: "blue",
        }

        for appointment in appointments:
            style = status_styles.get(appointment.status, "grey50")
            table.add_row(
                appointment.id,
                appointment.customer_name,
                f"{appointment.customer_email}\n{appointment.customer_phone}",
                f"{format_long_date(appointment.appointment_date, config.language)}\n{appointment.appointment_time}",
                service_label(appointment.service_type),
                names.get(appointment.barber_id, "Unknown"),
                f"[{style}]{appointment.status_text}[/{style}]",
                format_long_date(appointment.created_at.date(), config.language) if appointment.created_at else "-",
            )

        console.print(table)


@admin_app.command("availability")
def admin_availability(
    ctx: typer.Context,
    day: Annotated[Optional[str], typer.Argument(metavar="DATE", help="Date (YYYY-MM-DD), defaults to today")] = None,
):
    """
    Show every barber's availability for a date.
    """
    with _handle_errors():
        config = _load_config(ctx)
        service = _build_admin_service(ctx, config)
        _print_mock_banner(ctx)

        selected_day = parse_date(day) if day else _today(config)

        table = Table(
            title=f"Barber Availability - {selected_day.isoformat()}",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Barber", style="bold yellow")
        table.add_column("Status")
        table.add_column("Available")
        table.add_column("Start Time")
        table.add_column("End Time")

        for barber, record in service.availability_for(selected_day):
            table.add_row(
                barber.name,
                "Active" if barber.is_active else "Inactive",
                "[green]yes[/green]" if record.is_available else "[red]no[/red]",
                record.start_time.strftime("%H:%M"),
                record.end_time.strftime("%H:%M"),
            )

        console.print(table)


@admin_app.command("set-availability")
def admin_set_availability(
    ctx: typer.Context,
    barber: Annotated[str, typer.Argument(help="Barber name or ID")],
    day: Annotated[str, typer.Argument(metavar="DATE", help="Date (YYYY-MM-DD)")],
    available: Annotated[bool, typer.Option("--available/--unavailable", help="Open or close the day")] = True,
    start: Annotated[Optional[str], typer.Option("--start", help="Start time (HH:MM)")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="End time (HH:MM)")] = None,
):
    """
    Open or close a barber's day and set the working hours.
    """
    with _handle_errors():
        config = _load_config(ctx)
        service = _build_admin_service(ctx, config)
        _print_mock_banner(ctx)

        selected = _resolve_any_barber(service, barber)
        record = service.set_availability(
            selected.id, parse_date(day), available, start_time=start, end_time=end
        )

        state = "available" if record.is_available else "unavailable"
        console.print(
            f"[green]✓ {selected.name} is {state} on {record.date.isoformat()} "
            f"({record.start_time.strftime('%H:%M')} - {record.end_time.strftime('%H:%M')})[/green]"
        )


@admin_app.command("status")
def admin_status(
    ctx: typer.Context,
    appointment_id: Annotated[str, typer.Argument(help="Appointment ID")],
    status: Annotated[AppointmentStatus, typer.Argument(help="New status")],
):
    """
    Change an appointment's status (confirmed, cancelled, completed).
    """
    with _handle_errors():
        config = _load_config(ctx)
        service = _build_admin_service(ctx, config)
        appointment = service.set_appointment_status(appointment_id, status)
        console.print(f"[green]✓ {appointment.format_display()}[/green]")


if __name__ == "__main__":
    app()
