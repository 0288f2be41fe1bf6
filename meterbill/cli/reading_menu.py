from __future__ import annotations

import questionary
from rich.console import Console
from rich.table import Table

from meterbill.cli.consumer_menu import BACK, select_consumer
from meterbill.dates import format_timestamp, parse_timestamp
from meterbill.errors import ParseError
from meterbill.services.consumer_service import ConsumerService
from meterbill.services.reading_service import ReadingService

console = Console()


def _prompt_units() -> int | None:
    while True:
        val = questionary.text("Meter reading (cumulative units):").ask()
        if val is None:
            return None
        try:
            units = int(val.strip())
        except ValueError:
            units = -1
        if units >= 0:
            return units
        console.print("[red]Invalid number. Try again.[/red]")


def add_reading_menu(consumer_service: ConsumerService, reading_service: ReadingService) -> None:
    consumer = select_consumer(consumer_service)
    if consumer is None or consumer.id is None:
        return

    when = questionary.text("Reading date-time (YYYY-MM-DD HH:MM) or blank = now:").ask()
    if when is None:
        return
    try:
        taken_at = parse_timestamp(when)
    except ParseError as exc:
        console.print(f"[red]{exc}[/red]")
        return

    units = _prompt_units()
    if units is None:
        return

    reading_service.record_reading(consumer.id, units, taken_at)
    console.print("[green]Reading saved.[/green]")


def list_readings_menu(consumer_service: ConsumerService, reading_service: ReadingService) -> None:
    consumer = select_consumer(consumer_service)
    if consumer is None or consumer.id is None:
        return

    readings = reading_service.list_readings(consumer.id)
    if not readings:
        console.print("[yellow]No readings.[/yellow]")
        return

    table = Table(title=f"Readings - {consumer.name}")
    table.add_column("When")
    table.add_column("Units", justify="right")
    for r in readings:
        table.add_row(format_timestamp(r.taken_at), str(r.units))
    console.print()
    console.print(table)


def readings_menu(consumer_service: ConsumerService, reading_service: ReadingService) -> None:
    while True:
        choice = questionary.select(
            "Meter Readings",
            choices=["Add Reading", "List Readings", "Import Sample Readings", BACK],
        ).ask()

        if choice is None or choice == BACK:
            break
        elif choice == "Add Reading":
            add_reading_menu(consumer_service, reading_service)
        elif choice == "List Readings":
            list_readings_menu(consumer_service, reading_service)
        elif choice == "Import Sample Readings":
            added = reading_service.import_sample_readings()
            console.print(f"[green]{added} sample readings imported.[/green]")
