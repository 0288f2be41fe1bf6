from __future__ import annotations

import questionary
from rich.console import Console
from rich.table import Table

from meterbill.models.consumer import Consumer
from meterbill.services.consumer_service import ConsumerService

console = Console()

BACK = "Back"


def _optional(value: str) -> str:
    return value or "-"


def select_consumer(consumer_service: ConsumerService, message: str = "Select a consumer:") -> Consumer | None:
    consumers = consumer_service.list_consumers()
    if not consumers:
        console.print("[yellow]No consumers registered.[/yellow]")
        return None
    consumer_choices = {f"{c.id} - {c.name}": c for c in consumers}
    choice = questionary.select(message, choices=list(consumer_choices.keys()) + [BACK]).ask()
    if choice is None or choice == BACK:
        return None
    return consumer_choices[choice]


def add_consumer_menu(consumer_service: ConsumerService) -> None:
    console.print()
    console.print("[bold]Add Consumer[/bold]", style="cyan")

    name = questionary.text("Name:").ask()
    if not name:
        console.print("[yellow]Operation cancelled.[/yellow]")
        return
    address = questionary.text("Address:").ask() or ""
    phone = questionary.text("Phone:").ask() or ""
    meter_number = questionary.text("Meter number:").ask() or ""

    consumer = consumer_service.add_consumer(name, address, phone, meter_number)
    console.print(f"[green]Consumer added with ID: {consumer.id}[/green]")


def list_consumers_menu(consumer_service: ConsumerService) -> None:
    consumers = consumer_service.list_consumers()
    if not consumers:
        console.print("[yellow]No consumers.[/yellow]")
        return

    table = Table(title="Consumers")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Phone")
    table.add_column("Meter #")
    table.add_column("Joined")
    for c in consumers:
        table.add_row(
            str(c.id),
            c.name,
            _optional(c.phone),
            _optional(c.meter_number),
            c.created_at.isoformat() if c.created_at else "-",
        )
    console.print()
    console.print(table)


def update_consumer_menu(consumer_service: ConsumerService) -> None:
    consumer = select_consumer(consumer_service, "Consumer to update:")
    if consumer is None or consumer.id is None:
        return

    console.print("[dim]Leave blank to keep the current value.[/dim]")
    name = questionary.text(f"Name ({consumer.name}):").ask() or ""
    address = questionary.text(f"Address ({_optional(consumer.address)}):").ask() or ""
    phone = questionary.text(f"Phone ({_optional(consumer.phone)}):").ask() or ""
    meter_number = questionary.text(f"Meter # ({_optional(consumer.meter_number)}):").ask() or ""

    consumer_service.update_consumer(consumer.id, name, address, phone, meter_number)
    console.print("[green]Updated.[/green]")


def delete_consumer_menu(consumer_service: ConsumerService) -> None:
    consumer = select_consumer(consumer_service, "Consumer to delete:")
    if consumer is None or consumer.id is None:
        return

    confirm = questionary.confirm(f"Delete '{consumer.name}' and their readings?", default=False).ask()
    if not confirm:
        return
    try:
        consumer_service.delete_consumer(consumer.id)
    except ValueError as exc:
        console.print(f"[red]{exc}. Remove bills first.[/red]")
        return
    console.print("[green]Deleted.[/green]")


def consumers_menu(consumer_service: ConsumerService) -> None:
    while True:
        choice = questionary.select(
            "Consumers",
            choices=["Add Consumer", "List Consumers", "Update Consumer", "Delete Consumer", BACK],
        ).ask()

        if choice is None or choice == BACK:
            break
        elif choice == "Add Consumer":
            add_consumer_menu(consumer_service)
        elif choice == "List Consumers":
            list_consumers_menu(consumer_service)
        elif choice == "Update Consumer":
            update_consumer_menu(consumer_service)
        elif choice == "Delete Consumer":
            delete_consumer_menu(consumer_service)
