from __future__ import annotations

import questionary
from rich.console import Console
from rich.table import Table

from meterbill.cli.consumer_menu import BACK
from meterbill.errors import ParseError
from meterbill.models import format_amount
from meterbill.services.tariff_service import TariffService

console = Console()


def show_tariff(tariff_service: TariffService) -> None:
    tariff = tariff_service.get_tariff()
    table = Table(title="Current Tariff")
    table.add_column("Slab")
    table.add_column("Units")
    table.add_column("Rate", justify="right")
    lower = 0
    for index, slab in enumerate(tariff.slabs, start=1):
        if slab.kind == "bounded":
            units = f"{lower + 1}-{lower + slab.threshold}"
            lower += slab.threshold
        else:
            units = f"above {lower}"
        table.add_row(str(index), units, str(slab.rate))
    console.print()
    console.print(table)
    console.print(f"  Fixed charge: {format_amount(tariff.fixed_charge)}")
    console.print(f"  Tax rate: {tariff.tax_rate}")
    if not tariff.is_open_ended:
        console.print("[yellow]  No unbounded slab: units above the last slab are free.[/yellow]")


def edit_slabs_menu(tariff_service: TariffService) -> None:
    current = tariff_service.get_tariff().to_text()
    text = questionary.text("Slabs (threshold:rate,...,inf:rate):", default=current).ask()
    if text is None:
        return
    try:
        tariff_service.replace_slabs(text)
    except ParseError as exc:
        console.print(f"[red]{exc}[/red]")
        return
    console.print("[green]Slabs updated.[/green]")


def edit_fixed_charge_menu(tariff_service: TariffService) -> None:
    text = questionary.text("Fixed charge:", default=str(tariff_service.get_tariff().fixed_charge)).ask()
    if text is None:
        return
    try:
        tariff_service.set_fixed_charge(text)
    except ParseError as exc:
        console.print(f"[red]{exc}[/red]")
        return
    console.print("[green]Fixed charge updated.[/green]")


def edit_tax_rate_menu(tariff_service: TariffService) -> None:
    text = questionary.text("Tax rate (e.g. 0.05):", default=str(tariff_service.get_tariff().tax_rate)).ask()
    if text is None:
        return
    try:
        tariff_service.set_tax_rate(text)
    except ParseError as exc:
        console.print(f"[red]{exc}[/red]")
        return
    console.print("[green]Tax rate updated.[/green]")


def preview_charge_menu(tariff_service: TariffService) -> None:
    text = questionary.text("Units to price:").ask()
    if text is None:
        return
    try:
        units = int(text.strip())
    except ValueError:
        units = -1
    if units < 0:
        console.print("[red]Invalid number of units.[/red]")
        return

    table = Table(title=f"Energy charge for {units} units")
    table.add_column("Slab")
    table.add_column("Units", justify="right")
    table.add_column("Rate", justify="right")
    table.add_column("Charge", justify="right")
    for line in tariff_service.preview(units):
        table.add_row(line.slab.label, str(line.units), str(line.slab.rate), format_amount(line.charge))
    console.print()
    console.print(table)
    console.print(f"[bold]Energy charge: {format_amount(tariff_service.calculate_charge(units))}[/bold]")


def tariff_menu(tariff_service: TariffService) -> None:
    while True:
        show_tariff(tariff_service)
        choice = questionary.select(
            "Tariff Settings",
            choices=["Edit Slabs", "Edit Fixed Charge", "Edit Tax Rate", "Preview Charge", BACK],
        ).ask()

        if choice is None or choice == BACK:
            break
        elif choice == "Edit Slabs":
            edit_slabs_menu(tariff_service)
        elif choice == "Edit Fixed Charge":
            edit_fixed_charge_menu(tariff_service)
        elif choice == "Edit Tax Rate":
            edit_tax_rate_menu(tariff_service)
        elif choice == "Preview Charge":
            preview_charge_menu(tariff_service)
