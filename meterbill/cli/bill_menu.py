from __future__ import annotations

import questionary
from rich.console import Console
from rich.table import Table

from meterbill.cli.consumer_menu import BACK
from meterbill.constants import format_period
from meterbill.dates import format_timestamp, parse_period
from meterbill.errors import ParseError
from meterbill.models import format_amount
from meterbill.models.bill import Bill
from meterbill.services.bill_service import BillService, GenerationStatus, PaymentStatus
from meterbill.services.consumer_service import ConsumerService

console = Console()

STATUS_STYLES = {
    GenerationStatus.CREATED: "green",
    GenerationStatus.UPDATED: "cyan",
    GenerationStatus.SKIPPED: "yellow",
}


def prompt_period(message: str = "Billing month (YYYY-MM) or blank = current:") -> str | None:
    while True:
        value = questionary.text(message).ask()
        if value is None:
            return None
        try:
            return parse_period(value)
        except ParseError as exc:
            console.print(f"[red]{exc}[/red]")


def consumer_names(consumer_service: ConsumerService) -> dict[int, str]:
    return {c.id: c.name for c in consumer_service.list_consumers() if c.id is not None}


def generate_bills_menu(bill_service: BillService, consumer_service: ConsumerService) -> None:
    period = prompt_period()
    if period is None:
        return

    with console.status("Generating bills..."):
        results = bill_service.generate_for_period(period)

    if not results:
        console.print("[yellow]No consumers to bill.[/yellow]")
        return

    names = consumer_names(consumer_service)
    table = Table(title=f"Bills for {format_period(period)}")
    table.add_column("Consumer")
    table.add_column("Status")
    table.add_column("Units", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Note", style="dim")
    for consumer_id, result in results.items():
        style = STATUS_STYLES[result.status]
        bill = result.bill
        table.add_row(
            names.get(consumer_id, str(consumer_id)),
            f"[{style}]{result.status.value}[/{style}]",
            str(bill.units_consumed) if bill else "-",
            format_amount(bill.total) if bill else "-",
            result.reason,
        )
    console.print()
    console.print(table)

    billed = sum(1 for r in results.values() if r.status != GenerationStatus.SKIPPED)
    console.print(f"[green]Generated/updated bills for {billed} consumers for {period}.[/green]")


def bills_table(bills: list[Bill], names: dict[int, str], title: str) -> Table:
    table = Table(title=title)
    table.add_column("ID", style="dim")
    table.add_column("Consumer", style="bold")
    table.add_column("Month")
    table.add_column("Units", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Status")
    for bill in bills:
        status = "[green]Paid[/green]" if bill.paid else "[red]Unpaid[/red]"
        table.add_row(
            str(bill.id),
            names.get(bill.consumer_id, str(bill.consumer_id)),
            bill.period,
            str(bill.units_consumed),
            format_amount(bill.total),
            status,
        )
    return table


def show_bill_detail(bill: Bill, consumer_name: str) -> None:
    console.print()
    console.print(f"[bold]Bill #{bill.id}[/bold] - {consumer_name}", style="cyan")
    console.print(f"  Month: {format_period(bill.period)}")
    console.print(f"  Units consumed: {bill.units_consumed}")
    console.print(f"  Energy charge: {format_amount(bill.energy_charge)}")
    console.print(f"  Fixed charge: {format_amount(bill.fixed_charge)}")
    console.print(f"  Tax ({bill.tax_rate}): {format_amount(bill.tax_amount)}")
    console.print(f"  [bold]Total: {format_amount(bill.total)}[/bold]")
    console.print(f"  Generated: {format_timestamp(bill.generated_at)}")
    if bill.paid:
        console.print(f"  [green]Paid on {format_timestamp(bill.paid_at)}[/green]")
    else:
        console.print("  [red]Unpaid[/red]")


def list_bills_menu(bill_service: BillService, consumer_service: ConsumerService) -> None:
    bills = bill_service.list_bills()
    if not bills:
        console.print("[yellow]No bills.[/yellow]")
        return
    bills.sort(key=lambda b: (b.period, b.id or 0), reverse=True)
    console.print()
    console.print(bills_table(bills, consumer_names(consumer_service), "Bills"))


def _select_bill(bills: list[Bill], names: dict[int, str], message: str) -> Bill | None:
    bill_choices = {
        f"{b.id} - {names.get(b.consumer_id, b.consumer_id)} - {b.period} - {format_amount(b.total)}": b
        for b in bills
    }
    choice = questionary.select(message, choices=list(bill_choices.keys()) + [BACK]).ask()
    if choice is None or choice == BACK:
        return None
    return bill_choices[choice]


def view_bill_menu(bill_service: BillService, consumer_service: ConsumerService) -> None:
    bills = bill_service.list_bills()
    if not bills:
        console.print("[yellow]No bills.[/yellow]")
        return
    names = consumer_names(consumer_service)
    bill = _select_bill(bills, names, "Select a bill:")
    if bill is None:
        return
    show_bill_detail(bill, names.get(bill.consumer_id, str(bill.consumer_id)))


def pay_bill_menu(bill_service: BillService, consumer_service: ConsumerService) -> None:
    unpaid = bill_service.list_bills(paid=False)
    if not unpaid:
        console.print("[green]No unpaid bills.[/green]")
        return
    names = consumer_names(consumer_service)
    bill = _select_bill(unpaid, names, "Bill to pay:")
    if bill is None or bill.id is None:
        return

    confirm = questionary.confirm(f"Amount due: {format_amount(bill.total)}. Confirm payment?", default=True).ask()
    if not confirm:
        console.print("[yellow]Payment cancelled.[/yellow]")
        return

    result = bill_service.pay_bill(bill.id)
    if result.status == PaymentStatus.PAID:
        console.print(f"[green]Payment recorded at {format_timestamp(result.bill.paid_at)}.[/green]")
    elif result.status == PaymentStatus.ALREADY_PAID:
        console.print(f"[yellow]Already paid on {format_timestamp(result.bill.paid_at)}.[/yellow]")
    else:
        console.print("[red]Bill not found.[/red]")


def bills_menu(bill_service: BillService, consumer_service: ConsumerService) -> None:
    while True:
        choice = questionary.select(
            "Bills",
            choices=["List Bills", "View Bill", "Pay Bill", "Regenerate Month", BACK],
        ).ask()

        if choice is None or choice == BACK:
            break
        elif choice == "List Bills":
            list_bills_menu(bill_service, consumer_service)
        elif choice == "View Bill":
            view_bill_menu(bill_service, consumer_service)
        elif choice == "Pay Bill":
            pay_bill_menu(bill_service, consumer_service)
        elif choice == "Regenerate Month":
            generate_bills_menu(bill_service, consumer_service)
