from __future__ import annotations

import questionary
from rich.console import Console
from rich.table import Table

from meterbill.cli.bill_menu import bills_table, consumer_names
from meterbill.cli.consumer_menu import BACK, select_consumer
from meterbill.dates import format_timestamp, parse_date
from meterbill.errors import ParseError
from meterbill.models import format_amount
from meterbill.services.consumer_service import ConsumerService
from meterbill.services.report_service import ReportService

console = Console()


def outstanding_menu(report_service: ReportService, consumer_service: ConsumerService) -> None:
    bills = report_service.outstanding_bills()
    if not bills:
        console.print("[green]No outstanding bills.[/green]")
        return
    console.print()
    console.print(bills_table(bills, consumer_names(consumer_service), "Outstanding Bills"))
    total = sum(b.total for b in bills)
    console.print(f"[bold]Total outstanding: {format_amount(total)}[/bold]")


def bills_between_menu(report_service: ReportService, consumer_service: ConsumerService) -> None:
    start_text = questionary.text("From date (YYYY-MM-DD):").ask()
    if start_text is None:
        return
    end_text = questionary.text("To date (YYYY-MM-DD):").ask()
    if end_text is None:
        return
    try:
        start, end = parse_date(start_text), parse_date(end_text)
    except ParseError as exc:
        console.print(f"[red]{exc}[/red]")
        return

    bills = report_service.bills_generated_between(start, end)
    if not bills:
        console.print("[yellow]No bills generated in that range.[/yellow]")
        return
    console.print()
    console.print(bills_table(bills, consumer_names(consumer_service), f"Bills generated {start} to {end}"))


def consumption_menu(report_service: ReportService, consumer_service: ConsumerService) -> None:
    scope = questionary.select("Consumption for:", choices=["All Consumers", "One Consumer", BACK]).ask()
    if scope is None or scope == BACK:
        return

    consumer_id = None
    if scope == "One Consumer":
        consumer = select_consumer(consumer_service)
        if consumer is None:
            return
        consumer_id = consumer.id

    summaries = report_service.consumption_summary(consumer_id)
    if not summaries:
        console.print("[yellow]No consumers.[/yellow]")
        return

    table = Table(title="Consumption Summary")
    table.add_column("Consumer", style="bold")
    table.add_column("First reading")
    table.add_column("Last reading")
    table.add_column("Units", justify="right")
    for summary in summaries:
        first, last = summary.first, summary.last
        table.add_row(
            summary.consumer.name,
            f"{format_timestamp(first.taken_at)} ({first.units})" if first else "-",
            f"{format_timestamp(last.taken_at)} ({last.units})" if last else "-",
            str(summary.total_units),
        )
    console.print()
    console.print(table)


def reports_menu(report_service: ReportService, consumer_service: ConsumerService) -> None:
    while True:
        choice = questionary.select(
            "Reports",
            choices=["Outstanding Bills", "Bills by Generation Date", "Consumption Summary", BACK],
        ).ask()

        if choice is None or choice == BACK:
            break
        elif choice == "Outstanding Bills":
            outstanding_menu(report_service, consumer_service)
        elif choice == "Bills by Generation Date":
            bills_between_menu(report_service, consumer_service)
        elif choice == "Consumption Summary":
            consumption_menu(report_service, consumer_service)
