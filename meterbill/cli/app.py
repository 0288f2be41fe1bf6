import questionary
from rich.console import Console

from meterbill.cli.bill_menu import bills_menu, generate_bills_menu
from meterbill.cli.consumer_menu import consumers_menu
from meterbill.cli.reading_menu import readings_menu
from meterbill.cli.report_menu import reports_menu
from meterbill.cli.tariff_menu import tariff_menu
from meterbill.repositories.factory import (
    get_bill_repository,
    get_consumer_repository,
    get_id_allocator,
    get_reading_repository,
    get_tariff_repository,
)
from meterbill.scripts.seed import bootstrap_sample_data
from meterbill.services.bill_service import BillService
from meterbill.services.consumer_service import ConsumerService
from meterbill.services.reading_service import ReadingService
from meterbill.services.report_service import ReportService
from meterbill.services.tariff_service import TariffService
from meterbill.settings import settings

console = Console()


def _build_services() -> tuple[ConsumerService, ReadingService, BillService, TariffService, ReportService]:
    consumer_repo = get_consumer_repository()
    reading_repo = get_reading_repository()
    bill_repo = get_bill_repository()
    id_allocator = get_id_allocator()
    tariff_service = TariffService(get_tariff_repository())
    return (
        ConsumerService(consumer_repo, reading_repo, bill_repo, id_allocator),
        ReadingService(reading_repo, consumer_repo),
        BillService(bill_repo, reading_repo, consumer_repo, tariff_service, id_allocator),
        tariff_service,
        ReportService(bill_repo, consumer_repo, reading_repo),
    )


def main_menu() -> None:
    consumer_service, reading_service, bill_service, tariff_service, report_service = _build_services()

    if settings.bootstrap_sample_data and bootstrap_sample_data(consumer_service, reading_service):
        console.print("[dim]Sample consumers and readings loaded.[/dim]")

    console.print()
    console.print("[bold]Electricity Billing[/bold]", style="cyan")
    console.print()

    while True:
        choice = questionary.select(
            "Main Menu",
            choices=[
                "Consumers",
                "Meter Readings",
                "Generate Bills",
                "Bills",
                "Reports",
                "Tariff Settings",
                "Exit",
            ],
        ).ask()

        if choice is None or choice == "Exit":
            console.print("[bold]Goodbye![/bold]")
            break
        elif choice == "Consumers":
            consumers_menu(consumer_service)
        elif choice == "Meter Readings":
            readings_menu(consumer_service, reading_service)
        elif choice == "Generate Bills":
            generate_bills_menu(bill_service, consumer_service)
        elif choice == "Bills":
            bills_menu(bill_service, consumer_service)
        elif choice == "Reports":
            reports_menu(report_service, consumer_service)
        elif choice == "Tariff Settings":
            tariff_menu(tariff_service)
