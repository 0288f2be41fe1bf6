"""Seed the store with demo consumers and readings.

Usage:
    python -m meterbill.scripts.seed
"""

from __future__ import annotations

import logging
from datetime import date, datetime

from dateutil.relativedelta import relativedelta
from rich.console import Console
from rich.table import Table

from meterbill.dates import format_timestamp, now
from meterbill.services.consumer_service import ConsumerService
from meterbill.services.reading_service import SAMPLE_MONTHS, ReadingService

logger = logging.getLogger(__name__)
console = Console()

# (name, address, phone, meter number, starting units, monthly increment)
SAMPLE_CONSUMERS = [
    ("Aman Sharma", "Mumbai", "9876500001", "MTR-1001", 1000, 120),
    ("Seema Roy", "Delhi", "9876500002", "MTR-1002", 800, 90),
]


def bootstrap_sample_data(
    consumer_service: ConsumerService,
    reading_service: ReadingService,
    reference: datetime | None = None,
) -> bool:
    """Create demo consumers with monthly readings when no consumer exists.

    Returns True when data was created.
    """
    if consumer_service.list_consumers():
        return False

    reference = reference or now()
    joined = date(reference.year, reference.month, reference.day) - relativedelta(years=1)
    for name, address, phone, meter_number, units, increment in SAMPLE_CONSUMERS:
        consumer = consumer_service.add_consumer(name, address, phone, meter_number, created_at=joined)
        taken_at = reference - relativedelta(months=SAMPLE_MONTHS)
        for _ in range(SAMPLE_MONTHS):
            taken_at += relativedelta(months=1)
            units += increment
            reading_service.record_reading(consumer.id, units, taken_at)
    logger.info("Sample consumers and readings created")
    return True


def main() -> None:
    from meterbill.db import initialize_db
    from meterbill.logging import configure_logging, reconfigure
    from meterbill.repositories.factory import (
        get_bill_repository,
        get_consumer_repository,
        get_id_allocator,
        get_reading_repository,
    )
    from meterbill.settings import settings

    configure_logging()
    if settings.uses_database():
        initialize_db()
        reconfigure()

    consumer_repo = get_consumer_repository()
    reading_repo = get_reading_repository()
    consumer_service = ConsumerService(consumer_repo, reading_repo, get_bill_repository(), get_id_allocator())
    reading_service = ReadingService(reading_repo, consumer_repo)

    if not bootstrap_sample_data(consumer_service, reading_service):
        console.print("[yellow]Consumers already exist; nothing seeded.[/yellow]")
        return

    table = Table(title="Seeded readings")
    table.add_column("Consumer")
    table.add_column("When")
    table.add_column("Units", justify="right")
    for consumer in consumer_service.list_consumers():
        for reading in reading_service.list_readings(consumer.id):
            table.add_row(consumer.name, format_timestamp(reading.taken_at), str(reading.units))
    console.print(table)


if __name__ == "__main__":
    main()
