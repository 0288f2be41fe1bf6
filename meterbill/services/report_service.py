from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from meterbill.dates import parse_date
from meterbill.models.bill import Bill
from meterbill.models.consumer import Consumer
from meterbill.models.reading import MeterReading
from meterbill.repositories.base import BillRepository, ConsumerRepository, ReadingRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConsumptionSummary:
    consumer: Consumer
    first: MeterReading | None
    last: MeterReading | None

    @property
    def total_units(self) -> int:
        # Single reading or none: nothing to difference.
        if self.first is None or self.last is None or self.first is self.last:
            return 0
        return self.last.units - self.first.units


class ReportService:
    def __init__(
        self,
        bill_repo: BillRepository,
        consumer_repo: ConsumerRepository,
        reading_repo: ReadingRepository,
    ) -> None:
        self.bill_repo = bill_repo
        self.consumer_repo = consumer_repo
        self.reading_repo = reading_repo

    def outstanding_bills(self) -> list[Bill]:
        result = sorted(self.bill_repo.list_bills(paid=False), key=lambda b: (b.period, b.id or 0))
        logger.debug("Outstanding bills: %d", len(result))
        return result

    def bills_generated_between(self, start: date | str, end: date | str) -> list[Bill]:
        """Bills whose generation date falls in ``[start, end]``, oldest first."""
        if not isinstance(start, date):
            start = parse_date(start)
        if not isinstance(end, date):
            end = parse_date(end)
        result = [
            b
            for b in self.bill_repo.list_bills()
            if b.generated_at is not None and start <= b.generated_at.date() <= end
        ]
        result.sort(key=lambda b: b.generated_at)
        logger.debug("Bills generated between %s and %s: %d", start, end, len(result))
        return result

    def consumption_summary(self, consumer_id: int | None = None) -> list[ConsumptionSummary]:
        """First-to-last reading consumption per consumer (or for one consumer)."""
        if consumer_id is not None:
            consumer = self.consumer_repo.get_by_id(consumer_id)
            if consumer is None:
                raise ValueError("Consumer not found")
            consumers = [consumer]
        else:
            consumers = self.consumer_repo.list_all()

        summaries: list[ConsumptionSummary] = []
        for consumer in consumers:
            readings = self.reading_repo.list_for_consumer(consumer.id) if consumer.id is not None else []
            summaries.append(
                ConsumptionSummary(
                    consumer=consumer,
                    first=readings[0] if readings else None,
                    last=readings[-1] if readings else None,
                )
            )
        return summaries
