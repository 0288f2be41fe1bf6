from __future__ import annotations

import logging
from datetime import datetime

from dateutil.relativedelta import relativedelta

from meterbill.dates import now, parse_timestamp
from meterbill.models.reading import MeterReading
from meterbill.repositories.base import ConsumerRepository, ReadingRepository

logger = logging.getLogger(__name__)

SAMPLE_MONTHS = 6


class ReadingService:
    def __init__(self, reading_repo: ReadingRepository, consumer_repo: ConsumerRepository) -> None:
        self.reading_repo = reading_repo
        self.consumer_repo = consumer_repo

    def record_reading(self, consumer_id: int, units: int, taken_at: datetime | str | None = None) -> MeterReading:
        """Store a cumulative reading. ``taken_at`` may be text (``YYYY-MM-DD HH:MM``); blank means now."""
        if self.consumer_repo.get_by_id(consumer_id) is None:
            raise ValueError("Consumer not found")
        if not isinstance(taken_at, datetime):
            taken_at = parse_timestamp(taken_at)
        if units < 0:
            raise ValueError("Meter reading cannot be negative")
        reading = self.reading_repo.add(MeterReading(consumer_id=consumer_id, taken_at=taken_at, units=units))
        logger.info("Reading recorded: consumer=%s, at=%s, units=%d", consumer_id, taken_at, units)
        return reading

    def list_readings(self, consumer_id: int) -> list[MeterReading]:
        result = self.reading_repo.list_for_consumer(consumer_id)
        logger.debug("Listed %d readings for consumer=%s", len(result), consumer_id)
        return result

    def import_sample_readings(self, reference: datetime | None = None) -> int:
        """Append six monthly demo readings to every consumer. Returns the number added."""
        reference = reference or now()
        added = 0
        for consumer in self.consumer_repo.list_all():
            if consumer.id is None:  # pragma: no cover
                continue
            taken_at = reference - relativedelta(months=SAMPLE_MONTHS)
            units = 1000 + consumer.id * 50
            for _ in range(SAMPLE_MONTHS):
                taken_at += relativedelta(months=1)
                units += 80 + (consumer.id % 5) * 10
                self.reading_repo.add(MeterReading(consumer_id=consumer.id, taken_at=taken_at, units=units))
                added += 1
        logger.info("Imported %d sample readings", added)
        return added
