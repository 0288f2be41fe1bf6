from __future__ import annotations

import logging
from datetime import date

from meterbill.constants import CONSUMER_SEQUENCE
from meterbill.models.consumer import Consumer
from meterbill.repositories.base import BillRepository, ConsumerRepository, IdAllocator, ReadingRepository

logger = logging.getLogger(__name__)


class ConsumerService:
    def __init__(
        self,
        consumer_repo: ConsumerRepository,
        reading_repo: ReadingRepository,
        bill_repo: BillRepository,
        id_allocator: IdAllocator,
    ) -> None:
        self.consumer_repo = consumer_repo
        self.reading_repo = reading_repo
        self.bill_repo = bill_repo
        self.id_allocator = id_allocator

    def add_consumer(
        self,
        name: str,
        address: str = "",
        phone: str = "",
        meter_number: str = "",
        created_at: date | None = None,
    ) -> Consumer:
        if not name.strip():
            raise ValueError("Consumer name is required")
        consumer = Consumer(
            id=self.id_allocator.next_id(CONSUMER_SEQUENCE),
            name=name.strip(),
            address=address.strip(),
            phone=phone.strip(),
            meter_number=meter_number.strip(),
            created_at=created_at or date.today(),
        )
        result = self.consumer_repo.create(consumer)
        logger.info("Consumer created: id=%s, name=%s", result.id, result.name)
        return result

    def list_consumers(self) -> list[Consumer]:
        result = self.consumer_repo.list_all()
        logger.debug("Listed %d consumers", len(result))
        return result

    def get_consumer(self, consumer_id: int) -> Consumer | None:
        result = self.consumer_repo.get_by_id(consumer_id)
        logger.debug("get_consumer id=%s found=%s", consumer_id, result is not None)
        return result

    def update_consumer(
        self,
        consumer_id: int,
        name: str = "",
        address: str = "",
        phone: str = "",
        meter_number: str = "",
    ) -> Consumer:
        """Apply non-blank fields; blank values keep what is stored."""
        consumer = self.consumer_repo.get_by_id(consumer_id)
        if consumer is None:
            raise ValueError("Consumer not found")
        changes = {
            key: value.strip()
            for key, value in dict(name=name, address=address, phone=phone, meter_number=meter_number).items()
            if value and value.strip()
        }
        result = self.consumer_repo.update(consumer.model_copy(update=changes))
        logger.info("Consumer updated: id=%s, fields=%s", consumer_id, sorted(changes))
        return result

    def delete_consumer(self, consumer_id: int) -> None:
        if self.consumer_repo.get_by_id(consumer_id) is None:
            raise ValueError("Consumer not found")
        if self.bill_repo.list_bills(consumer_id=consumer_id):
            logger.warning("Delete refused: consumer %s has bills", consumer_id)
            raise ValueError("Cannot delete consumer with bills")
        self.reading_repo.delete_for_consumer(consumer_id)
        self.consumer_repo.delete(consumer_id)
        logger.info("Consumer %s deleted", consumer_id)
