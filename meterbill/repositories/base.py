from abc import ABC, abstractmethod
from datetime import datetime

from meterbill.models.bill import Bill
from meterbill.models.consumer import Consumer
from meterbill.models.reading import MeterReading
from meterbill.models.tariff import Tariff


class IdAllocator(ABC):
    """Hands out monotonically increasing ids per named sequence.

    ``next_id`` must be atomic: concurrent callers never receive the same id.
    """

    @abstractmethod
    def next_id(self, sequence: str) -> int: ...


class ConsumerRepository(ABC):
    @abstractmethod
    def create(self, consumer: Consumer) -> Consumer: ...

    @abstractmethod
    def get_by_id(self, consumer_id: int) -> Consumer | None: ...

    @abstractmethod
    def list_all(self) -> list[Consumer]: ...

    @abstractmethod
    def update(self, consumer: Consumer) -> Consumer: ...

    @abstractmethod
    def delete(self, consumer_id: int) -> None: ...


class ReadingRepository(ABC):
    @abstractmethod
    def add(self, reading: MeterReading) -> MeterReading: ...

    @abstractmethod
    def list_for_consumer(self, consumer_id: int) -> list[MeterReading]:
        """Readings for a consumer ordered by ``taken_at``."""

    @abstractmethod
    def delete_for_consumer(self, consumer_id: int) -> None: ...


class BillRepository(ABC):
    @abstractmethod
    def create(self, bill: Bill) -> Bill:
        """Insert a bill whose id was already allocated."""

    @abstractmethod
    def get_by_id(self, bill_id: int) -> Bill | None: ...

    @abstractmethod
    def get_by_consumer_period(self, consumer_id: int, period: str) -> Bill | None: ...

    @abstractmethod
    def list_bills(
        self,
        paid: bool | None = None,
        consumer_id: int | None = None,
        period_from: str | None = None,
        period_to: str | None = None,
    ) -> list[Bill]: ...

    @abstractmethod
    def update(self, bill: Bill) -> Bill: ...

    @abstractmethod
    def update_paid_at(self, bill_id: int, paid_at: datetime) -> None: ...


class TariffRepository(ABC):
    @abstractmethod
    def get(self) -> Tariff | None: ...

    @abstractmethod
    def save(self, tariff: Tariff) -> Tariff: ...
