"""Process-local repositories backed by dicts.

Each store guards its container with a lock and hands out copies, so callers
cannot mutate stored state without going through the repository.
"""

from __future__ import annotations

import threading
from datetime import datetime

from meterbill.models.bill import Bill
from meterbill.models.consumer import Consumer
from meterbill.models.reading import MeterReading
from meterbill.models.tariff import Tariff
from meterbill.repositories.base import (
    BillRepository,
    ConsumerRepository,
    IdAllocator,
    ReadingRepository,
    TariffRepository,
)


class InMemoryIdAllocator(IdAllocator):
    def __init__(self, start: int = 1) -> None:
        self._start = start
        self._next: dict[str, int] = {}
        self._lock = threading.Lock()

    def next_id(self, sequence: str) -> int:
        with self._lock:
            value = self._next.get(sequence, self._start)
            self._next[sequence] = value + 1
            return value


class InMemoryConsumerRepository(ConsumerRepository):
    def __init__(self) -> None:
        self._consumers: dict[int, Consumer] = {}
        self._lock = threading.Lock()

    def create(self, consumer: Consumer) -> Consumer:
        if consumer.id is None:
            raise ValueError("Cannot store consumer without an id")
        with self._lock:
            self._consumers[consumer.id] = consumer.model_copy()
        return consumer.model_copy()

    def get_by_id(self, consumer_id: int) -> Consumer | None:
        with self._lock:
            consumer = self._consumers.get(consumer_id)
        return consumer.model_copy() if consumer else None

    def list_all(self) -> list[Consumer]:
        with self._lock:
            return [self._consumers[key].model_copy() for key in sorted(self._consumers)]

    def update(self, consumer: Consumer) -> Consumer:
        with self._lock:
            if consumer.id not in self._consumers:
                raise RuntimeError(f"Consumer {consumer.id} does not exist")
            self._consumers[consumer.id] = consumer.model_copy()
        return consumer.model_copy()

    def delete(self, consumer_id: int) -> None:
        with self._lock:
            self._consumers.pop(consumer_id, None)


class InMemoryReadingRepository(ReadingRepository):
    def __init__(self) -> None:
        self._readings: dict[int, list[MeterReading]] = {}
        self._lock = threading.Lock()

    def add(self, reading: MeterReading) -> MeterReading:
        with self._lock:
            readings = self._readings.setdefault(reading.consumer_id, [])
            readings.append(reading)
            readings.sort(key=lambda r: r.taken_at)
        return reading

    def list_for_consumer(self, consumer_id: int) -> list[MeterReading]:
        with self._lock:
            return list(self._readings.get(consumer_id, []))

    def delete_for_consumer(self, consumer_id: int) -> None:
        with self._lock:
            self._readings.pop(consumer_id, None)


class InMemoryBillRepository(BillRepository):
    def __init__(self) -> None:
        self._bills: dict[int, Bill] = {}
        self._by_key: dict[tuple[int, str], int] = {}
        self._lock = threading.Lock()

    def create(self, bill: Bill) -> Bill:
        if bill.id is None:
            raise ValueError("Cannot store bill without an id")
        key = (bill.consumer_id, bill.period)
        with self._lock:
            if key in self._by_key:
                raise ValueError(f"Bill already exists for consumer {bill.consumer_id} in {bill.period}")
            self._bills[bill.id] = bill.model_copy()
            self._by_key[key] = bill.id
        return bill.model_copy()

    def get_by_id(self, bill_id: int) -> Bill | None:
        with self._lock:
            bill = self._bills.get(bill_id)
        return bill.model_copy() if bill else None

    def get_by_consumer_period(self, consumer_id: int, period: str) -> Bill | None:
        with self._lock:
            bill_id = self._by_key.get((consumer_id, period))
            bill = self._bills.get(bill_id) if bill_id is not None else None
        return bill.model_copy() if bill else None

    def list_bills(
        self,
        paid: bool | None = None,
        consumer_id: int | None = None,
        period_from: str | None = None,
        period_to: str | None = None,
    ) -> list[Bill]:
        with self._lock:
            bills = [self._bills[key].model_copy() for key in sorted(self._bills)]
        if paid is not None:
            bills = [b for b in bills if b.paid == paid]
        if consumer_id is not None:
            bills = [b for b in bills if b.consumer_id == consumer_id]
        if period_from is not None:
            bills = [b for b in bills if b.period >= period_from]
        if period_to is not None:
            bills = [b for b in bills if b.period <= period_to]
        return bills

    def update(self, bill: Bill) -> Bill:
        with self._lock:
            if bill.id not in self._bills:
                raise RuntimeError(f"Bill {bill.id} does not exist")
            self._bills[bill.id] = bill.model_copy()
        return bill.model_copy()

    def update_paid_at(self, bill_id: int, paid_at: datetime) -> None:
        with self._lock:
            bill = self._bills.get(bill_id)
            if bill is None:
                raise RuntimeError(f"Bill {bill_id} does not exist")
            self._bills[bill_id] = bill.model_copy(update={"paid": True, "paid_at": paid_at})


class InMemoryTariffRepository(TariffRepository):
    def __init__(self) -> None:
        self._tariff: Tariff | None = None
        self._lock = threading.Lock()

    def get(self) -> Tariff | None:
        with self._lock:
            return self._tariff.model_copy(deep=True) if self._tariff else None

    def save(self, tariff: Tariff) -> Tariff:
        with self._lock:
            self._tariff = tariff.model_copy(deep=True)
        return tariff
