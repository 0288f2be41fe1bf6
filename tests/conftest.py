"""Root conftest: in-memory SQLite schema and shared fixtures."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy import Connection, create_engine, event, text
from sqlalchemy.engine import Engine

from meterbill.models.reading import MeterReading
from meterbill.models.tariff import BoundedSlab, Tariff, UnboundedSlab
from meterbill.repositories.memory import (
    InMemoryBillRepository,
    InMemoryConsumerRepository,
    InMemoryIdAllocator,
    InMemoryReadingRepository,
    InMemoryTariffRepository,
)
from meterbill.services.bill_service import BillService
from meterbill.services.consumer_service import ConsumerService
from meterbill.services.reading_service import ReadingService
from meterbill.services.report_service import ReportService
from meterbill.services.tariff_service import TariffService

# Matches Alembic head: 3f1c9a7d2b10 (initial schema)
SCHEMA_DDL = """
CREATE TABLE consumers (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    address TEXT NOT NULL DEFAULT '',
    phone TEXT NOT NULL DEFAULT '',
    meter_number TEXT NOT NULL DEFAULT '',
    created_at TEXT
);

CREATE TABLE meter_readings (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    consumer_id INTEGER NOT NULL REFERENCES consumers(id) ON DELETE CASCADE,
    taken_at TEXT NOT NULL,
    units INTEGER NOT NULL
);

CREATE INDEX ix_meter_readings_consumer_taken_at ON meter_readings (consumer_id, taken_at);

CREATE TABLE bills (
    id INTEGER PRIMARY KEY,
    consumer_id INTEGER NOT NULL REFERENCES consumers(id),
    period VARCHAR(7) NOT NULL,
    units_consumed INTEGER NOT NULL DEFAULT 0,
    energy_charge TEXT NOT NULL DEFAULT '0',
    fixed_charge TEXT NOT NULL DEFAULT '0',
    tax_rate TEXT NOT NULL DEFAULT '0',
    tax_amount TEXT NOT NULL DEFAULT '0',
    total TEXT NOT NULL DEFAULT '0',
    generated_at TEXT,
    paid INTEGER NOT NULL DEFAULT 0,
    paid_at TEXT,
    CONSTRAINT uq_bills_consumer_period UNIQUE (consumer_id, period)
);

CREATE TABLE tariffs (
    id INTEGER PRIMARY KEY,
    slabs TEXT NOT NULL,
    fixed_charge TEXT NOT NULL,
    tax_rate TEXT NOT NULL,
    updated_at TEXT
);

CREATE TABLE id_sequences (
    name VARCHAR(50) PRIMARY KEY,
    next_value INTEGER NOT NULL
);
"""


@pytest.fixture()
def db_engine() -> Engine:
    engine = create_engine("sqlite:///:memory:")

    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()

    return engine


@pytest.fixture()
def db_connection(db_engine: Engine) -> Connection:
    conn = db_engine.connect()
    for statement in SCHEMA_DDL.strip().split(";"):
        stmt = statement.strip()
        if stmt:
            conn.execute(text(stmt))
    conn.commit()
    yield conn
    conn.close()


def _default_tariff(**overrides) -> Tariff:
    defaults = dict(
        slabs=[
            BoundedSlab(threshold=100, rate=Decimal("3.5")),
            BoundedSlab(threshold=200, rate=Decimal("4.5")),
            UnboundedSlab(rate=Decimal("6.0")),
        ],
        fixed_charge=Decimal("50.0"),
        tax_rate=Decimal("0.05"),
    )
    defaults.update(overrides)
    return Tariff(**defaults)


def _reading(consumer_id: int, taken_at: str, units: int) -> MeterReading:
    return MeterReading(consumer_id=consumer_id, taken_at=datetime.fromisoformat(taken_at), units=units)


@pytest.fixture()
def default_tariff():
    return _default_tariff


@pytest.fixture()
def reading():
    return _reading


class MemoryServices:
    """Every service wired over one set of in-memory repositories."""

    def __init__(self) -> None:
        self.consumer_repo = InMemoryConsumerRepository()
        self.reading_repo = InMemoryReadingRepository()
        self.bill_repo = InMemoryBillRepository()
        self.tariff_repo = InMemoryTariffRepository()
        self.id_allocator = InMemoryIdAllocator()

        self.tariffs = TariffService(self.tariff_repo)
        self.tariff_repo.save(_default_tariff())
        self.consumers = ConsumerService(self.consumer_repo, self.reading_repo, self.bill_repo, self.id_allocator)
        self.readings = ReadingService(self.reading_repo, self.consumer_repo)
        self.bills = BillService(
            self.bill_repo, self.reading_repo, self.consumer_repo, self.tariffs, self.id_allocator
        )
        self.reports = ReportService(self.bill_repo, self.consumer_repo, self.reading_repo)


@pytest.fixture()
def services() -> MemoryServices:
    return MemoryServices()
