from __future__ import annotations

import json
import threading
from datetime import datetime

from sqlalchemy import Connection, text
from sqlalchemy.engine import RowMapping

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

# Single-row table: the active tariff is replaced wholesale.
TARIFF_ROW_ID = 1


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


class SQLAlchemyIdAllocator(IdAllocator):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn
        self._lock = threading.Lock()

    def next_id(self, sequence: str) -> int:
        with self._lock:
            row = (
                self.conn.execute(
                    text("SELECT next_value FROM id_sequences WHERE name = :name"),
                    {"name": sequence},
                )
                .mappings()
                .fetchone()
            )
            if row is None:
                value = 1
                self.conn.execute(
                    text("INSERT INTO id_sequences (name, next_value) VALUES (:name, :next_value)"),
                    {"name": sequence, "next_value": value + 1},
                )
            else:
                value = row["next_value"]
                self.conn.execute(
                    text("UPDATE id_sequences SET next_value = :next_value WHERE name = :name"),
                    {"name": sequence, "next_value": value + 1},
                )
            self.conn.commit()
            return value


class SQLAlchemyConsumerRepository(ConsumerRepository):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    def create(self, consumer: Consumer) -> Consumer:
        if consumer.id is None:
            raise ValueError("Cannot store consumer without an id")
        self.conn.execute(
            text(
                "INSERT INTO consumers (id, name, address, phone, meter_number, created_at) "
                "VALUES (:id, :name, :address, :phone, :meter_number, :created_at)"
            ),
            {
                "id": consumer.id,
                "name": consumer.name,
                "address": consumer.address,
                "phone": consumer.phone,
                "meter_number": consumer.meter_number,
                "created_at": consumer.created_at.isoformat() if consumer.created_at else None,
            },
        )
        self.conn.commit()
        result = self.get_by_id(consumer.id)
        if result is None:
            raise RuntimeError(f"Failed to retrieve consumer after create (id={consumer.id})")
        return result

    @staticmethod
    def _row_to_consumer(row: RowMapping) -> Consumer:
        return Consumer(
            id=row["id"],
            name=row["name"],
            address=row["address"],
            phone=row["phone"],
            meter_number=row["meter_number"],
            created_at=row["created_at"],
        )

    def get_by_id(self, consumer_id: int) -> Consumer | None:
        row = (
            self.conn.execute(
                text("SELECT * FROM consumers WHERE id = :id"),
                {"id": consumer_id},
            )
            .mappings()
            .fetchone()
        )
        if row is None:
            return None
        return self._row_to_consumer(row)

    def list_all(self) -> list[Consumer]:
        rows = self.conn.execute(text("SELECT * FROM consumers ORDER BY id")).mappings().fetchall()
        return [self._row_to_consumer(row) for row in rows]

    def update(self, consumer: Consumer) -> Consumer:
        if consumer.id is None:
            raise ValueError("Cannot update consumer without an id")
        self.conn.execute(
            text(
                "UPDATE consumers SET name = :name, address = :address, "
                "phone = :phone, meter_number = :meter_number WHERE id = :id"
            ),
            {
                "name": consumer.name,
                "address": consumer.address,
                "phone": consumer.phone,
                "meter_number": consumer.meter_number,
                "id": consumer.id,
            },
        )
        self.conn.commit()
        result = self.get_by_id(consumer.id)
        if result is None:
            raise RuntimeError(f"Failed to retrieve consumer after update (id={consumer.id})")
        return result

    def delete(self, consumer_id: int) -> None:
        self.conn.execute(text("DELETE FROM consumers WHERE id = :id"), {"id": consumer_id})
        self.conn.commit()


class SQLAlchemyReadingRepository(ReadingRepository):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    def add(self, reading: MeterReading) -> MeterReading:
        self.conn.execute(
            text(
                "INSERT INTO meter_readings (consumer_id, taken_at, units) "
                "VALUES (:consumer_id, :taken_at, :units)"
            ),
            {
                "consumer_id": reading.consumer_id,
                "taken_at": _iso(reading.taken_at),
                "units": reading.units,
            },
        )
        self.conn.commit()
        return reading

    def list_for_consumer(self, consumer_id: int) -> list[MeterReading]:
        rows = (
            self.conn.execute(
                text("SELECT * FROM meter_readings WHERE consumer_id = :consumer_id ORDER BY taken_at, id"),
                {"consumer_id": consumer_id},
            )
            .mappings()
            .fetchall()
        )
        readings = [
            MeterReading(consumer_id=row["consumer_id"], taken_at=row["taken_at"], units=row["units"]) for row in rows
        ]
        # Text ordering breaks when only some timestamps carry microseconds.
        return sorted(readings, key=lambda r: r.taken_at)

    def delete_for_consumer(self, consumer_id: int) -> None:
        self.conn.execute(
            text("DELETE FROM meter_readings WHERE consumer_id = :consumer_id"),
            {"consumer_id": consumer_id},
        )
        self.conn.commit()


class SQLAlchemyBillRepository(BillRepository):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    @staticmethod
    def _params(bill: Bill) -> dict:
        return {
            "id": bill.id,
            "consumer_id": bill.consumer_id,
            "period": bill.period,
            "units_consumed": bill.units_consumed,
            "energy_charge": str(bill.energy_charge),
            "fixed_charge": str(bill.fixed_charge),
            "tax_rate": str(bill.tax_rate),
            "tax_amount": str(bill.tax_amount),
            "total": str(bill.total),
            "generated_at": _iso(bill.generated_at),
            "paid": int(bill.paid),
            "paid_at": _iso(bill.paid_at),
        }

    def create(self, bill: Bill) -> Bill:
        if bill.id is None:
            raise ValueError("Cannot store bill without an id")
        self.conn.execute(
            text(
                "INSERT INTO bills (id, consumer_id, period, units_consumed, energy_charge, "
                "fixed_charge, tax_rate, tax_amount, total, generated_at, paid, paid_at) "
                "VALUES (:id, :consumer_id, :period, :units_consumed, :energy_charge, "
                ":fixed_charge, :tax_rate, :tax_amount, :total, :generated_at, :paid, :paid_at)"
            ),
            self._params(bill),
        )
        self.conn.commit()
        result = self.get_by_id(bill.id)
        if result is None:
            raise RuntimeError(f"Failed to retrieve bill after create (id={bill.id})")
        return result

    @staticmethod
    def _row_to_bill(row: RowMapping) -> Bill:
        return Bill(
            id=row["id"],
            consumer_id=row["consumer_id"],
            period=row["period"],
            units_consumed=row["units_consumed"],
            energy_charge=row["energy_charge"],
            fixed_charge=row["fixed_charge"],
            tax_rate=row["tax_rate"],
            tax_amount=row["tax_amount"],
            total=row["total"],
            generated_at=row["generated_at"],
            paid=bool(row["paid"]),
            paid_at=row["paid_at"],
        )

    def get_by_id(self, bill_id: int) -> Bill | None:
        row = (
            self.conn.execute(
                text("SELECT * FROM bills WHERE id = :id"),
                {"id": bill_id},
            )
            .mappings()
            .fetchone()
        )
        if row is None:
            return None
        return self._row_to_bill(row)

    def get_by_consumer_period(self, consumer_id: int, period: str) -> Bill | None:
        row = (
            self.conn.execute(
                text("SELECT * FROM bills WHERE consumer_id = :consumer_id AND period = :period"),
                {"consumer_id": consumer_id, "period": period},
            )
            .mappings()
            .fetchone()
        )
        if row is None:
            return None
        return self._row_to_bill(row)

    def list_bills(
        self,
        paid: bool | None = None,
        consumer_id: int | None = None,
        period_from: str | None = None,
        period_to: str | None = None,
    ) -> list[Bill]:
        clauses: list[str] = []
        params: dict = {}
        if paid is not None:
            clauses.append("paid = :paid")
            params["paid"] = int(paid)
        if consumer_id is not None:
            clauses.append("consumer_id = :consumer_id")
            params["consumer_id"] = consumer_id
        if period_from is not None:
            clauses.append("period >= :period_from")
            params["period_from"] = period_from
        if period_to is not None:
            clauses.append("period <= :period_to")
            params["period_to"] = period_to
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        rows = self.conn.execute(text(f"SELECT * FROM bills{where} ORDER BY id"), params).mappings().fetchall()
        return [self._row_to_bill(row) for row in rows]

    def update(self, bill: Bill) -> Bill:
        if bill.id is None:
            raise ValueError("Cannot update bill without an id")
        self.conn.execute(
            text(
                "UPDATE bills SET units_consumed = :units_consumed, energy_charge = :energy_charge, "
                "fixed_charge = :fixed_charge, tax_rate = :tax_rate, tax_amount = :tax_amount, "
                "total = :total, generated_at = :generated_at WHERE id = :id"
            ),
            self._params(bill),
        )
        self.conn.commit()
        result = self.get_by_id(bill.id)
        if result is None:
            raise RuntimeError(f"Failed to retrieve bill after update (id={bill.id})")
        return result

    def update_paid_at(self, bill_id: int, paid_at: datetime) -> None:
        self.conn.execute(
            text("UPDATE bills SET paid = 1, paid_at = :paid_at WHERE id = :id"),
            {"paid_at": _iso(paid_at), "id": bill_id},
        )
        self.conn.commit()


class SQLAlchemyTariffRepository(TariffRepository):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    def get(self) -> Tariff | None:
        row = (
            self.conn.execute(
                text("SELECT * FROM tariffs WHERE id = :id"),
                {"id": TARIFF_ROW_ID},
            )
            .mappings()
            .fetchone()
        )
        if row is None:
            return None
        return Tariff(
            slabs=json.loads(row["slabs"]),
            fixed_charge=row["fixed_charge"],
            tax_rate=row["tax_rate"],
        )

    def save(self, tariff: Tariff) -> Tariff:
        params = {
            "id": TARIFF_ROW_ID,
            "slabs": json.dumps([slab.model_dump(mode="json") for slab in tariff.slabs]),
            "fixed_charge": str(tariff.fixed_charge),
            "tax_rate": str(tariff.tax_rate),
            "updated_at": datetime.now().isoformat(),
        }
        self.conn.execute(text("DELETE FROM tariffs WHERE id = :id"), {"id": TARIFF_ROW_ID})
        self.conn.execute(
            text(
                "INSERT INTO tariffs (id, slabs, fixed_charge, tax_rate, updated_at) "
                "VALUES (:id, :slabs, :fixed_charge, :tax_rate, :updated_at)"
            ),
            params,
        )
        self.conn.commit()
        result = self.get()
        if result is None:
            raise RuntimeError("Failed to retrieve tariff after save")
        return result
