from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from meterbill.constants import BILL_SEQUENCE
from meterbill.dates import now, parse_period
from meterbill.models.bill import Bill
from meterbill.repositories.base import BillRepository, ConsumerRepository, IdAllocator, ReadingRepository
from meterbill.services.reconciler import NotBillable, reconcile_consumption
from meterbill.services.tariff_service import TariffService

logger = logging.getLogger(__name__)


class GenerationStatus(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"


class PaymentStatus(str, Enum):
    PAID = "paid"
    ALREADY_PAID = "already_paid"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class GenerationResult:
    consumer_id: int
    period: str
    status: GenerationStatus
    bill: Bill | None = None
    reason: str = ""


@dataclass(frozen=True)
class PaymentResult:
    status: PaymentStatus
    bill: Bill | None = None


class BillService:
    """Generates, regenerates and settles bills.

    Lookup-then-write on the ledger happens under a lock so concurrent
    generation for the same (consumer, period) keeps the created/updated/skipped
    contract.
    """

    def __init__(
        self,
        bill_repo: BillRepository,
        reading_repo: ReadingRepository,
        consumer_repo: ConsumerRepository,
        tariff_service: TariffService,
        id_allocator: IdAllocator,
    ) -> None:
        self.bill_repo = bill_repo
        self.reading_repo = reading_repo
        self.consumer_repo = consumer_repo
        self.tariff_service = tariff_service
        self.id_allocator = id_allocator
        self._ledger_lock = threading.Lock()

    def generate(self, consumer_id: int, period: str) -> GenerationResult:
        period = parse_period(period)
        readings = self.reading_repo.list_for_consumer(consumer_id)
        consumed = reconcile_consumption(readings, period)
        if isinstance(consumed, NotBillable):
            logger.info("Bill skipped: consumer=%s, period=%s, reason=%s", consumer_id, period, consumed.reason)
            return GenerationResult(consumer_id, period, GenerationStatus.SKIPPED, reason=consumed.reason)

        tariff = self.tariff_service.get_tariff()
        energy_charge = tariff.calculate(consumed)
        subtotal = energy_charge + tariff.fixed_charge
        tax_amount = subtotal * tariff.tax_rate
        charges = dict(
            units_consumed=consumed,
            energy_charge=energy_charge,
            fixed_charge=tariff.fixed_charge,
            tax_rate=tariff.tax_rate,
            tax_amount=tax_amount,
            total=subtotal + tax_amount,
            generated_at=now(),
        )

        with self._ledger_lock:
            existing = self.bill_repo.get_by_consumer_period(consumer_id, period)
            if existing is None:
                bill = Bill(
                    id=self.id_allocator.next_id(BILL_SEQUENCE),
                    consumer_id=consumer_id,
                    period=period,
                    **charges,
                )
                bill = self.bill_repo.create(bill)
                logger.info(
                    "Bill created: id=%s, consumer=%s, period=%s, units=%d, total=%s",
                    bill.id,
                    consumer_id,
                    period,
                    consumed,
                    bill.total,
                )
                return GenerationResult(consumer_id, period, GenerationStatus.CREATED, bill=bill)

            if existing.paid:
                logger.info("Bill skipped: id=%s is already paid", existing.id)
                return GenerationResult(
                    consumer_id, period, GenerationStatus.SKIPPED, bill=existing, reason="bill already paid"
                )

            bill = self.bill_repo.update(existing.model_copy(update=charges))
            logger.info("Bill updated: id=%s, units=%d, total=%s", bill.id, consumed, bill.total)
            return GenerationResult(consumer_id, period, GenerationStatus.UPDATED, bill=bill)

    def generate_for_period(self, period: str, consumer_ids: list[int] | None = None) -> dict[int, GenerationResult]:
        """Generate bills for every consumer (or ``consumer_ids``) in ``period``.

        A failure for one consumer is logged and reported as skipped; the rest
        of the batch still runs.
        """
        period = parse_period(period)
        if consumer_ids is None:
            consumer_ids = [c.id for c in self.consumer_repo.list_all() if c.id is not None]

        results: dict[int, GenerationResult] = {}
        for consumer_id in consumer_ids:
            try:
                results[consumer_id] = self.generate(consumer_id, period)
            except Exception as exc:
                logger.exception("Bill generation failed for consumer=%s, period=%s", consumer_id, period)
                results[consumer_id] = GenerationResult(
                    consumer_id, period, GenerationStatus.SKIPPED, reason=f"error: {exc}"
                )

        created = sum(1 for r in results.values() if r.status == GenerationStatus.CREATED)
        updated = sum(1 for r in results.values() if r.status == GenerationStatus.UPDATED)
        logger.info(
            "Generated bills for %s: created=%d, updated=%d, skipped=%d",
            period,
            created,
            updated,
            len(results) - created - updated,
        )
        return results

    def pay_bill(self, bill_id: int, paid_at: datetime | None = None) -> PaymentResult:
        with self._ledger_lock:
            bill = self.bill_repo.get_by_id(bill_id)
            if bill is None:
                logger.warning("Payment failed: bill %s not found", bill_id)
                return PaymentResult(PaymentStatus.NOT_FOUND)
            if bill.paid:
                logger.warning("Payment refused: bill %s already paid at %s", bill_id, bill.paid_at)
                return PaymentResult(PaymentStatus.ALREADY_PAID, bill=bill)

            paid_at = paid_at or now()
            self.bill_repo.update_paid_at(bill_id, paid_at)
            bill = bill.model_copy(update={"paid": True, "paid_at": paid_at})
        logger.info("Bill %s marked as paid", bill_id)
        return PaymentResult(PaymentStatus.PAID, bill=bill)

    def get_bill(self, bill_id: int) -> Bill | None:
        result = self.bill_repo.get_by_id(bill_id)
        logger.debug("get_bill id=%s found=%s", bill_id, result is not None)
        return result

    def find_bill(self, consumer_id: int, period: str) -> Bill | None:
        return self.bill_repo.get_by_consumer_period(consumer_id, parse_period(period))

    def list_bills(
        self,
        paid: bool | None = None,
        consumer_id: int | None = None,
        period_from: str | None = None,
        period_to: str | None = None,
    ) -> list[Bill]:
        result = self.bill_repo.list_bills(
            paid=paid,
            consumer_id=consumer_id,
            period_from=parse_period(period_from) if period_from else None,
            period_to=parse_period(period_to) if period_to else None,
        )
        logger.debug("Listed %d bills", len(result))
        return result
