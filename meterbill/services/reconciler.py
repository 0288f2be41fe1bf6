"""Derive billable consumption for a period from cumulative meter readings.

The boundary readings are picked by nearest neighbour rather than requiring a
reading inside the period, so sparse data still yields an estimate. When the
only readings lie outside the period the estimate can span several months.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from meterbill.dates import period_bounds
from meterbill.models.reading import MeterReading

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotBillable:
    """The readings do not support a bill for the period. Not an error."""

    reason: str


def select_boundary_readings(
    readings: Sequence[MeterReading], period: str
) -> tuple[MeterReading, MeterReading]:
    """Pick the (before, after) readings bracketing ``period``.

    ``before`` is the latest reading at or before the period start, falling back
    to the earliest reading. ``after`` is the first reading at or after the
    period end, falling back to the last reading inside the period and then to
    the latest reading overall. Raises ValueError when there are no readings.
    """
    if not readings:
        raise ValueError("no readings to pick boundaries from")
    ordered = sorted(readings, key=lambda r: r.taken_at)
    start, end = period_bounds(period)

    before: MeterReading | None = None
    after: MeterReading | None = None
    for reading in ordered:
        if reading.taken_at <= start:
            before = reading
        if reading.taken_at >= end:
            after = reading
            break

    if before is None:
        before = ordered[0]
    if after is None:
        in_period = [r for r in ordered if start <= r.taken_at <= end]
        after = in_period[-1] if in_period else ordered[-1]
    return before, after


def reconcile_consumption(readings: Sequence[MeterReading], period: str) -> int | NotBillable:
    if len(readings) < 2:
        return NotBillable(f"{len(readings)} reading(s) recorded, at least 2 required")

    before, after = select_boundary_readings(readings, period)

    if after.units < before.units:
        logger.info(
            "Meter went backwards for consumer=%s in %s: %d -> %d",
            before.consumer_id,
            period,
            before.units,
            after.units,
        )
        return NotBillable(f"meter reading decreased from {before.units} to {after.units}")

    consumed = after.units - before.units
    logger.debug(
        "Reconciled consumer=%s period=%s before=%s after=%s consumed=%d",
        before.consumer_id,
        period,
        before.taken_at,
        after.taken_at,
        consumed,
    )
    return consumed
