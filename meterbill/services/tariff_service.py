from __future__ import annotations

import logging
from decimal import Decimal

from pydantic import ValidationError

from meterbill.constants import UNBOUNDED_TOKENS
from meterbill.errors import ParseError
from meterbill.models import parse_amount
from meterbill.models.tariff import BoundedSlab, Slab, SlabCharge, Tariff, UnboundedSlab
from meterbill.repositories.base import TariffRepository
from meterbill.settings import settings

logger = logging.getLogger(__name__)


def _parse_segment(segment: str) -> Slab:
    parts = segment.strip().split(":")
    if len(parts) != 2:
        raise ParseError(f"Bad slab part: '{segment}'", segment=segment)
    threshold_text, rate_text = (part.strip() for part in parts)

    rate = parse_amount(rate_text)
    if rate is None or rate < 0:
        raise ParseError(f"Bad rate in slab part: '{segment}'", segment=segment)

    if threshold_text.lower() in UNBOUNDED_TOKENS:
        return UnboundedSlab(rate=rate)
    try:
        threshold = int(threshold_text)
    except ValueError as exc:
        raise ParseError(f"Bad threshold in slab part: '{segment}'", segment=segment) from exc
    if threshold < 0:
        raise ParseError(f"Negative threshold in slab part: '{segment}'", segment=segment)
    return BoundedSlab(threshold=threshold, rate=rate)


def parse_slabs(text: str) -> list[Slab]:
    """Parse ``threshold:rate,...,inf:rate``.

    The whole string must be valid: any bad segment, or an unbounded slab that
    is not the last one, raises ParseError naming the segment.
    """
    if not text or not text.strip():
        raise ParseError("Slab list is empty")
    segments = text.split(",")
    slabs: list[Slab] = []
    for index, segment in enumerate(segments):
        slab = _parse_segment(segment)
        if isinstance(slab, UnboundedSlab) and index != len(segments) - 1:
            raise ParseError(f"Unbounded slab must be last: '{segment}'", segment=segment)
        slabs.append(slab)
    return slabs


def default_tariff() -> Tariff:
    return Tariff(
        slabs=parse_slabs(settings.default_slabs),
        fixed_charge=settings.default_fixed_charge,
        tax_rate=settings.default_tax_rate,
    )


def calculate_charge(units: int, tariff: Tariff) -> Decimal:
    """Energy charge for ``units`` under ``tariff``; safe for previews."""
    return tariff.calculate(units)


class TariffService:
    def __init__(self, repo: TariffRepository) -> None:
        self.repo = repo

    def get_tariff(self) -> Tariff:
        tariff = self.repo.get()
        if tariff is None:
            tariff = self.repo.save(default_tariff())
            logger.info("Default tariff stored: %s", tariff.summary())
        return tariff

    def _replace(self, **changes) -> Tariff:
        current = self.get_tariff()
        try:
            updated = Tariff.model_validate({**current.model_dump(), **changes})
        except ValidationError as exc:
            raise ParseError(str(exc)) from exc
        result = self.repo.save(updated)
        logger.info("Tariff replaced: %s", result.summary())
        return result

    def replace_slabs(self, text: str) -> Tariff:
        slabs = parse_slabs(text)
        if not isinstance(slabs[-1], UnboundedSlab):
            logger.warning("Tariff has no unbounded slab; units above %s are not charged", text)
        return self._replace(slabs=slabs)

    def set_fixed_charge(self, text: str) -> Tariff:
        value = parse_amount(text)
        if value is None or value < 0:
            raise ParseError(f"Invalid fixed charge: '{text}'", segment=text)
        return self._replace(fixed_charge=value)

    def set_tax_rate(self, text: str) -> Tariff:
        value = parse_amount(text)
        if value is None or not (0 <= value < 1):
            raise ParseError(f"Invalid tax rate: '{text}', expected a fraction such as 0.05", segment=text)
        return self._replace(tax_rate=value)

    def calculate_charge(self, units: int) -> Decimal:
        return calculate_charge(units, self.get_tariff())

    def preview(self, units: int) -> list[SlabCharge]:
        return self.get_tariff().breakdown(units)
