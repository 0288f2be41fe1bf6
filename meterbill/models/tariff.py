"""Tiered (slab) tariff.

Slab thresholds are widths of successive tiers: ``100:3.5,200:4.5,inf:6.0``
prices the first 100 units at 3.5, the next 200 at 4.5 and everything above
300 at 6.0.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, field_validator


class BoundedSlab(BaseModel):
    kind: Literal["bounded"] = "bounded"
    threshold: int = Field(ge=0)
    rate: Decimal = Field(ge=0)

    def take(self, remaining: int) -> int:
        return min(remaining, self.threshold)

    @property
    def label(self) -> str:
        return str(self.threshold)


class UnboundedSlab(BaseModel):
    kind: Literal["unbounded"] = "unbounded"
    rate: Decimal = Field(ge=0)

    def take(self, remaining: int) -> int:
        return remaining

    @property
    def label(self) -> str:
        return "above"


Slab = Annotated[Union[BoundedSlab, UnboundedSlab], Field(discriminator="kind")]


class SlabCharge(BaseModel):
    slab: Slab
    units: int
    charge: Decimal


class Tariff(BaseModel):
    slabs: list[Slab] = []
    fixed_charge: Decimal = Field(default=Decimal("0"), ge=0)
    tax_rate: Decimal = Field(default=Decimal("0"), ge=0, lt=1)

    @field_validator("slabs")
    @classmethod
    def _unbounded_slab_is_last(cls, slabs: list[Slab]) -> list[Slab]:
        for index, slab in enumerate(slabs):
            if isinstance(slab, UnboundedSlab) and index != len(slabs) - 1:
                raise ValueError("Only the last slab may be unbounded")
        return slabs

    @property
    def is_open_ended(self) -> bool:
        return bool(self.slabs) and isinstance(self.slabs[-1], UnboundedSlab)

    def breakdown(self, units: int) -> list[SlabCharge]:
        """Apportion ``units`` across the slabs, cheapest tier first.

        Units beyond the capacity of a tariff without a trailing unbounded slab
        are not charged.
        """
        if units < 0:
            raise ValueError("Consumed units cannot be negative")
        remaining = units
        lines: list[SlabCharge] = []
        for slab in self.slabs:
            if remaining <= 0:
                break
            taken = slab.take(remaining)
            lines.append(SlabCharge(slab=slab, units=taken, charge=taken * slab.rate))
            remaining -= taken
        return lines

    def calculate(self, units: int) -> Decimal:
        """Energy charge for ``units``. Fixed charge and tax are not included."""
        return sum((line.charge for line in self.breakdown(units)), Decimal("0"))

    def to_text(self) -> str:
        parts = []
        for slab in self.slabs:
            threshold = "inf" if isinstance(slab, UnboundedSlab) else str(slab.threshold)
            parts.append(f"{threshold}:{slab.rate}")
        return ",".join(parts)

    def summary(self) -> str:
        slabs = "".join(f"[{slab.label}:{slab.rate}]" for slab in self.slabs)
        return f"{slabs} fixed:{self.fixed_charge} tax:{self.tax_rate}"
