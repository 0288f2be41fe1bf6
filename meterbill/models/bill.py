from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel


class Bill(BaseModel):
    id: int | None = None
    consumer_id: int
    period: str  # 'YYYY-MM'
    units_consumed: int = 0
    energy_charge: Decimal = Decimal("0")
    fixed_charge: Decimal = Decimal("0")
    tax_rate: Decimal = Decimal("0")
    tax_amount: Decimal = Decimal("0")
    total: Decimal = Decimal("0")
    generated_at: datetime | None = None
    paid: bool = False
    paid_at: datetime | None = None

    @property
    def subtotal(self) -> Decimal:
        return self.energy_charge + self.fixed_charge

    @property
    def payment_status(self) -> str:
        return "paid" if self.paid else "unpaid"
