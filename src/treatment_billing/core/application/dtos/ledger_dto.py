from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal

from pydantic import BaseModel, Field


class PaymentDTO(BaseModel):
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    date: dt.date | None = None


class LedgerSummaryDTO(BaseModel):
    """
    Situação financeira de um pacote.
    `cap` = total - adiantamento; `remaining` = cap - pago.
    """
    package_id: uuid.UUID
    total_payment: Decimal
    advance_payment: Decimal
    cap: Decimal
    paid_payment: Decimal
    remaining: Decimal
    progress_percent: Decimal
    transactions: int


class ReconcileResultDTO(BaseModel):
    package_id: uuid.UUID
    previous_paid: Decimal
    paid_payment: Decimal

    @property
    def changed(self) -> bool:
        return self.previous_paid != self.paid_payment
