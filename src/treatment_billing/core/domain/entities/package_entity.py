from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from treatment_billing.core.domain.entities._base import EntityMixin

ZERO = Decimal("0.00")


@dataclass(slots=True)
class PackageEntity(EntityMixin):
    """
    Pacote de sessões comprado por um paciente ("BuyedPackage").

    `paid_payment` é o saldo materializado do ledger; `sessions_completed` e
    `next_session_date` são apenas cache de leitura e são sempre
    recalculados pelo agregador antes de chegar ao chamador.
    """
    id: uuid.UUID
    patient_id: uuid.UUID
    no_of_sessions: int
    total_payment: Decimal
    advance_payment: Decimal
    gap_between_sessions: int
    start_date: date
    paid_payment: Decimal = ZERO
    sessions_completed: int = 0
    next_session_date: date | None = None
    is_deleted: bool = False
    created_by: str | None = None
    updated_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def payment_cap(self) -> Decimal:
        """Teto do saldo pago: total menos o adiantamento (nunca negativo)."""
        return max(ZERO, Decimal(self.total_payment) - Decimal(self.advance_payment))

    @property
    def remaining_payment(self) -> Decimal:
        return max(ZERO, self.payment_cap - Decimal(self.paid_payment))

    @property
    def remaining_sessions(self) -> int:
        return max(0, self.no_of_sessions - self.sessions_completed)
