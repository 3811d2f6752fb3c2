from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

from treatment_billing.core.domain.services.calendar_engine import (
    MAX_GAP_DAYS,
    MAX_SESSIONS,
    MIN_GAP_DAYS,
    MIN_SESSIONS,
)


class PackageDTO(BaseModel):
    """
    Compra de um pacote. `sessions_completed` permite lançar pacotes já em
    andamento: as primeiras N sessões nascem concluídas.
    """
    patient_id: uuid.UUID
    no_of_sessions: int = Field(ge=MIN_SESSIONS, le=MAX_SESSIONS)
    total_payment: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    advance_payment: Decimal = Field(default=Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    gap_between_sessions: int = Field(ge=MIN_GAP_DAYS, le=MAX_GAP_DAYS)
    start_date: dt.date
    sessions_completed: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _check_limits(self) -> PackageDTO:
        if self.advance_payment > self.total_payment:
            raise ValueError("advance_payment não pode ser maior que total_payment")
        if self.sessions_completed > self.no_of_sessions:
            raise ValueError("sessions_completed não pode ser maior que no_of_sessions")
        return self


class PackageUpdateDTO(BaseModel):
    """Alteração parcial; só os campos enviados são aplicados."""
    no_of_sessions: int | None = Field(default=None, ge=MIN_SESSIONS, le=MAX_SESSIONS)
    total_payment: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    advance_payment: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    gap_between_sessions: int | None = Field(default=None, ge=MIN_GAP_DAYS, le=MAX_GAP_DAYS)
    start_date: dt.date | None = None


class DashboardPackageDTO(BaseModel):
    """Linha do painel: pacote com progresso derivado e contato do paciente."""
    id: uuid.UUID
    patient_id: uuid.UUID
    patient_name: str
    patient_phone: str | None = None
    no_of_sessions: int
    sessions_completed: int
    remaining_sessions: int
    next_session_date: dt.date | None = None
    start_date: dt.date
    total_payment: Decimal
    advance_payment: Decimal
    paid_payment: Decimal
    remaining_payment: Decimal
