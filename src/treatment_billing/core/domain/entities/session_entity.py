from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from treatment_billing.core.domain.entities._base import EntityMixin


class SessionStatus(str, Enum):
    PLANNED = "planned"
    COMPLETED = "completed"
    MISSED = "missed"
    RESCHEDULED = "rescheduled"

    @property
    def is_open(self) -> bool:
        """Sessões ainda acionáveis (aparecem na agenda)."""
        return self in (SessionStatus.PLANNED, SessionStatus.RESCHEDULED)


@dataclass(slots=True)
class SessionEntity(EntityMixin):
    id: uuid.UUID
    buyed_package_id: uuid.UUID
    session_number: int
    scheduled_date: date
    status: SessionStatus = SessionStatus.PLANNED
    actual_date: date | None = None
    is_deleted: bool = False
    created_by: str | None = None
    updated_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    # preenchido apenas nas consultas de agenda
    patient_name: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.status, SessionStatus):
            self.status = SessionStatus(self.status)
