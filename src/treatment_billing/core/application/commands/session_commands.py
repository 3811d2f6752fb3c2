from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date

from treatment_billing.core.application.cqrs import CommandDTO


@dataclass(frozen=True)
class RescheduleSessionCommand(CommandDTO):
    session_id: uuid.UUID
    new_date: date
    updated_by: str | None = None

@dataclass(frozen=True)
class CompleteSessionCommand(CommandDTO):
    session_id: uuid.UUID
    updated_by: str | None = None

@dataclass(frozen=True)
class MarkMissedSessionsCommand(CommandDTO):
    """Lote: sessões em aberto com data anterior a `before` viram `missed`."""
    before: date
    updated_by: str | None = None
