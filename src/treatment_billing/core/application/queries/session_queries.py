from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from treatment_billing.core.application.cqrs import QueryDTO


@dataclass(frozen=True)
class ListAgendaQuery(QueryDTO):
    """Sessões em aberto num dia (`end=None`) ou num intervalo inclusivo."""
    start: date
    end: date | None = None
