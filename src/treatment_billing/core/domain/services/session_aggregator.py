from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from treatment_billing.core.domain.entities.session_entity import SessionEntity, SessionStatus


@dataclass(frozen=True, slots=True)
class SessionSummary:
    completed_count: int
    next_session_date: date | None


def summarize(sessions: Iterable[SessionEntity]) -> SessionSummary:
    """
    Fatos derivados de um pacote a partir da coleção viva de sessões.

    A âncora é a data da sessão concluída mais tardia (não o número da
    sessão). A próxima sessão é a primeira planned/rescheduled, na ordem
    do pacote, agendada estritamente depois da âncora. Sem nenhuma sessão
    concluída vale a data em aberto mais cedo. Sessões removidas
    (soft-delete) são ignoradas.
    """
    live = sorted((s for s in sessions if not s.is_deleted), key=lambda s: s.session_number)

    completed_dates = [s.scheduled_date for s in live if s.status == SessionStatus.COMPLETED]
    open_sessions = [s for s in live if s.status.is_open]

    if not completed_dates:
        next_date = min((s.scheduled_date for s in open_sessions), default=None)
    else:
        anchor = max(completed_dates)
        next_date = next((s.scheduled_date for s in open_sessions if s.scheduled_date > anchor), None)

    return SessionSummary(completed_count=len(completed_dates), next_session_date=next_date)
