from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from datetime import date

from treatment_billing.core.domain.entities.session_entity import SessionEntity, SessionStatus
from treatment_billing.core.domain.events.exceptions import InvalidTransition
from treatment_billing.core.domain.services.calendar_engine import shift_sunday_to_monday

S = SessionStatus

# status de origem -> destinos permitidos
TRANSITIONS: dict[SessionStatus, frozenset[SessionStatus]] = {
    S.PLANNED: frozenset({S.COMPLETED, S.RESCHEDULED, S.MISSED}),
    S.RESCHEDULED: frozenset({S.COMPLETED, S.RESCHEDULED, S.MISSED}),
    S.COMPLETED: frozenset(),
    S.MISSED: frozenset(),
}


class SessionStateMachine:
    """
    Regras de transição de uma sessão.

    Os métodos devolvem uma NOVA entidade; a original nunca é alterada, de
    modo que uma transição recusada não deixa efeito colateral.
    `missed` só é alcançado pelo processo em lote (`mark_missed`).
    """

    def __init__(self, today: Callable[[], date] = date.today) -> None:
        self._today = today

    @staticmethod
    def can_transition(current: SessionStatus, target: SessionStatus) -> bool:
        return target in TRANSITIONS[current]

    def _ensure(self, session: SessionEntity, target: SessionStatus, action: str) -> None:
        if not self.can_transition(session.status, target):
            raise InvalidTransition(session.id, session.status.value, action)

    def reschedule(self, session: SessionEntity, new_date: date, updated_by: str | None = None) -> SessionEntity:
        self._ensure(session, S.RESCHEDULED, "reschedule")
        return replace(
            session,
            scheduled_date=shift_sunday_to_monday(new_date),
            status=S.RESCHEDULED,
            updated_by=updated_by,
        )

    def complete(self, session: SessionEntity, updated_by: str | None = None) -> SessionEntity:
        self._ensure(session, S.COMPLETED, "complete")
        return replace(
            session,
            status=S.COMPLETED,
            actual_date=self._today(),
            updated_by=updated_by,
        )

    def mark_missed(self, session: SessionEntity, updated_by: str | None = None) -> SessionEntity:
        self._ensure(session, S.MISSED, "mark_missed")
        return replace(session, status=S.MISSED, updated_by=updated_by)
