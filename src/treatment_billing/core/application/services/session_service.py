from __future__ import annotations

from collections.abc import Callable
from datetime import date
from uuid import UUID

import structlog

from treatment_billing.core.application.cqrs import HandlerResult
from treatment_billing.core.application.services.package_progress_service import PackageProgressService
from treatment_billing.core.domain.entities.session_entity import SessionEntity
from treatment_billing.core.domain.events.events import (
    DomainEvent,
    SessionCompletedEvent,
    SessionMissedEvent,
    SessionRescheduledEvent,
)
from treatment_billing.core.domain.events.exceptions import InvalidTransition, NotFound
from treatment_billing.core.domain.repositories import SessionRepository, UnitOfWork
from treatment_billing.core.domain.services.session_state_machine import SessionStateMachine

logger = structlog.get_logger(__name__)


class SessionTransitionService:
    """
    Aplica a máquina de estados e persiste o resultado. Toda transição
    invalida o cache de progresso do pacote, que é recalculado na hora.
    """

    def __init__(
        self,
        session_repo: SessionRepository,
        progress: PackageProgressService,
        state_machine: SessionStateMachine,
        uow_factory: Callable[[], UnitOfWork],
    ) -> None:
        self.session_repo = session_repo
        self.progress = progress
        self.state_machine = state_machine
        self.uow_factory = uow_factory

    def _live_session(self, session_id: UUID) -> SessionEntity:
        session = self.session_repo.find_by_id(session_id)
        if session is None:
            raise NotFound("Session", session_id)
        return session

    def _persist(self, current: SessionEntity, changed: SessionEntity, action: str) -> SessionEntity:
        """Grava a transição só se a sessão ainda estiver no status validado."""
        saved = self.session_repo.save_transition(changed, expected_status=current.status)
        if saved is None:
            latest = self._live_session(current.id)
            raise InvalidTransition(current.id, latest.status.value, action)
        return saved

    def reschedule(self, session_id: UUID, new_date: date, actor: str | None = None) -> HandlerResult:
        with self.uow_factory():
            current = self._live_session(session_id)
            changed = self.state_machine.reschedule(current, new_date, updated_by=actor)
            saved = self._persist(current, changed, "reschedule")
            self.progress.refresh_cache(saved.buyed_package_id)

        logger.info(
            "session.rescheduled",
            session_id=str(session_id),
            previous_date=str(current.scheduled_date),
            scheduled_date=str(saved.scheduled_date),
        )
        event = SessionRescheduledEvent(
            session_id=session_id,
            package_id=saved.buyed_package_id,
            previous_date=current.scheduled_date,
            scheduled_date=saved.scheduled_date,
            actor=actor,
        )
        return HandlerResult(saved, [event])

    def complete(self, session_id: UUID, actor: str | None = None) -> HandlerResult:
        with self.uow_factory():
            current = self._live_session(session_id)
            changed = self.state_machine.complete(current, updated_by=actor)
            saved = self._persist(current, changed, "complete")
            self.progress.refresh_cache(saved.buyed_package_id)

        logger.info("session.completed", session_id=str(session_id), actual_date=str(saved.actual_date))
        event = SessionCompletedEvent(
            session_id=session_id,
            package_id=saved.buyed_package_id,
            actual_date=saved.actual_date,
            actor=actor,
        )
        return HandlerResult(saved, [event])

    def mark_missed_before(self, day: date, actor: str | None = None) -> HandlerResult:
        """Processo em lote: sessões em aberto anteriores a `day` viram `missed`."""
        events: list[DomainEvent] = []
        touched: set[UUID] = set()
        with self.uow_factory():
            for session in self.session_repo.list_open_before(day):
                missed = self.state_machine.mark_missed(session, updated_by=actor)
                # concluída/remarcada entre a listagem e a escrita: fica como está
                if self.session_repo.save_transition(missed, expected_status=session.status) is None:
                    continue
                touched.add(missed.buyed_package_id)
                events.append(
                    SessionMissedEvent(
                        session_id=missed.id,
                        package_id=missed.buyed_package_id,
                        scheduled_date=missed.scheduled_date,
                        actor=actor,
                    )
                )
            for package_id in touched:
                self.progress.refresh_cache(package_id)

        logger.info("session.mark_missed", before=str(day), sessions=len(events), packages=len(touched))
        return HandlerResult(len(events), events)
