from __future__ import annotations

from treatment_billing.core.application.cqrs import CommandHandler, HandlerResult, QueryHandler
from treatment_billing.core.application.services.session_service import SessionTransitionService
from treatment_billing.core.domain.entities.session_entity import SessionEntity
from treatment_billing.core.domain.repositories import SessionRepository

from ..commands.session_commands import (
    CompleteSessionCommand,
    MarkMissedSessionsCommand,
    RescheduleSessionCommand,
)
from ..queries.session_queries import ListAgendaQuery


class RescheduleSessionHandler(CommandHandler[RescheduleSessionCommand]):
    def __init__(self, service: SessionTransitionService):
        self.service = service

    def handle(self, cmd: RescheduleSessionCommand) -> HandlerResult[SessionEntity]:
        return self.service.reschedule(cmd.session_id, cmd.new_date, actor=cmd.updated_by)


class CompleteSessionHandler(CommandHandler[CompleteSessionCommand]):
    def __init__(self, service: SessionTransitionService):
        self.service = service

    def handle(self, cmd: CompleteSessionCommand) -> HandlerResult[SessionEntity]:
        return self.service.complete(cmd.session_id, actor=cmd.updated_by)


class MarkMissedSessionsHandler(CommandHandler[MarkMissedSessionsCommand]):
    def __init__(self, service: SessionTransitionService):
        self.service = service

    def handle(self, cmd: MarkMissedSessionsCommand) -> HandlerResult[int]:
        return self.service.mark_missed_before(cmd.before, actor=cmd.updated_by)


class ListAgendaHandler(QueryHandler[ListAgendaQuery, list[SessionEntity]]):
    """Agenda de sessões em aberto; intervalo invertido é normalizado."""

    def __init__(self, repo: SessionRepository):
        self.repo = repo

    def handle(self, q: ListAgendaQuery) -> list[SessionEntity]:
        start, end = q.start, q.end or q.start
        if end < start:
            start, end = end, start
        return self.repo.list_open_between(start, end)
