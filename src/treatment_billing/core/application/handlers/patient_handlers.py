from __future__ import annotations

import uuid

from treatment_billing.core.application.cqrs import CommandHandler, HandlerResult, PagedResult, QueryHandler
from treatment_billing.core.application.services.cascade_deletion_service import (
    CascadeDeletionService,
    CascadeReport,
)
from treatment_billing.core.domain.entities.patient_entity import PatientEntity
from treatment_billing.core.domain.events.exceptions import NotFound
from treatment_billing.core.domain.repositories import PatientRepository

from ..commands.patient_commands import CreatePatientCommand, DeletePatientCommand, UpdatePatientCommand
from ..queries.patient_queries import GetPatientQuery, ListPatientsQuery

# ——— COMMANDS ———————————————————————————————————————————————


class CreatePatientHandler(CommandHandler[CreatePatientCommand]):
    def __init__(self, repo: PatientRepository):
        self.repo = repo

    def handle(self, cmd: CreatePatientCommand) -> PatientEntity:
        data = cmd.payload.model_dump()
        data["id"] = uuid.uuid4()
        data["created_by"] = data["updated_by"] = cmd.created_by
        return self.repo.create(PatientEntity.from_dict(data))


class UpdatePatientHandler(CommandHandler[UpdatePatientCommand]):
    def __init__(self, repo: PatientRepository):
        self.repo = repo

    def handle(self, cmd: UpdatePatientCommand) -> PatientEntity:
        if self.repo.find_by_id(cmd.id) is None:
            raise NotFound("Patient", cmd.id)
        changes = cmd.payload.model_dump(exclude_unset=True)
        return self.repo.update(cmd.id, changes, updated_by=cmd.updated_by)


class DeletePatientHandler(CommandHandler[DeletePatientCommand]):
    def __init__(self, cascade: CascadeDeletionService):
        self.cascade = cascade

    def handle(self, cmd: DeletePatientCommand) -> HandlerResult[CascadeReport]:
        return self.cascade.soft_delete_patient(cmd.id, actor=cmd.deleted_by)


# ——— QUERIES ————————————————————————————————————————————————


class GetPatientHandler(QueryHandler[GetPatientQuery, PatientEntity]):
    def __init__(self, repo: PatientRepository):
        self.repo = repo

    def handle(self, q: GetPatientQuery) -> PatientEntity:
        patient = self.repo.find_by_id(q.patient_id, with_deleted=q.with_deleted)
        if patient is None:
            raise NotFound("Patient", q.patient_id)
        return patient


class ListPatientsHandler(QueryHandler[ListPatientsQuery, PagedResult[PatientEntity]]):
    def __init__(self, repo: PatientRepository):
        self.repo = repo

    def handle(self, q: ListPatientsQuery) -> PagedResult[PatientEntity]:
        return self.repo.list(q.filtros, q.page, q.page_size, with_deleted=q.with_deleted)
