from __future__ import annotations

from treatment_billing.core.application.cqrs import CommandHandler, HandlerResult, QueryHandler
from treatment_billing.core.application.dtos.package_dto import DashboardPackageDTO
from treatment_billing.core.application.services.cascade_deletion_service import CascadeDeletionService
from treatment_billing.core.application.services.package_progress_service import PackageProgressService
from treatment_billing.core.application.services.package_service import PackageSchedulingService
from treatment_billing.core.domain.entities.package_entity import PackageEntity
from treatment_billing.core.domain.entities.session_entity import SessionEntity
from treatment_billing.core.domain.events.exceptions import NotFound
from treatment_billing.core.domain.repositories import PackageRepository, PatientRepository, SessionRepository

from ..commands.package_commands import (
    CreatePackageCommand,
    DeletePackageCommand,
    RegenerateSessionsCommand,
    UpdatePackageCommand,
)
from ..queries.package_queries import (
    GetPackageQuery,
    ListDashboardPackagesQuery,
    ListPackagesByPatientQuery,
    ListPackageSessionsQuery,
)

UNKNOWN_PATIENT = "Unknown Patient"

# ——— COMMANDS ———————————————————————————————————————————————


class CreatePackageHandler(CommandHandler[CreatePackageCommand]):
    def __init__(self, service: PackageSchedulingService):
        self.service = service

    def handle(self, cmd: CreatePackageCommand) -> HandlerResult[PackageEntity]:
        return self.service.create_package(cmd.payload, actor=cmd.created_by)


class UpdatePackageHandler(CommandHandler[UpdatePackageCommand]):
    def __init__(self, service: PackageSchedulingService):
        self.service = service

    def handle(self, cmd: UpdatePackageCommand) -> PackageEntity:
        changes = cmd.payload.model_dump(exclude_unset=True)
        return self.service.update_package(cmd.id, changes, actor=cmd.updated_by)


class RegenerateSessionsHandler(CommandHandler[RegenerateSessionsCommand]):
    def __init__(self, service: PackageSchedulingService):
        self.service = service

    def handle(self, cmd: RegenerateSessionsCommand) -> HandlerResult[list[SessionEntity]]:
        return self.service.regenerate_sessions(
            cmd.package_id, already_completed=cmd.already_completed, actor=cmd.requested_by
        )


class DeletePackageHandler(CommandHandler[DeletePackageCommand]):
    def __init__(self, cascade: CascadeDeletionService):
        self.cascade = cascade

    def handle(self, cmd: DeletePackageCommand) -> HandlerResult:
        return self.cascade.soft_delete_package(cmd.id, actor=cmd.deleted_by)


# ——— QUERIES ————————————————————————————————————————————————


class GetPackageHandler(QueryHandler[GetPackageQuery, PackageEntity]):
    def __init__(self, repo: PackageRepository, progress: PackageProgressService):
        self.repo = repo
        self.progress = progress

    def handle(self, q: GetPackageQuery) -> PackageEntity:
        pkg = self.repo.find_by_id(q.package_id, with_deleted=q.with_deleted)
        if pkg is None:
            raise NotFound("Package", q.package_id)
        return self.progress.with_progress(pkg)


class ListPackagesByPatientHandler(QueryHandler[ListPackagesByPatientQuery, list[PackageEntity]]):
    def __init__(self, repo: PackageRepository, progress: PackageProgressService):
        self.repo = repo
        self.progress = progress

    def handle(self, q: ListPackagesByPatientQuery) -> list[PackageEntity]:
        packages = self.repo.list_by_patient(q.patient_id, with_deleted=q.with_deleted)
        return self.progress.with_progress_many(packages)


class ListDashboardPackagesHandler(QueryHandler[ListDashboardPackagesQuery, list[DashboardPackageDTO]]):
    """Todos os pacotes vivos, início mais recente primeiro, com contato do paciente."""

    def __init__(
        self,
        repo: PackageRepository,
        patient_repo: PatientRepository,
        progress: PackageProgressService,
    ):
        self.repo = repo
        self.patient_repo = patient_repo
        self.progress = progress

    def handle(self, q: ListDashboardPackagesQuery) -> list[DashboardPackageDTO]:
        packages = self.progress.with_progress_many(self.repo.list_all(limit=q.limit))
        patients = self.patient_repo.find_many({p.patient_id for p in packages})
        rows = []
        for pkg in packages:
            patient = patients.get(pkg.patient_id)
            rows.append(
                DashboardPackageDTO(
                    id=pkg.id,
                    patient_id=pkg.patient_id,
                    patient_name=patient.name if patient else UNKNOWN_PATIENT,
                    patient_phone=patient.phone_number if patient else None,
                    no_of_sessions=pkg.no_of_sessions,
                    sessions_completed=pkg.sessions_completed,
                    remaining_sessions=pkg.remaining_sessions,
                    next_session_date=pkg.next_session_date,
                    start_date=pkg.start_date,
                    total_payment=pkg.total_payment,
                    advance_payment=pkg.advance_payment,
                    paid_payment=pkg.paid_payment,
                    remaining_payment=pkg.remaining_payment,
                )
            )
        return rows


class ListPackageSessionsHandler(QueryHandler[ListPackageSessionsQuery, list[SessionEntity]]):
    def __init__(self, repo: PackageRepository, session_repo: SessionRepository):
        self.repo = repo
        self.session_repo = session_repo

    def handle(self, q: ListPackageSessionsQuery) -> list[SessionEntity]:
        if self.repo.find_by_id(q.package_id, with_deleted=q.with_deleted) is None:
            raise NotFound("Package", q.package_id)
        return self.session_repo.list_by_package(q.package_id, with_deleted=q.with_deleted)
