"""
Remoção lógica em cascata: paciente → pacotes → sessões/transações.

Cada etapa é idempotente (linhas já removidas são ignoradas) e roda na sua
própria unidade de trabalho, então uma falha deixa as etapas anteriores
aplicadas e a operação pode ser repetida com segurança.
"""
from __future__ import annotations

from collections.abc import Callable
from dataclasses import asdict, dataclass
from uuid import UUID

import structlog

from treatment_billing.core.application.cqrs import HandlerResult
from treatment_billing.core.domain.events.events import DomainEvent, PackageDeletedEvent, PatientDeletedEvent
from treatment_billing.core.domain.events.exceptions import (
    CascadeDeletionError,
    ClinicOpsError,
    NotFound,
)
from treatment_billing.core.domain.repositories import (
    PackageRepository,
    PatientRepository,
    SessionRepository,
    TransactionRepository,
    UnitOfWork,
)

logger = structlog.get_logger(__name__)


@dataclass
class CascadeReport:
    """Quantidade de linhas efetivamente marcadas como removidas."""
    patients: int = 0
    packages: int = 0
    sessions: int = 0
    transactions: int = 0

    def merge(self, other: CascadeReport) -> None:
        self.patients += other.patients
        self.packages += other.packages
        self.sessions += other.sessions
        self.transactions += other.transactions

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


class CascadeDeletionService:
    def __init__(  # noqa: PLR0913
        self,
        patient_repo: PatientRepository,
        package_repo: PackageRepository,
        session_repo: SessionRepository,
        transaction_repo: TransactionRepository,
        uow_factory: Callable[[], UnitOfWork],
    ) -> None:
        self.patient_repo = patient_repo
        self.package_repo = package_repo
        self.session_repo = session_repo
        self.transaction_repo = transaction_repo
        self.uow_factory = uow_factory

    def _run_step(self, label: str, step: Callable[[], int], report: CascadeReport) -> int:
        try:
            with self.uow_factory():
                return step()
        except ClinicOpsError as exc:
            logger.error("cascade.step_failed", step=label, error=str(exc), report=report.to_dict())
            raise CascadeDeletionError([(label, exc)], report) from exc

    # ─────────────────────────── pacote ─────────────────────────── #

    def soft_delete_package(self, package_id: UUID, actor: str | None = None) -> HandlerResult:
        """
        Sessões → transações → pacote. Um pacote já removido é reprocessado
        sem efeito (contagens zero), o que completa cascatas interrompidas.
        """
        pkg = self.package_repo.find_by_id(package_id, with_deleted=True)
        if pkg is None:
            raise NotFound("Package", package_id)

        report = CascadeReport()
        prefix = f"package:{package_id}"
        report.sessions = self._run_step(
            f"{prefix}:sessions",
            lambda: self.session_repo.soft_delete_by_package(package_id, updated_by=actor),
            report,
        )
        report.transactions = self._run_step(
            f"{prefix}:transactions",
            lambda: self.transaction_repo.soft_delete_by_package(package_id, updated_by=actor),
            report,
        )
        report.packages = self._run_step(
            f"{prefix}:package",
            lambda: self.package_repo.soft_delete(package_id, updated_by=actor),
            report,
        )

        events: list[DomainEvent] = []
        if report.packages or report.sessions or report.transactions:
            logger.info("cascade.package_deleted", package_id=str(package_id), **report.to_dict())
            events.append(
                PackageDeletedEvent(
                    package_id=package_id,
                    sessions=report.sessions,
                    transactions=report.transactions,
                    actor=actor,
                )
            )
        else:
            logger.debug("cascade.package_noop", package_id=str(package_id))
        return HandlerResult(report, events)

    # ─────────────────────────── paciente ─────────────────────────── #

    def soft_delete_patient(self, patient_id: UUID, actor: str | None = None) -> HandlerResult:
        """
        Aplica a cascata a todos os pacotes vivos e só então remove o
        paciente. Falhas de pacotes são agregadas; se houver alguma, o
        paciente permanece ativo e `CascadeDeletionError` traz o relatório
        parcial.
        """
        patient = self.patient_repo.find_by_id(patient_id, with_deleted=True)
        if patient is None:
            raise NotFound("Patient", patient_id)

        report = CascadeReport()
        failures: list[tuple[str, Exception]] = []
        events: list[DomainEvent] = []

        for pkg in self.package_repo.list_by_patient(patient_id):
            try:
                result = self.soft_delete_package(pkg.id, actor=actor)
            except CascadeDeletionError as exc:
                report.merge(exc.report)
                failures.extend(exc.failures)
                continue
            report.merge(result.value)
            events.extend(result.events)

        if failures:
            logger.error(
                "cascade.patient_incomplete",
                patient_id=str(patient_id),
                failures=len(failures),
                report=report.to_dict(),
            )
            raise CascadeDeletionError(failures, report)

        report.patients = self._run_step(
            f"patient:{patient_id}",
            lambda: self.patient_repo.soft_delete(patient_id, updated_by=actor),
            report,
        )
        if report.patients:
            logger.info("cascade.patient_deleted", patient_id=str(patient_id), **report.to_dict())
            events.append(PatientDeletedEvent(patient_id=patient_id, packages=report.packages, actor=actor))
        return HandlerResult(report, events)
