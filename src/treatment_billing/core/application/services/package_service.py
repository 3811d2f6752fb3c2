from __future__ import annotations

import uuid
from collections.abc import Callable
from decimal import Decimal
from typing import Any
from uuid import UUID

import structlog

from treatment_billing.core.application.cqrs import HandlerResult
from treatment_billing.core.application.dtos.package_dto import PackageDTO
from treatment_billing.core.application.services.package_progress_service import PackageProgressService
from treatment_billing.core.domain.entities.package_entity import ZERO, PackageEntity
from treatment_billing.core.domain.events.events import PackageCreatedEvent, SessionsGeneratedEvent
from treatment_billing.core.domain.events.exceptions import InvalidInput, NotFound
from treatment_billing.core.domain.repositories import (
    PackageRepository,
    PatientRepository,
    SessionRepository,
    UnitOfWork,
)
from treatment_billing.core.domain.services.calendar_engine import generate_schedule, validate_schedule_params

logger = structlog.get_logger(__name__)

EDITABLE_FIELDS = (
    "no_of_sessions",
    "total_payment",
    "advance_payment",
    "gap_between_sessions",
    "start_date",
)


class PackageSchedulingService:
    """Criação/edição de pacotes e (re)geração do calendário de sessões."""

    def __init__(  # noqa: PLR0913
        self,
        patient_repo: PatientRepository,
        package_repo: PackageRepository,
        session_repo: SessionRepository,
        progress: PackageProgressService,
        uow_factory: Callable[[], UnitOfWork],
    ) -> None:
        self.patient_repo = patient_repo
        self.package_repo = package_repo
        self.session_repo = session_repo
        self.progress = progress
        self.uow_factory = uow_factory

    @staticmethod
    def _check_payment_terms(total: Decimal, advance: Decimal) -> None:
        if advance > total:
            raise InvalidInput(
                f"Adiantamento ({advance}) não pode ser maior que o valor total ({total})"
            )

    def _live_package(self, package_id: UUID, *, for_update: bool = False) -> PackageEntity:
        pkg = self.package_repo.find_by_id(package_id, for_update=for_update)
        if pkg is None:
            raise NotFound("Package", package_id)
        return pkg

    # ─────────────────────────── criação ─────────────────────────── #

    def create_package(self, payload: PackageDTO, actor: str | None = None) -> HandlerResult:
        """
        Grava o pacote (pago = 0) e em seguida o lote de sessões. As
        primeiras `sessions_completed` sessões nascem concluídas.
        """
        if self.patient_repo.find_by_id(payload.patient_id) is None:
            raise NotFound("Patient", payload.patient_id)
        validate_schedule_params(payload.no_of_sessions, payload.gap_between_sessions)
        self._check_payment_terms(payload.total_payment, payload.advance_payment)
        if payload.sessions_completed > payload.no_of_sessions:
            raise InvalidInput("Sessões concluídas não podem exceder o total do pacote")

        entity = PackageEntity(
            id=uuid.uuid4(),
            patient_id=payload.patient_id,
            no_of_sessions=payload.no_of_sessions,
            total_payment=payload.total_payment,
            advance_payment=payload.advance_payment,
            gap_between_sessions=payload.gap_between_sessions,
            start_date=payload.start_date,
            paid_payment=ZERO,
            created_by=actor,
            updated_by=actor,
        )
        specs = generate_schedule(
            payload.start_date,
            payload.no_of_sessions,
            payload.gap_between_sessions,
            payload.sessions_completed,
        )
        with self.uow_factory():
            pkg = self.package_repo.create(entity)
            self.session_repo.create_many(pkg.id, specs, created_by=actor)
            self.progress.refresh_cache(pkg.id)

        logger.info(
            "package.created",
            package_id=str(pkg.id),
            patient_id=str(pkg.patient_id),
            sessions=len(specs),
            completed=payload.sessions_completed,
        )
        events = [
            PackageCreatedEvent(
                package_id=pkg.id, patient_id=pkg.patient_id, no_of_sessions=pkg.no_of_sessions, actor=actor
            ),
            SessionsGeneratedEvent(
                package_id=pkg.id, total=len(specs), completed=payload.sessions_completed, actor=actor
            ),
        ]
        return HandlerResult(self.progress.with_progress(pkg), events)

    # ─────────────────────────── edição ─────────────────────────── #

    def update_package(self, package_id: UUID, changes: dict[str, Any], actor: str | None = None) -> PackageEntity:
        """
        Altera termos do pacote. O calendário não é refeito aqui: use
        `regenerate_sessions` após mudar datas ou quantidade.
        """
        changes = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS and v is not None}
        with self.uow_factory():
            pkg = self._live_package(package_id, for_update=True)
            total = Decimal(changes.get("total_payment", pkg.total_payment))
            advance = Decimal(changes.get("advance_payment", pkg.advance_payment))
            self._check_payment_terms(total, advance)
            if Decimal(pkg.paid_payment) > max(ZERO, total - advance):
                raise InvalidInput(
                    f"Valor já pago ({pkg.paid_payment}) excede o novo limite ({max(ZERO, total - advance)})"
                )
            validate_schedule_params(
                changes.get("no_of_sessions", pkg.no_of_sessions),
                changes.get("gap_between_sessions", pkg.gap_between_sessions),
            )
            updated = self.package_repo.update(package_id, changes, updated_by=actor) if changes else pkg

        logger.info("package.updated", package_id=str(package_id), fields=sorted(changes))
        return self.progress.with_progress(updated)

    # ─────────────────────────── regeneração ─────────────────────────── #

    def regenerate_sessions(
        self,
        package_id: UUID,
        already_completed: int | None = None,
        actor: str | None = None,
    ) -> HandlerResult:
        """
        Remove as sessões vivas e gera um novo lote com os termos atuais do
        pacote. Sem `already_completed`, mantém a contagem concluída derivada.
        """
        pkg = self._live_package(package_id)
        if already_completed is None:
            already_completed = self.progress.summary_for(package_id).completed_count
        if not 0 <= already_completed <= pkg.no_of_sessions:
            raise InvalidInput(
                f"Sessões concluídas devem estar entre 0 e {pkg.no_of_sessions} (recebido {already_completed})"
            )
        specs = generate_schedule(
            pkg.start_date, pkg.no_of_sessions, pkg.gap_between_sessions, already_completed
        )
        with self.uow_factory():
            replaced = self.session_repo.soft_delete_by_package(package_id, updated_by=actor)
            sessions = self.session_repo.create_many(package_id, specs, created_by=actor)
            self.progress.refresh_cache(package_id)

        logger.info(
            "package.sessions_regenerated",
            package_id=str(package_id),
            replaced=replaced,
            total=len(specs),
            completed=already_completed,
        )
        event = SessionsGeneratedEvent(
            package_id=package_id,
            total=len(specs),
            completed=already_completed,
            replaced=replaced,
            actor=actor,
        )
        return HandlerResult(sessions, [event])
