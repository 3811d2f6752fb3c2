from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from uuid import UUID

import structlog

from treatment_billing.core.domain.entities.package_entity import PackageEntity
from treatment_billing.core.domain.repositories import PackageRepository, SessionRepository
from treatment_billing.core.domain.services.session_aggregator import SessionSummary, summarize

logger = structlog.get_logger(__name__)


class PackageProgressService:
    """
    Progresso do pacote derivado das sessões vivas.

    As colunas `sessions_completed`/`next_session_date` do pacote são só
    cache: toda leitura passa por aqui e recalcula; toda mutação de sessão
    chama `refresh_cache`.
    """

    def __init__(self, package_repo: PackageRepository, session_repo: SessionRepository) -> None:
        self.package_repo = package_repo
        self.session_repo = session_repo

    def summary_for(self, package_id: UUID) -> SessionSummary:
        return summarize(self.session_repo.list_by_package(package_id))

    def with_progress(self, package: PackageEntity) -> PackageEntity:
        summary = self.summary_for(package.id)
        return replace(
            package,
            sessions_completed=summary.completed_count,
            next_session_date=summary.next_session_date,
        )

    def with_progress_many(self, packages: Iterable[PackageEntity]) -> list[PackageEntity]:
        packages = list(packages)
        by_package = self.session_repo.list_by_packages([p.id for p in packages])
        result = []
        for pkg in packages:
            summary = summarize(by_package.get(pkg.id, []))
            result.append(
                replace(
                    pkg,
                    sessions_completed=summary.completed_count,
                    next_session_date=summary.next_session_date,
                )
            )
        return result

    def refresh_cache(self, package_id: UUID) -> SessionSummary:
        summary = self.summary_for(package_id)
        self.package_repo.update_progress_cache(
            package_id, summary.completed_count, summary.next_session_date
        )
        logger.debug(
            "package.progress_refreshed",
            package_id=str(package_id),
            sessions_completed=summary.completed_count,
            next_session_date=str(summary.next_session_date),
        )
        return summary
