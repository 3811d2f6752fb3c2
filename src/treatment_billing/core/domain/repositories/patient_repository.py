from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any
from uuid import UUID

from treatment_billing.core.application.cqrs import PagedResult
from treatment_billing.core.domain.entities.patient_entity import PatientEntity


class PatientRepository(ABC):
    @abstractmethod
    def create(self, patient: PatientEntity) -> PatientEntity:
        ...

    @abstractmethod
    def update(self, patient_id: UUID, changes: dict[str, Any], updated_by: str | None = None) -> PatientEntity:
        """Atualiza campos de um paciente não removido."""
        ...

    @abstractmethod
    def find_by_id(self, patient_id: UUID, *, with_deleted: bool = False) -> PatientEntity | None:
        ...

    @abstractmethod
    def find_many(self, patient_ids: Iterable[UUID]) -> dict[UUID, PatientEntity]:
        """Busca em lote, indexada por id (inclui removidos)."""
        ...

    @abstractmethod
    def list(
        self,
        filtros: dict[str, Any],
        page: int,
        page_size: int,
        *,
        with_deleted: bool = False,
    ) -> PagedResult[PatientEntity]:
        """
        Retorna PagedResult de pacientes (mais recentes primeiro).

        - filtros: dicionário de filtros do ORM (ex.: `name__icontains`)
        - page: número da página (1-based)
        """
        ...

    @abstractmethod
    def soft_delete(self, patient_id: UUID, updated_by: str | None = None) -> int:
        """Marca o paciente como removido. Retorna 0 se já estava removido."""
        ...
