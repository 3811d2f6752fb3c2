from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from treatment_billing.core.domain.entities.package_entity import PackageEntity


class PackageRepository(ABC):
    @abstractmethod
    def create(self, package: PackageEntity) -> PackageEntity:
        """Insere o pacote com `paid_payment = 0`."""
        ...

    @abstractmethod
    def update(self, package_id: UUID, changes: dict[str, Any], updated_by: str | None = None) -> PackageEntity:
        ...

    @abstractmethod
    def find_by_id(
        self,
        package_id: UUID,
        *,
        with_deleted: bool = False,
        for_update: bool = False,
    ) -> PackageEntity | None:
        """
        Recupera um pacote. `for_update=True` bloqueia a linha até o fim da
        unidade de trabalho corrente, quando o backend suporta.
        """
        ...

    @abstractmethod
    def list_by_patient(self, patient_id: UUID, *, with_deleted: bool = False) -> list[PackageEntity]:
        ...

    @abstractmethod
    def list_all(self, *, with_deleted: bool = False, limit: int | None = None) -> list[PackageEntity]:
        """Pacotes ordenados por data de início (mais recentes primeiro)."""
        ...

    @abstractmethod
    def update_paid_payment(self, package_id: UUID, paid_payment: Decimal, updated_by: str | None = None) -> None:
        """Grava o saldo materializado do ledger."""
        ...

    @abstractmethod
    def update_progress_cache(self, package_id: UUID, sessions_completed: int, next_session_date: date | None) -> None:
        """Grava o cache de progresso (nunca lido como verdade)."""
        ...

    @abstractmethod
    def soft_delete(self, package_id: UUID, updated_by: str | None = None) -> int:
        """Retorna 0 se o pacote já estava removido."""
        ...
