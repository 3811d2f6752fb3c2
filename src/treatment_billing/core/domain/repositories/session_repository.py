from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from datetime import date
from uuid import UUID

from treatment_billing.core.domain.entities.session_entity import SessionEntity, SessionStatus
from treatment_billing.core.domain.services.calendar_engine import SessionSpec


class SessionRepository(ABC):
    @abstractmethod
    def create_many(
        self,
        package_id: UUID,
        specs: Sequence[SessionSpec],
        created_by: str | None = None,
    ) -> list[SessionEntity]:
        """Insere o lote de sessões gerado pelo calendário."""
        ...

    @abstractmethod
    def find_by_id(self, session_id: UUID, *, with_deleted: bool = False) -> SessionEntity | None:
        ...

    @abstractmethod
    def list_by_package(self, package_id: UUID, *, with_deleted: bool = False) -> list[SessionEntity]:
        """Sessões de um pacote ordenadas por `session_number`."""
        ...

    @abstractmethod
    def list_by_packages(self, package_ids: Iterable[UUID]) -> dict[UUID, list[SessionEntity]]:
        """Sessões vivas de vários pacotes, agrupadas por pacote."""
        ...

    @abstractmethod
    def list_open_between(self, start: date, end: date) -> list[SessionEntity]:
        """
        Sessões planned/rescheduled com data em [start, end], ordenadas por
        data, com `patient_name` preenchido.
        """
        ...

    @abstractmethod
    def list_open_before(self, day: date) -> list[SessionEntity]:
        """Sessões planned/rescheduled com data anterior a `day`."""
        ...

    @abstractmethod
    def save_transition(
        self,
        session: SessionEntity,
        *,
        expected_status: SessionStatus | None = None,
    ) -> SessionEntity | None:
        """
        Persiste status, `scheduled_date`, `actual_date` e `updated_by`.
        Com `expected_status`, só grava se a linha viva ainda estiver nesse
        status; caso contrário retorna None.
        """
        ...

    @abstractmethod
    def soft_delete_by_package(self, package_id: UUID, updated_by: str | None = None) -> int:
        """Remove as sessões vivas do pacote. Retorna a quantidade afetada."""
        ...
