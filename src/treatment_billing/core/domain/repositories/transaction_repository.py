import datetime as dt
from abc import ABC, abstractmethod
from decimal import Decimal
from uuid import UUID

from treatment_billing.core.domain.entities.transaction_entity import TransactionEntity


class TransactionRepository(ABC):
    @abstractmethod
    def create(
        self,
        package_id: UUID,
        amount: Decimal,
        date: dt.date | None = None,
        created_by: str | None = None,
    ) -> TransactionEntity:
        ...

    @abstractmethod
    def find_by_id(self, transaction_id: UUID, *, with_deleted: bool = False) -> TransactionEntity | None:
        ...

    @abstractmethod
    def list_by_package(self, package_id: UUID, *, with_deleted: bool = False) -> list[TransactionEntity]:
        """Histórico do pacote, data mais recente primeiro."""
        ...

    @abstractmethod
    def update_amount(
        self,
        transaction_id: UUID,
        amount: Decimal,
        date: dt.date | None = None,
        updated_by: str | None = None,
        *,
        expected_amount: Decimal | None = None,
    ) -> TransactionEntity | None:
        """
        Com `expected_amount`, só grava se o valor atual ainda for esse.
        Retorna None quando nenhuma linha viva foi alterada.
        """
        ...

    @abstractmethod
    def soft_delete(self, transaction_id: UUID, updated_by: str | None = None) -> int:
        """Remove a transação viva. Retorna 0 se ela já estava removida."""
        ...

    @abstractmethod
    def soft_delete_by_package(self, package_id: UUID, updated_by: str | None = None) -> int:
        ...

    @abstractmethod
    def sum_active_amounts(self, package_id: UUID) -> Decimal:
        """Soma dos valores não removidos: a verdade do ledger."""
        ...
