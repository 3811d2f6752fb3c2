from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType


class UnitOfWork(ABC):
    """
    Fronteira das escritas em várias linhas (transação → saldo do pacote,
    pacote → lote de sessões, sessões → transações → pacote).

    Um backend transacional torna o bloco atômico; sem suporte, as etapas
    são aplicadas em sequência e o algoritmo continua correto porque o
    histórico de transações é a fonte da verdade.
    """

    @abstractmethod
    def __enter__(self) -> UnitOfWork:
        ...

    @abstractmethod
    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool | None:
        ...


class SequentialUnitOfWork(UnitOfWork):
    """Sem atomicidade: cada escrita é confirmada isoladamente."""

    def __enter__(self) -> SequentialUnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        return None
