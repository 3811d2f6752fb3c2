from django.db import transaction

from treatment_billing.core.domain.repositories.unit_of_work import UnitOfWork


class DjangoUnitOfWork(UnitOfWork):
    """`transaction.atomic()`: aninhado vira savepoint."""

    def __init__(self, using: str | None = None) -> None:
        self._using = using
        self._atomic = None

    def __enter__(self) -> "DjangoUnitOfWork":
        self._atomic = transaction.atomic(using=self._using)
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        atomic, self._atomic = self._atomic, None
        atomic.__exit__(exc_type, exc, tb)
