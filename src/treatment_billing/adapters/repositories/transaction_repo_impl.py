import datetime as dt
from decimal import Decimal
from uuid import UUID

from django.db.models import Sum
from django.utils import timezone

from plugins.django_interface.models import TransactionHistory as TransactionModel
from treatment_billing.core.domain.entities.transaction_entity import TransactionEntity
from treatment_billing.core.domain.repositories.transaction_repository import TransactionRepository

from ._db import translate_db_errors


class TransactionRepoImpl(TransactionRepository):
    """Histórico de pagamentos: só inserção, edição de valor e remoção lógica."""

    def _qs(self, with_deleted: bool = False):
        qs = TransactionModel.objects.all()
        return qs if with_deleted else qs.filter(is_deleted=False)

    @translate_db_errors
    def create(
        self,
        package_id: UUID,
        amount: Decimal,
        date: dt.date | None = None,
        created_by: str | None = None,
    ) -> TransactionEntity:
        model = TransactionModel.objects.create(
            buyed_package_id=package_id,
            amount=amount,
            date=date or timezone.localdate(),
            created_by=created_by,
            updated_by=created_by,
        )
        return TransactionEntity.from_model(model)

    @translate_db_errors
    def find_by_id(self, transaction_id: UUID, *, with_deleted: bool = False) -> TransactionEntity | None:
        try:
            return TransactionEntity.from_model(self._qs(with_deleted).get(id=transaction_id))
        except TransactionModel.DoesNotExist:
            return None

    @translate_db_errors
    def list_by_package(self, package_id: UUID, *, with_deleted: bool = False) -> list[TransactionEntity]:
        qs = self._qs(with_deleted).filter(buyed_package_id=package_id).order_by("-date", "-created_at")
        return [TransactionEntity.from_model(m) for m in qs]

    @translate_db_errors
    def update_amount(
        self,
        transaction_id: UUID,
        amount: Decimal,
        date: dt.date | None = None,
        updated_by: str | None = None,
        *,
        expected_amount: Decimal | None = None,
    ) -> TransactionEntity | None:
        changes = {"amount": amount, "updated_by": updated_by, "updated_at": timezone.now()}
        if date is not None:
            changes["date"] = date
        qs = self._qs().filter(id=transaction_id)
        if expected_amount is not None:
            qs = qs.filter(amount=expected_amount)
        if not qs.update(**changes):
            return None
        return TransactionEntity.from_model(self._qs().get(id=transaction_id))

    @translate_db_errors
    def soft_delete(self, transaction_id: UUID, updated_by: str | None = None) -> int:
        return self._qs().filter(id=transaction_id).update(
            is_deleted=True, updated_by=updated_by, updated_at=timezone.now()
        )

    @translate_db_errors
    def soft_delete_by_package(self, package_id: UUID, updated_by: str | None = None) -> int:
        return self._qs().filter(buyed_package_id=package_id).update(
            is_deleted=True, updated_by=updated_by, updated_at=timezone.now()
        )

    @translate_db_errors
    def sum_active_amounts(self, package_id: UUID) -> Decimal:
        total = self._qs().filter(buyed_package_id=package_id).aggregate(total=Sum("amount"))["total"]
        return Decimal(total or 0)
