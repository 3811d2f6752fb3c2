from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from django.db import transaction
from django.utils import timezone

from plugins.django_interface.models import BuyedPackage as PackageModel
from treatment_billing.core.domain.entities.package_entity import PackageEntity
from treatment_billing.core.domain.repositories.package_repository import PackageRepository

from ._db import translate_db_errors

UPDATABLE_FIELDS = (
    "no_of_sessions",
    "total_payment",
    "advance_payment",
    "gap_between_sessions",
    "start_date",
)


class PackageRepoImpl(PackageRepository):
    """
    Implementação Django do PackageRepository.

    Com `lock_rows=True`, `find_by_id(for_update=True)` usa
    `select_for_update()` quando há transação aberta, serializando as
    escritas do ledger na linha do pacote.
    """

    def __init__(self, lock_rows: bool = True) -> None:
        self.lock_rows = lock_rows

    def _qs(self, with_deleted: bool = False):
        qs = PackageModel.objects.all()
        return qs if with_deleted else qs.filter(is_deleted=False)

    @translate_db_errors
    def create(self, package: PackageEntity) -> PackageEntity:
        data = package.to_dict()
        for key in ("created_at", "updated_at", "next_session_date", "sessions_completed"):
            data.pop(key, None)
        data["paid_payment"] = Decimal("0.00")
        model = PackageModel.objects.create(**data)
        return PackageEntity.from_model(model)

    @translate_db_errors
    def update(self, package_id: UUID, changes: dict[str, Any], updated_by: str | None = None) -> PackageEntity:
        fields = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS}
        self._qs().filter(id=package_id).update(**fields, updated_by=updated_by, updated_at=timezone.now())
        return PackageEntity.from_model(self._qs().get(id=package_id))

    @translate_db_errors
    def find_by_id(
        self,
        package_id: UUID,
        *,
        with_deleted: bool = False,
        for_update: bool = False,
    ) -> PackageEntity | None:
        qs = self._qs(with_deleted)
        if for_update and self.lock_rows and transaction.get_connection().in_atomic_block:
            qs = qs.select_for_update()
        try:
            return PackageEntity.from_model(qs.get(id=package_id))
        except PackageModel.DoesNotExist:
            return None

    @translate_db_errors
    def list_by_patient(self, patient_id: UUID, *, with_deleted: bool = False) -> list[PackageEntity]:
        qs = self._qs(with_deleted).filter(patient_id=patient_id).order_by("-start_date", "-created_at")
        return [PackageEntity.from_model(m) for m in qs]

    @translate_db_errors
    def list_all(self, *, with_deleted: bool = False, limit: int | None = None) -> list[PackageEntity]:
        qs = self._qs(with_deleted).order_by("-start_date", "-created_at")
        if limit is not None and limit > 0:
            qs = qs[:limit]
        return [PackageEntity.from_model(m) for m in qs]

    @translate_db_errors
    def update_paid_payment(self, package_id: UUID, paid_payment: Decimal, updated_by: str | None = None) -> None:
        PackageModel.objects.filter(id=package_id).update(
            paid_payment=paid_payment, updated_by=updated_by, updated_at=timezone.now()
        )

    @translate_db_errors
    def update_progress_cache(self, package_id: UUID, sessions_completed: int, next_session_date: date | None) -> None:
        PackageModel.objects.filter(id=package_id).update(
            sessions_completed=sessions_completed, next_session_date=next_session_date
        )

    @translate_db_errors
    def soft_delete(self, package_id: UUID, updated_by: str | None = None) -> int:
        return self._qs().filter(id=package_id).update(
            is_deleted=True, updated_by=updated_by, updated_at=timezone.now()
        )
