from collections.abc import Iterable
from typing import Any
from uuid import UUID

from django.core.paginator import Paginator
from django.utils import timezone

from plugins.django_interface.models import Patient as PatientModel
from treatment_billing.core.application.cqrs import PagedResult
from treatment_billing.core.domain.entities.patient_entity import PatientEntity
from treatment_billing.core.domain.repositories.patient_repository import PatientRepository

from ._db import translate_db_errors

UPDATABLE_FIELDS = ("name", "phone_number", "address", "age", "branch_name")


class PatientRepoImpl(PatientRepository):
    """Implementação Django do PatientRepository."""

    def _qs(self, with_deleted: bool = False):
        qs = PatientModel.objects.all()
        return qs if with_deleted else qs.filter(is_deleted=False)

    @translate_db_errors
    def create(self, patient: PatientEntity) -> PatientEntity:
        data = patient.to_dict()
        for key in ("created_at", "updated_at"):
            data.pop(key, None)
        model = PatientModel.objects.create(**data)
        return PatientEntity.from_model(model)

    @translate_db_errors
    def update(self, patient_id: UUID, changes: dict[str, Any], updated_by: str | None = None) -> PatientEntity:
        fields = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS}
        self._qs().filter(id=patient_id).update(**fields, updated_by=updated_by, updated_at=timezone.now())
        return PatientEntity.from_model(self._qs().get(id=patient_id))

    @translate_db_errors
    def find_by_id(self, patient_id: UUID, *, with_deleted: bool = False) -> PatientEntity | None:
        try:
            return PatientEntity.from_model(self._qs(with_deleted).get(id=patient_id))
        except PatientModel.DoesNotExist:
            return None

    @translate_db_errors
    def find_many(self, patient_ids: Iterable[UUID]) -> dict[UUID, PatientEntity]:
        return {m.id: PatientEntity.from_model(m) for m in PatientModel.objects.filter(id__in=list(patient_ids))}

    @translate_db_errors
    def list(
        self,
        filtros: dict[str, Any],
        page: int,
        page_size: int,
        *,
        with_deleted: bool = False,
    ) -> PagedResult[PatientEntity]:
        qs = self._qs(with_deleted).filter(**(filtros or {})).order_by("-created_at")
        paginator = Paginator(qs, page_size)
        page_obj = paginator.get_page(page)
        return PagedResult(
            items=[PatientEntity.from_model(m) for m in page_obj.object_list],
            total=paginator.count,
            page=page_obj.number,
            page_size=page_size,
        )

    @translate_db_errors
    def soft_delete(self, patient_id: UUID, updated_by: str | None = None) -> int:
        return self._qs().filter(id=patient_id).update(
            is_deleted=True, updated_by=updated_by, updated_at=timezone.now()
        )
