from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import date
from uuid import UUID

from django.db.models import F, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from plugins.django_interface.models import Session as SessionModel
from treatment_billing.core.domain.entities.session_entity import SessionEntity, SessionStatus
from treatment_billing.core.domain.repositories.session_repository import SessionRepository
from treatment_billing.core.domain.services.calendar_engine import SessionSpec

from ._db import translate_db_errors

OPEN_STATUSES = (SessionStatus.PLANNED.value, SessionStatus.RESCHEDULED.value)
UNKNOWN_PATIENT = "Unknown Patient"


class SessionRepoImpl(SessionRepository):
    """Implementação Django do SessionRepository."""

    def _qs(self, with_deleted: bool = False):
        qs = SessionModel.objects.all()
        return qs if with_deleted else qs.filter(is_deleted=False)

    @translate_db_errors
    def create_many(
        self,
        package_id: UUID,
        specs: Sequence[SessionSpec],
        created_by: str | None = None,
    ) -> list[SessionEntity]:
        objs = [
            SessionModel(
                buyed_package_id=package_id,
                session_number=spec.session_number,
                scheduled_date=spec.scheduled_date,
                status=spec.status.value,
                created_by=created_by,
                updated_by=created_by,
            )
            for spec in specs
        ]
        SessionModel.objects.bulk_create(objs, batch_size=500)
        return [SessionEntity.from_model(o) for o in objs]

    @translate_db_errors
    def find_by_id(self, session_id: UUID, *, with_deleted: bool = False) -> SessionEntity | None:
        try:
            return SessionEntity.from_model(self._qs(with_deleted).get(id=session_id))
        except SessionModel.DoesNotExist:
            return None

    @translate_db_errors
    def list_by_package(self, package_id: UUID, *, with_deleted: bool = False) -> list[SessionEntity]:
        qs = self._qs(with_deleted).filter(buyed_package_id=package_id).order_by("session_number", "created_at")
        return [SessionEntity.from_model(m) for m in qs]

    @translate_db_errors
    def list_by_packages(self, package_ids: Iterable[UUID]) -> dict[UUID, list[SessionEntity]]:
        grouped: dict[UUID, list[SessionEntity]] = defaultdict(list)
        qs = self._qs().filter(buyed_package_id__in=list(package_ids)).order_by("session_number")
        for m in qs:
            grouped[m.buyed_package_id].append(SessionEntity.from_model(m))
        return dict(grouped)

    @translate_db_errors
    def list_open_between(self, start: date, end: date) -> list[SessionEntity]:
        qs = (
            self._qs()
            .filter(
                status__in=OPEN_STATUSES,
                scheduled_date__gte=start,
                scheduled_date__lte=end,
                buyed_package__is_deleted=False,
            )
            .annotate(patient_name=Coalesce(F("buyed_package__patient__name"), Value(UNKNOWN_PATIENT)))
            .order_by("scheduled_date", "session_number")
        )
        return [SessionEntity.from_model(m) for m in qs]

    @translate_db_errors
    def list_open_before(self, day: date) -> list[SessionEntity]:
        qs = self._qs().filter(status__in=OPEN_STATUSES, scheduled_date__lt=day).order_by("scheduled_date")
        return [SessionEntity.from_model(m) for m in qs]

    @translate_db_errors
    def save_transition(
        self,
        session: SessionEntity,
        *,
        expected_status: SessionStatus | None = None,
    ) -> SessionEntity | None:
        qs = self._qs().filter(id=session.id)
        if expected_status is not None:
            qs = qs.filter(status=expected_status.value)
        updated = qs.update(
            status=session.status.value,
            scheduled_date=session.scheduled_date,
            actual_date=session.actual_date,
            updated_by=session.updated_by,
            updated_at=timezone.now(),
        )
        if not updated:
            return None
        return SessionEntity.from_model(self._qs(with_deleted=True).get(id=session.id))

    @translate_db_errors
    def soft_delete_by_package(self, package_id: UUID, updated_by: str | None = None) -> int:
        return self._qs().filter(buyed_package_id=package_id).update(
            is_deleted=True, updated_by=updated_by, updated_at=timezone.now()
        )
