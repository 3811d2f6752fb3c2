# ╭────────────────────────────────────────────────────────────────────────────╮
# │  ViewSets REST – Pacientes, Pacotes, Sessões e Ledger                      │
# │                                                                            │
# │  • Toda escrita passa pelo CommandBus, toda leitura pelo QueryBus          │
# │  • Paginação DRY   → mix-in centralizado                                   │
# │  • Métrica trace   → decorator `track_http`                                │
# ╰────────────────────────────────────────────────────────────────────────────╯
from __future__ import annotations

import uuid
from datetime import date
from typing import Any

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from treatment_billing.adapters.config.composition_root import container
from treatment_billing.adapters.context.request_context import current_actor
from treatment_billing.adapters.observability.decorators import track_http
from treatment_billing.core.application.commands.package_commands import (
    CreatePackageCommand,
    DeletePackageCommand,
    RegenerateSessionsCommand,
    UpdatePackageCommand,
)
from treatment_billing.core.application.commands.patient_commands import (
    CreatePatientCommand,
    DeletePatientCommand,
    UpdatePatientCommand,
)
from treatment_billing.core.application.commands.payment_commands import (
    AddPaymentCommand,
    EditPaymentCommand,
    ReconcileLedgerCommand,
    RemovePaymentCommand,
)
from treatment_billing.core.application.commands.session_commands import (
    CompleteSessionCommand,
    RescheduleSessionCommand,
)
from treatment_billing.core.application.cqrs import CommandBusImpl, QueryBusImpl
from treatment_billing.core.application.dtos.ledger_dto import PaymentDTO
from treatment_billing.core.application.dtos.package_dto import PackageDTO, PackageUpdateDTO
from treatment_billing.core.application.dtos.patient_dto import PatientDTO, PatientUpdateDTO
from treatment_billing.core.application.dtos.session_dto import RescheduleDTO
from treatment_billing.core.application.queries.package_queries import (
    GetLedgerSummaryQuery,
    GetPackageQuery,
    ListDashboardPackagesQuery,
    ListPackageSessionsQuery,
    ListPackagesByPatientQuery,
    ListPackageTransactionsQuery,
)
from treatment_billing.core.application.queries.patient_queries import GetPatientQuery, ListPatientsQuery
from treatment_billing.core.application.queries.session_queries import ListAgendaQuery
from treatment_billing.core.domain.events.exceptions import InvalidInput

from ..serializers.core_serializers import (
    AgendaSessionSerializer,
    PackageSerializer,
    PatientSerializer,
    SessionSerializer,
    TransactionSerializer,
)

# ───────────────────────────────  CQRS Buses  ────────────────────────────────
command_bus: CommandBusImpl = container.command_bus()
query_bus: QueryBusImpl = container.query_bus()

# ───────────────────────────────  Constantes  ────────────────────────────────
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200
TRUTHY = {"1", "true", "yes", "on"}

# ╭──────────────────────────────────────────────────────────────────────────╮
# │ Helper mix-in – paginação + filtros                                      │
# ╰──────────────────────────────────────────────────────────────────────────╯
class PaginationFilterMixin:
    """Remove page/page_size/with_deleted do QueryDict e devolve filtros limpos."""

    RESERVED = ("page", "page_size", "with_deleted", "search")

    @staticmethod
    def _int_param(request, name: str, default: int) -> int:
        raw = request.query_params.get(name, default)
        try:
            return int(raw)
        except (TypeError, ValueError) as exc:
            raise InvalidInput(f"Parâmetro '{name}' deve ser inteiro (recebido {raw!r})") from exc

    def _pagination(self, request) -> tuple[int, int]:
        page = max(1, self._int_param(request, "page", 1))
        size = min(MAX_PAGE_SIZE, max(1, self._int_param(request, "page_size", DEFAULT_PAGE_SIZE)))
        return page, size

    @staticmethod
    def _with_deleted(request) -> bool:
        return str(request.query_params.get("with_deleted", "")).lower() in TRUTHY

    def _filters(self, request, allowed: tuple[str, ...]) -> dict[str, Any]:
        clean: dict[str, Any] = {}
        for key in request.query_params:
            if key in self.RESERVED:
                continue
            if key not in allowed:
                raise InvalidInput(f"Filtro não suportado: {key}")
            clean[key] = request.query_params.get(key)
        search = (request.query_params.get("search") or "").strip()
        if search:
            clean["name__icontains"] = search
        return clean


def _uuid(raw, name: str = "id") -> uuid.UUID:
    try:
        return uuid.UUID(str(raw))
    except ValueError as exc:
        raise InvalidInput(f"Parâmetro '{name}' deve ser um UUID (recebido {raw!r})") from exc


def _parse_date(raw: str | None, name: str) -> date | None:
    if raw in (None, ""):
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError as exc:
        raise InvalidInput(f"Parâmetro '{name}' deve ser uma data ISO (YYYY-MM-DD)") from exc


def _paged(res, serializer_cls) -> dict[str, Any]:
    return {
        "results": serializer_cls(res.items, many=True).data,
        "total_items": res.total,
        "page": res.page,
        "page_size": res.page_size,
        "total_pages": res.total_pages,
    }


# ───────────────────────────────────────────────────────────────────────────

class PatientViewSet(PaginationFilterMixin, viewsets.ViewSet):
    FILTERS = ("name__icontains", "phone_number", "branch_name")

    @track_http("PatientViewSet_list")
    def list(self, request):
        page, page_size = self._pagination(request)
        res = query_bus.dispatch(
            ListPatientsQuery(
                filtros=self._filters(request, self.FILTERS),
                page=page,
                page_size=page_size,
                with_deleted=self._with_deleted(request),
            )
        )
        return Response(_paged(res, PatientSerializer))

    @track_http("PatientViewSet_retrieve")
    def retrieve(self, request, pk=None):
        pat = query_bus.dispatch(GetPatientQuery(patient_id=_uuid(pk), with_deleted=self._with_deleted(request)))
        return Response(PatientSerializer(pat).data)

    @track_http("PatientViewSet_create")
    def create(self, request):
        dto = PatientDTO.model_validate(request.data)
        pat = command_bus.dispatch(CreatePatientCommand(payload=dto, created_by=current_actor()))
        return Response(PatientSerializer(pat).data, status=status.HTTP_201_CREATED)

    @track_http("PatientViewSet_update")
    def partial_update(self, request, pk=None):
        dto = PatientUpdateDTO.model_validate(request.data)
        pat = command_bus.dispatch(UpdatePatientCommand(id=_uuid(pk), payload=dto, updated_by=current_actor()))
        return Response(PatientSerializer(pat).data)

    @track_http("PatientViewSet_destroy")
    def destroy(self, request, pk=None):
        report = command_bus.dispatch(DeletePatientCommand(id=_uuid(pk), deleted_by=current_actor()))
        return Response(report.to_dict())

    @track_http("PatientViewSet_packages")
    @action(detail=True, methods=["get"])
    def packages(self, request, pk=None):
        query_bus.dispatch(GetPatientQuery(patient_id=_uuid(pk)))
        pkgs = query_bus.dispatch(
            ListPackagesByPatientQuery(patient_id=_uuid(pk), with_deleted=self._with_deleted(request))
        )
        return Response(PackageSerializer(pkgs, many=True).data)


# ───────────────────────────────────────────────────────────────────────────

class PackageViewSet(PaginationFilterMixin, viewsets.ViewSet):

    @track_http("PackageViewSet_list")
    def list(self, request):
        """Sem `patient_id`: painel com todos os pacotes vivos."""
        patient_id = request.query_params.get("patient_id")
        if patient_id:
            pkgs = query_bus.dispatch(
                ListPackagesByPatientQuery(patient_id=_uuid(patient_id, "patient_id"), with_deleted=self._with_deleted(request))
            )
            return Response(PackageSerializer(pkgs, many=True).data)

        limit = None
        if request.query_params.get("limit"):
            limit = self._int_param(request, "limit", 0)
            if limit < 1:
                raise InvalidInput(f"Parâmetro 'limit' deve ser positivo (recebido {limit})")
        rows = query_bus.dispatch(ListDashboardPackagesQuery(limit=limit))
        return Response([row.model_dump(mode="json") for row in rows])

    @track_http("PackageViewSet_retrieve")
    def retrieve(self, request, pk=None):
        pkg = query_bus.dispatch(GetPackageQuery(package_id=_uuid(pk), with_deleted=self._with_deleted(request)))
        return Response(PackageSerializer(pkg).data)

    @track_http("PackageViewSet_create")
    def create(self, request):
        dto = PackageDTO.model_validate(request.data)
        pkg = command_bus.dispatch(CreatePackageCommand(payload=dto, created_by=current_actor()))
        return Response(PackageSerializer(pkg).data, status=status.HTTP_201_CREATED)

    @track_http("PackageViewSet_update")
    def partial_update(self, request, pk=None):
        dto = PackageUpdateDTO.model_validate(request.data)
        pkg = command_bus.dispatch(UpdatePackageCommand(id=_uuid(pk), payload=dto, updated_by=current_actor()))
        return Response(PackageSerializer(pkg).data)

    @track_http("PackageViewSet_destroy")
    def destroy(self, request, pk=None):
        report = command_bus.dispatch(DeletePackageCommand(id=_uuid(pk), deleted_by=current_actor()))
        return Response(report.to_dict())

    # ─────────────── sessões ─────────────── #

    @track_http("PackageViewSet_sessions")
    @action(detail=True, methods=["get"])
    def sessions(self, request, pk=None):
        items = query_bus.dispatch(
            ListPackageSessionsQuery(package_id=_uuid(pk), with_deleted=self._with_deleted(request))
        )
        return Response(SessionSerializer(items, many=True).data)

    @track_http("PackageViewSet_regenerate_sessions")
    @action(detail=True, methods=["post"], url_path="regenerate-sessions")
    def regenerate_sessions(self, request, pk=None):
        already_completed = request.data.get("already_completed")
        if already_completed is not None:
            try:
                already_completed = int(already_completed)
            except (TypeError, ValueError) as exc:
                raise InvalidInput("already_completed deve ser inteiro") from exc
        items = command_bus.dispatch(
            RegenerateSessionsCommand(
                package_id=_uuid(pk), already_completed=already_completed, requested_by=current_actor()
            )
        )
        return Response(SessionSerializer(items, many=True).data, status=status.HTTP_201_CREATED)

    # ─────────────── ledger ─────────────── #

    @track_http("PackageViewSet_transactions")
    @action(detail=True, methods=["get"])
    def transactions(self, request, pk=None):
        items = query_bus.dispatch(
            ListPackageTransactionsQuery(package_id=_uuid(pk), with_deleted=self._with_deleted(request))
        )
        return Response(TransactionSerializer(items, many=True).data)

    @track_http("PackageViewSet_payments")
    @action(detail=True, methods=["post"])
    def payments(self, request, pk=None):
        dto = PaymentDTO.model_validate(request.data)
        tx = command_bus.dispatch(AddPaymentCommand(package_id=_uuid(pk), payload=dto, created_by=current_actor()))
        return Response(TransactionSerializer(tx).data, status=status.HTTP_201_CREATED)

    @track_http("PackageViewSet_ledger")
    @action(detail=True, methods=["get"])
    def ledger(self, request, pk=None):
        summary = query_bus.dispatch(GetLedgerSummaryQuery(package_id=_uuid(pk)))
        return Response(summary.model_dump(mode="json"))

    @track_http("PackageViewSet_reconcile")
    @action(detail=True, methods=["post"])
    def reconcile(self, request, pk=None):
        result = command_bus.dispatch(ReconcileLedgerCommand(package_id=_uuid(pk), requested_by=current_actor()))
        return Response({**result.model_dump(mode="json"), "changed": result.changed})


# ───────────────────────────────────────────────────────────────────────────

class SessionViewSet(viewsets.ViewSet):

    @track_http("SessionViewSet_list")
    def list(self, request):
        """Agenda: `?start=YYYY-MM-DD[&end=YYYY-MM-DD]`."""
        start = _parse_date(request.query_params.get("start"), "start")
        if start is None:
            raise InvalidInput("Parâmetro 'start' é obrigatório")
        end = _parse_date(request.query_params.get("end"), "end")
        items = query_bus.dispatch(ListAgendaQuery(start=start, end=end))
        return Response(AgendaSessionSerializer(items, many=True).data)

    @track_http("SessionViewSet_reschedule")
    @action(detail=True, methods=["post"])
    def reschedule(self, request, pk=None):
        dto = RescheduleDTO.model_validate(request.data)
        session = command_bus.dispatch(
            RescheduleSessionCommand(session_id=_uuid(pk), new_date=dto.new_date, updated_by=current_actor())
        )
        return Response(SessionSerializer(session).data)

    @track_http("SessionViewSet_complete")
    @action(detail=True, methods=["post"])
    def complete(self, request, pk=None):
        session = command_bus.dispatch(CompleteSessionCommand(session_id=_uuid(pk), updated_by=current_actor()))
        return Response(SessionSerializer(session).data)


# ───────────────────────────────────────────────────────────────────────────

class TransactionViewSet(viewsets.ViewSet):

    @track_http("TransactionViewSet_update")
    def partial_update(self, request, pk=None):
        dto = PaymentDTO.model_validate(request.data)
        tx = command_bus.dispatch(EditPaymentCommand(transaction_id=_uuid(pk), payload=dto, updated_by=current_actor()))
        return Response(TransactionSerializer(tx).data)

    @track_http("TransactionViewSet_destroy")
    def destroy(self, request, pk=None):
        paid = command_bus.dispatch(RemovePaymentCommand(transaction_id=_uuid(pk), removed_by=current_actor()))
        return Response({"paid_payment": str(paid)})
