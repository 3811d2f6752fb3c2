"""Criação de pacotes, transições de sessão e cache de progresso."""

from datetime import date
from decimal import Decimal
from unittest.mock import patch
from uuid import uuid4

from django.test import TestCase

from plugins.django_interface.models import BuyedPackage, Session
from tests.helpers.factories import MONDAY, add_payment, container, make_package, make_patient
from treatment_billing.adapters.repositories.session_repo_impl import SessionRepoImpl
from treatment_billing.core.application.commands.package_commands import (
    RegenerateSessionsCommand,
    UpdatePackageCommand,
)
from treatment_billing.core.application.commands.session_commands import (
    CompleteSessionCommand,
    MarkMissedSessionsCommand,
    RescheduleSessionCommand,
)
from treatment_billing.core.application.dtos.package_dto import PackageUpdateDTO
from treatment_billing.core.application.queries.package_queries import (
    GetPackageQuery,
    ListDashboardPackagesQuery,
)
from treatment_billing.core.application.queries.session_queries import ListAgendaQuery
from treatment_billing.core.domain.events.exceptions import InvalidInput, InvalidTransition, NotFound
from treatment_billing.core.domain.services.session_state_machine import SessionStateMachine


class PackageFlowTests(TestCase):
    def setUp(self) -> None:
        self.bus = container().command_bus()
        self.queries = container().query_bus()
        self.patient = make_patient(name="João Lima")

    def _sessions(self, package_id):
        return list(Session.objects.filter(buyed_package_id=package_id, is_deleted=False).order_by("session_number"))

    def test_create_generates_sessions_and_cache(self) -> None:
        pkg = make_package(self.patient.id, no_of_sessions=4, gap_between_sessions=3, sessions_completed=1)

        sessions = self._sessions(pkg.id)
        self.assertEqual(
            [s.scheduled_date for s in sessions],
            [date(2024, 1, 1), date(2024, 1, 4), date(2024, 1, 8), date(2024, 1, 10)],
        )
        self.assertEqual([s.status for s in sessions], ["completed", "planned", "planned", "planned"])
        self.assertEqual(pkg.sessions_completed, 1)
        self.assertEqual(pkg.next_session_date, date(2024, 1, 4))
        self.assertEqual(pkg.paid_payment, Decimal("0.00"))

        row = BuyedPackage.objects.get(id=pkg.id)
        self.assertEqual(row.sessions_completed, 1)
        self.assertEqual(row.next_session_date, date(2024, 1, 4))

    def test_create_for_unknown_patient(self) -> None:
        with self.assertRaises(NotFound):
            make_package(uuid4())

    def test_transitions_refresh_cache(self) -> None:
        pkg = make_package(self.patient.id, no_of_sessions=3, gap_between_sessions=7)
        first, second, _third = self._sessions(pkg.id)

        self.bus.dispatch(CompleteSessionCommand(session_id=first.id, updated_by="tests"))
        row = BuyedPackage.objects.get(id=pkg.id)
        self.assertEqual(row.sessions_completed, 1)
        self.assertEqual(row.next_session_date, date(2024, 1, 8))

        moved = self.bus.dispatch(
            RescheduleSessionCommand(session_id=second.id, new_date=date(2024, 1, 14), updated_by="tests")
        )
        self.assertEqual(moved.scheduled_date, date(2024, 1, 15))
        self.assertEqual(BuyedPackage.objects.get(id=pkg.id).next_session_date, date(2024, 1, 15))

        with self.assertRaises(InvalidTransition):
            self.bus.dispatch(CompleteSessionCommand(session_id=first.id))
        self.assertEqual(Session.objects.get(id=first.id).status, "completed")

    def test_transition_from_outdated_read_is_refused(self) -> None:
        pkg = make_package(self.patient.id, no_of_sessions=3)
        first = self._sessions(pkg.id)[0]
        outdated = SessionRepoImpl().find_by_id(first.id)

        service = container().session_service()
        service.state_machine = SessionStateMachine(today=lambda: date(2024, 1, 1))
        service.complete(first.id, actor="tests")

        service.state_machine = SessionStateMachine(today=lambda: date(2024, 2, 2))
        with patch.object(SessionRepoImpl, "find_by_id", return_value=outdated):
            with self.assertRaises(InvalidTransition):
                service.complete(first.id, actor="tests")
            with self.assertRaises(InvalidTransition):
                service.reschedule(first.id, date(2024, 3, 4), actor="tests")

        row = Session.objects.get(id=first.id)
        self.assertEqual(row.status, "completed")
        self.assertEqual(row.actual_date, date(2024, 1, 1))
        self.assertEqual(row.scheduled_date, MONDAY)

    def test_reads_recompute_stale_cache(self) -> None:
        pkg = make_package(self.patient.id, no_of_sessions=3)
        Session.objects.filter(buyed_package_id=pkg.id, session_number=1).update(status="completed")
        BuyedPackage.objects.filter(id=pkg.id).update(sessions_completed=0, next_session_date=None)

        fresh = self.queries.dispatch(GetPackageQuery(package_id=pkg.id))
        self.assertEqual(fresh.sessions_completed, 1)
        self.assertEqual(fresh.next_session_date, date(2024, 1, 8))
        self.assertEqual(fresh.remaining_sessions, 2)

    def test_regenerate_replaces_live_sessions(self) -> None:
        pkg = make_package(self.patient.id, no_of_sessions=3, gap_between_sessions=7)
        self.bus.dispatch(
            UpdatePackageCommand(id=pkg.id, payload=PackageUpdateDTO(no_of_sessions=5, gap_between_sessions=2))
        )
        # edição não refaz o calendário
        self.assertEqual(len(self._sessions(pkg.id)), 3)

        sessions = self.bus.dispatch(RegenerateSessionsCommand(package_id=pkg.id, already_completed=2))
        self.assertEqual(len(sessions), 5)
        live = self._sessions(pkg.id)
        self.assertEqual([s.session_number for s in live], [1, 2, 3, 4, 5])
        self.assertEqual([s.status for s in live][:3], ["completed", "completed", "planned"])
        self.assertEqual(Session.objects.filter(buyed_package_id=pkg.id, is_deleted=True).count(), 3)
        self.assertEqual(BuyedPackage.objects.get(id=pkg.id).sessions_completed, 2)

        with self.assertRaises(InvalidInput):
            self.bus.dispatch(RegenerateSessionsCommand(package_id=pkg.id, already_completed=6))

    def test_update_rejects_inconsistent_terms(self) -> None:
        pkg = make_package(self.patient.id, total_payment=Decimal("1000"), advance_payment=Decimal("0"))
        add_payment(pkg.id, "600")

        with self.assertRaises(InvalidInput):
            self.bus.dispatch(UpdatePackageCommand(id=pkg.id, payload=PackageUpdateDTO(advance_payment=Decimal("1200"))))
        with self.assertRaises(InvalidInput):
            self.bus.dispatch(UpdatePackageCommand(id=pkg.id, payload=PackageUpdateDTO(total_payment=Decimal("500"))))

        updated = self.bus.dispatch(
            UpdatePackageCommand(id=pkg.id, payload=PackageUpdateDTO(total_payment=Decimal("1500")), updated_by="u9")
        )
        self.assertEqual(updated.total_payment, Decimal("1500.00"))
        self.assertEqual(updated.updated_by, "u9")

    def test_mark_missed_batch(self) -> None:
        pkg = make_package(self.patient.id, no_of_sessions=3, gap_between_sessions=7)
        first = self._sessions(pkg.id)[0]
        self.bus.dispatch(CompleteSessionCommand(session_id=first.id))

        missed = self.bus.dispatch(MarkMissedSessionsCommand(before=date(2024, 1, 10), updated_by="system"))
        self.assertEqual(missed, 1)
        statuses = [s.status for s in self._sessions(pkg.id)]
        self.assertEqual(statuses, ["completed", "missed", "planned"])
        self.assertEqual(BuyedPackage.objects.get(id=pkg.id).next_session_date, date(2024, 1, 15))

    def test_agenda_and_dashboard(self) -> None:
        pkg = make_package(self.patient.id, no_of_sessions=3, gap_between_sessions=7)
        other = make_package(make_patient(name="Ana").id, no_of_sessions=2, start_date=date(2024, 2, 5))

        agenda = self.queries.dispatch(ListAgendaQuery(start=date(2024, 1, 31), end=MONDAY))
        self.assertEqual([s.scheduled_date for s in agenda], [date(2024, 1, 1), date(2024, 1, 8), date(2024, 1, 15)])
        self.assertEqual({s.patient_name for s in agenda}, {"João Lima"})

        rows = self.queries.dispatch(ListDashboardPackagesQuery())
        self.assertEqual([r.id for r in rows], [other.id, pkg.id])
        self.assertEqual(rows[1].patient_name, "João Lima")
        self.assertEqual(rows[1].remaining_payment, Decimal("800.00"))
        self.assertEqual(len(self.queries.dispatch(ListDashboardPackagesQuery(limit=1))), 1)
