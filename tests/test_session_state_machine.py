"""Transições de status de sessão."""

import uuid
from datetime import date

from django.test import SimpleTestCase

from treatment_billing.core.domain.entities.session_entity import SessionEntity, SessionStatus
from treatment_billing.core.domain.events.exceptions import InvalidTransition
from treatment_billing.core.domain.services.session_state_machine import SessionStateMachine

TODAY = date(2024, 3, 5)


def planned(**extra) -> SessionEntity:
    data = dict(
        id=uuid.uuid4(),
        buyed_package_id=uuid.uuid4(),
        session_number=1,
        scheduled_date=date(2024, 3, 4),
    )
    data.update(extra)
    return SessionEntity(**data)


class SessionStateMachineTests(SimpleTestCase):
    def setUp(self) -> None:
        self.machine = SessionStateMachine(today=lambda: TODAY)

    def test_complete_stamps_actual_date(self) -> None:
        done = self.machine.complete(planned(), updated_by="u1")
        self.assertEqual(done.status, SessionStatus.COMPLETED)
        self.assertEqual(done.actual_date, TODAY)
        self.assertEqual(done.updated_by, "u1")

    def test_complete_twice_fails_and_keeps_actual_date(self) -> None:
        done = self.machine.complete(planned())
        later = SessionStateMachine(today=lambda: date(2024, 4, 1))
        with self.assertRaises(InvalidTransition):
            later.complete(done)
        self.assertEqual(done.actual_date, TODAY)

    def test_reschedule_applies_sunday_shift(self) -> None:
        moved = self.machine.reschedule(planned(), date(2024, 3, 10))
        self.assertEqual(moved.status, SessionStatus.RESCHEDULED)
        self.assertEqual(moved.scheduled_date, date(2024, 3, 11))

    def test_rescheduled_can_move_again_and_complete(self) -> None:
        moved = self.machine.reschedule(planned(), date(2024, 3, 12))
        moved_again = self.machine.reschedule(moved, date(2024, 3, 14))
        self.assertEqual(moved_again.scheduled_date, date(2024, 3, 14))
        self.assertEqual(self.machine.complete(moved_again).status, SessionStatus.COMPLETED)

    def test_completed_cannot_be_rescheduled(self) -> None:
        done = self.machine.complete(planned())
        with self.assertRaises(InvalidTransition) as ctx:
            self.machine.reschedule(done, date(2024, 3, 20))
        self.assertEqual(ctx.exception.current, "completed")
        self.assertEqual(done.scheduled_date, date(2024, 3, 4))

    def test_missed_is_terminal(self) -> None:
        missed = self.machine.mark_missed(planned())
        self.assertEqual(missed.status, SessionStatus.MISSED)
        with self.assertRaises(InvalidTransition):
            self.machine.complete(missed)
        with self.assertRaises(InvalidTransition):
            self.machine.reschedule(missed, date(2024, 3, 20))

    def test_original_entity_is_not_mutated(self) -> None:
        original = planned()
        self.machine.complete(original)
        self.assertEqual(original.status, SessionStatus.PLANNED)
        self.assertIsNone(original.actual_date)
