"""Derivação de `sessions_completed` e `next_session_date`."""

import uuid
from datetime import date

from django.test import SimpleTestCase

from treatment_billing.core.domain.entities.session_entity import SessionEntity, SessionStatus
from treatment_billing.core.domain.services.session_aggregator import summarize

PACKAGE_ID = uuid.uuid4()


def session(number: int, day: date, status: SessionStatus, **extra) -> SessionEntity:
    return SessionEntity(
        id=uuid.uuid4(),
        buyed_package_id=PACKAGE_ID,
        session_number=number,
        scheduled_date=day,
        status=status,
        **extra,
    )


class SummarizeTests(SimpleTestCase):
    def test_next_is_anchored_on_latest_completed_date(self) -> None:
        summary = summarize([
            session(1, date(2024, 1, 1), SessionStatus.COMPLETED),
            session(2, date(2024, 1, 15), SessionStatus.PLANNED),
            session(3, date(2024, 1, 8), SessionStatus.PLANNED),
        ])
        self.assertEqual(summary.completed_count, 1)
        self.assertEqual(summary.next_session_date, date(2024, 1, 15))

    def test_without_completed_uses_earliest_open_date(self) -> None:
        summary = summarize([
            session(1, date(2024, 1, 10), SessionStatus.RESCHEDULED),
            session(2, date(2024, 1, 8), SessionStatus.PLANNED),
        ])
        self.assertEqual(summary.completed_count, 0)
        self.assertEqual(summary.next_session_date, date(2024, 1, 8))

    def test_out_of_order_completion_skips_superseded_sessions(self) -> None:
        summary = summarize([
            session(1, date(2024, 1, 1), SessionStatus.COMPLETED),
            session(2, date(2024, 1, 8), SessionStatus.PLANNED),
            session(3, date(2024, 1, 15), SessionStatus.COMPLETED),
            session(4, date(2024, 1, 22), SessionStatus.PLANNED),
        ])
        self.assertEqual(summary.completed_count, 2)
        self.assertEqual(summary.next_session_date, date(2024, 1, 22))

    def test_no_upcoming_session(self) -> None:
        summary = summarize([
            session(1, date(2024, 1, 1), SessionStatus.COMPLETED),
            session(2, date(2024, 1, 8), SessionStatus.MISSED),
        ])
        self.assertEqual(summary.completed_count, 1)
        self.assertIsNone(summary.next_session_date)
        self.assertIsNone(summarize([]).next_session_date)

    def test_deleted_sessions_are_ignored(self) -> None:
        summary = summarize([
            session(1, date(2024, 1, 1), SessionStatus.COMPLETED, is_deleted=True),
            session(2, date(2024, 1, 8), SessionStatus.PLANNED, is_deleted=True),
            session(3, date(2024, 1, 15), SessionStatus.PLANNED),
        ])
        self.assertEqual(summary.completed_count, 0)
        self.assertEqual(summary.next_session_date, date(2024, 1, 15))
