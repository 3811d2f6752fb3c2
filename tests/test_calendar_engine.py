"""Geração do calendário de sessões."""

from datetime import date, timedelta

from django.test import SimpleTestCase

from treatment_billing.core.domain.entities.session_entity import SessionStatus
from treatment_billing.core.domain.events.exceptions import InvalidInput
from treatment_billing.core.domain.services.calendar_engine import (
    generate_schedule,
    shift_sunday_to_monday,
)

MONDAY = date(2024, 1, 1)
SUNDAY = date(2024, 1, 7)


class ShiftSundayTests(SimpleTestCase):
    def test_sunday_moves_to_following_monday(self) -> None:
        self.assertEqual(shift_sunday_to_monday(SUNDAY), date(2024, 1, 8))

    def test_other_weekdays_are_kept(self) -> None:
        for offset in range(6):
            day = MONDAY + timedelta(days=offset)
            self.assertEqual(shift_sunday_to_monday(day), day)


class GenerateScheduleTests(SimpleTestCase):
    def test_dates_follow_gap_with_sunday_shift(self) -> None:
        specs = generate_schedule(MONDAY, total_sessions=3, gap_days=3)
        self.assertEqual(
            [s.scheduled_date for s in specs],
            [date(2024, 1, 1), date(2024, 1, 4), date(2024, 1, 8)],
        )
        self.assertEqual([s.session_number for s in specs], [1, 2, 3])

    def test_raw_date_rule_holds_for_many_gaps(self) -> None:
        for gap in range(1, 15):
            for spec in generate_schedule(MONDAY, total_sessions=30, gap_days=gap):
                raw = MONDAY + timedelta(days=(spec.session_number - 1) * gap)
                expected = raw + timedelta(days=1) if raw.weekday() == 6 else raw
                self.assertEqual(spec.scheduled_date, expected)
                self.assertNotEqual(spec.scheduled_date.weekday(), 6)

    def test_shift_is_not_recursive(self) -> None:
        # gap de 1 dia: sábado, domingo→segunda e segunda coincidem
        specs = generate_schedule(date(2024, 1, 6), total_sessions=3, gap_days=1)
        self.assertEqual(
            [s.scheduled_date for s in specs],
            [date(2024, 1, 6), date(2024, 1, 8), date(2024, 1, 8)],
        )

    def test_already_completed_marks_first_sessions(self) -> None:
        specs = generate_schedule(MONDAY, total_sessions=5, gap_days=7, already_completed=2)
        self.assertEqual(
            [s.status for s in specs],
            [SessionStatus.COMPLETED] * 2 + [SessionStatus.PLANNED] * 3,
        )

    def test_same_input_same_output(self) -> None:
        first = generate_schedule(MONDAY, 12, 5, 4)
        second = generate_schedule(MONDAY, 12, 5, 4)
        self.assertEqual(first, second)

    def test_limits(self) -> None:
        self.assertEqual(len(generate_schedule(MONDAY, 1, 1)), 1)
        self.assertEqual(len(generate_schedule(MONDAY, 1000, 365)), 1000)
        for total, gap in ((0, 7), (1001, 7), (10, 0), (10, 366)):
            with self.assertRaises(InvalidInput):
                generate_schedule(MONDAY, total, gap)

    def test_dates_past_calendar_end_are_invalid(self) -> None:
        with self.assertRaises(InvalidInput):
            generate_schedule(date(9999, 1, 1), 1000, 365)
