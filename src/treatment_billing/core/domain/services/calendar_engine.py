"""
Geração do calendário de sessões de um pacote.

Aritmética pura sobre dias corridos: nenhuma leitura de relógio, nenhum I/O.
A mesma entrada sempre produz a mesma sequência.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

from treatment_billing.core.domain.entities.session_entity import SessionStatus
from treatment_billing.core.domain.events.exceptions import InvalidInput

MIN_SESSIONS = 1
MAX_SESSIONS = 1000
MIN_GAP_DAYS = 1
MAX_GAP_DAYS = 365

SUNDAY = 6  # date.weekday()


@dataclass(frozen=True, slots=True)
class SessionSpec:
    session_number: int
    scheduled_date: date
    status: SessionStatus


def shift_sunday_to_monday(day: date) -> date:
    """Domingo vira a segunda seguinte. Correção única, sem nova checagem."""
    if day.weekday() == SUNDAY:
        return day + timedelta(days=1)
    return day


def validate_schedule_params(total_sessions: int, gap_days: int) -> None:
    if not MIN_SESSIONS <= total_sessions <= MAX_SESSIONS:
        raise InvalidInput(
            f"Número de sessões deve estar entre {MIN_SESSIONS} e {MAX_SESSIONS} (recebido {total_sessions})"
        )
    if not MIN_GAP_DAYS <= gap_days <= MAX_GAP_DAYS:
        raise InvalidInput(
            f"Intervalo entre sessões deve estar entre {MIN_GAP_DAYS} e {MAX_GAP_DAYS} dias (recebido {gap_days})"
        )


def generate_schedule(
    start_date: date,
    total_sessions: int,
    gap_days: int,
    already_completed: int = 0,
) -> list[SessionSpec]:
    """
    Expande o pacote em `total_sessions` sessões a partir de `start_date`.

    - sessão i (1-based) cai em `start_date + (i-1) * gap_days`, com a
      regra domingo → segunda aplicada;
    - sessões com número <= `already_completed` nascem `completed`
      (lançamento retroativo), as demais `planned`.

    `already_completed <= total_sessions` é responsabilidade do chamador.
    """
    validate_schedule_params(total_sessions, gap_days)

    specs: list[SessionSpec] = []
    for number in range(1, total_sessions + 1):
        try:
            raw = start_date + timedelta(days=(number - 1) * gap_days)
        except OverflowError as exc:
            raise InvalidInput(
                f"Sessão {number} cairia após {date.max.isoformat()}; reduza sessões, intervalo ou data inicial"
            ) from exc
        specs.append(
            SessionSpec(
                session_number=number,
                scheduled_date=shift_sunday_to_monday(raw),
                status=SessionStatus.COMPLETED if number <= already_completed else SessionStatus.PLANNED,
            )
        )
    return specs
