from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal


# ───────────────────────────────────────────────
# Event Base e Domain Events
# ───────────────────────────────────────────────
@dataclass(frozen=True, kw_only=True)
class DomainEvent:
    event_id: uuid.UUID = field(default_factory=uuid.uuid4)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    actor: str | None = None

# ╭──────────────────────────────────────────────╮
# │ 1. Pacotes / Sessões                          │
# ╰──────────────────────────────────────────────╯
@dataclass(frozen=True)
class PackageCreatedEvent(DomainEvent):
    package_id: uuid.UUID
    patient_id: uuid.UUID
    no_of_sessions: int

@dataclass(frozen=True)
class SessionsGeneratedEvent(DomainEvent):
    package_id: uuid.UUID
    total: int
    completed: int
    replaced: int = 0

@dataclass(frozen=True)
class SessionRescheduledEvent(DomainEvent):
    session_id: uuid.UUID
    package_id: uuid.UUID
    previous_date: date
    scheduled_date: date

@dataclass(frozen=True)
class SessionCompletedEvent(DomainEvent):
    session_id: uuid.UUID
    package_id: uuid.UUID
    actual_date: date

@dataclass(frozen=True)
class SessionMissedEvent(DomainEvent):
    session_id: uuid.UUID
    package_id: uuid.UUID
    scheduled_date: date

# ╭──────────────────────────────────────────────╮
# │ 2. Ledger de pagamentos                       │
# ╰──────────────────────────────────────────────╯
@dataclass(frozen=True)
class PaymentAddedEvent(DomainEvent):
    transaction_id: uuid.UUID
    package_id: uuid.UUID
    amount: Decimal
    paid_payment: Decimal

@dataclass(frozen=True)
class PaymentEditedEvent(DomainEvent):
    transaction_id: uuid.UUID
    package_id: uuid.UUID
    old_amount: Decimal
    new_amount: Decimal
    paid_payment: Decimal

@dataclass(frozen=True)
class PaymentRemovedEvent(DomainEvent):
    transaction_id: uuid.UUID
    package_id: uuid.UUID
    amount: Decimal
    paid_payment: Decimal

@dataclass(frozen=True)
class LedgerReconciledEvent(DomainEvent):
    package_id: uuid.UUID
    previous_paid: Decimal
    paid_payment: Decimal

# ╭──────────────────────────────────────────────╮
# │ 3. Remoção em cascata                         │
# ╰──────────────────────────────────────────────╯
@dataclass(frozen=True)
class PackageDeletedEvent(DomainEvent):
    package_id: uuid.UUID
    sessions: int
    transactions: int

@dataclass(frozen=True)
class PatientDeletedEvent(DomainEvent):
    patient_id: uuid.UUID
    packages: int
