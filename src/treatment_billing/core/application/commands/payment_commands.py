from __future__ import annotations

import uuid
from dataclasses import dataclass

from treatment_billing.core.application.cqrs import CommandDTO
from treatment_billing.core.application.dtos.ledger_dto import PaymentDTO


@dataclass(frozen=True)
class AddPaymentCommand(CommandDTO):
    package_id: uuid.UUID
    payload: PaymentDTO
    created_by: str | None = None

@dataclass(frozen=True)
class EditPaymentCommand(CommandDTO):
    transaction_id: uuid.UUID
    payload: PaymentDTO
    updated_by: str | None = None

@dataclass(frozen=True)
class RemovePaymentCommand(CommandDTO):
    transaction_id: uuid.UUID
    removed_by: str | None = None

@dataclass(frozen=True)
class ReconcileLedgerCommand(CommandDTO):
    package_id: uuid.UUID
    requested_by: str | None = None
