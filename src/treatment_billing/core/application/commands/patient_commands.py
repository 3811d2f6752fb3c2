from __future__ import annotations

import uuid
from dataclasses import dataclass

from treatment_billing.core.application.cqrs import CommandDTO
from treatment_billing.core.application.dtos.patient_dto import PatientDTO, PatientUpdateDTO


@dataclass(frozen=True)
class CreatePatientCommand(CommandDTO):
    payload: PatientDTO
    created_by: str | None = None

@dataclass(frozen=True)
class UpdatePatientCommand(CommandDTO):
    id: uuid.UUID
    payload: PatientUpdateDTO
    updated_by: str | None = None

@dataclass(frozen=True)
class DeletePatientCommand(CommandDTO):
    """Remoção em cascata: pacotes → sessões → transações → paciente."""
    id: uuid.UUID
    deleted_by: str | None = None
