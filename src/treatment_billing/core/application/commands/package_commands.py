from __future__ import annotations

import uuid
from dataclasses import dataclass

from treatment_billing.core.application.cqrs import CommandDTO
from treatment_billing.core.application.dtos.package_dto import PackageDTO, PackageUpdateDTO


@dataclass(frozen=True)
class CreatePackageCommand(CommandDTO):
    payload: PackageDTO
    created_by: str | None = None

@dataclass(frozen=True)
class UpdatePackageCommand(CommandDTO):
    id: uuid.UUID
    payload: PackageUpdateDTO
    updated_by: str | None = None

@dataclass(frozen=True)
class DeletePackageCommand(CommandDTO):
    id: uuid.UUID
    deleted_by: str | None = None

@dataclass(frozen=True)
class RegenerateSessionsCommand(CommandDTO):
    """
    Substitui as sessões vivas do pacote por um novo lote.
    `already_completed=None` preserva a contagem concluída atual.
    """
    package_id: uuid.UUID
    already_completed: int | None = None
    requested_by: str | None = None
