from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime

from treatment_billing.core.domain.entities._base import EntityMixin


@dataclass(slots=True)
class PatientEntity(EntityMixin):
    id: uuid.UUID
    name: str
    phone_number: str
    address: str | None = None
    age: int | None = None
    branch_name: str | None = None
    is_deleted: bool = False
    created_by: str | None = None
    updated_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
