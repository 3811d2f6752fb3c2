from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any

from treatment_billing.core.application.cqrs import PaginatedQueryDTO, QueryDTO


@dataclass(frozen=True)
class GetPatientQuery(QueryDTO):
    patient_id: uuid.UUID
    with_deleted: bool = False

@dataclass(frozen=True)
class ListPatientsQuery(PaginatedQueryDTO[dict[str, Any]]):
    with_deleted: bool = False
