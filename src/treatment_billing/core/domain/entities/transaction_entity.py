from __future__ import annotations

import datetime as dt
import uuid
from dataclasses import dataclass
from decimal import Decimal

from treatment_billing.core.domain.entities._base import EntityMixin


@dataclass(slots=True)
class TransactionEntity(EntityMixin):
    id: uuid.UUID
    buyed_package_id: uuid.UUID
    amount: Decimal
    date: dt.date | None = None
    is_deleted: bool = False
    created_by: str | None = None
    updated_by: str | None = None
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None
