from __future__ import annotations

import uuid
from dataclasses import dataclass

from treatment_billing.core.application.cqrs import QueryDTO


@dataclass(frozen=True)
class GetPackageQuery(QueryDTO):
    package_id: uuid.UUID
    with_deleted: bool = False

@dataclass(frozen=True)
class ListPackagesByPatientQuery(QueryDTO):
    patient_id: uuid.UUID
    with_deleted: bool = False

@dataclass(frozen=True)
class ListDashboardPackagesQuery(QueryDTO):
    limit: int | None = None

@dataclass(frozen=True)
class ListPackageSessionsQuery(QueryDTO):
    package_id: uuid.UUID
    with_deleted: bool = False

@dataclass(frozen=True)
class ListPackageTransactionsQuery(QueryDTO):
    package_id: uuid.UUID
    with_deleted: bool = False

@dataclass(frozen=True)
class GetLedgerSummaryQuery(QueryDTO):
    package_id: uuid.UUID
