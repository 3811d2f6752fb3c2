from .package_handlers import (  # noqa
    CreatePackageHandler,
    DeletePackageHandler,
    GetPackageHandler,
    ListDashboardPackagesHandler,
    ListPackageSessionsHandler,
    ListPackagesByPatientHandler,
    RegenerateSessionsHandler,
    UpdatePackageHandler,
)
from .patient_handlers import (  # noqa
    CreatePatientHandler,
    DeletePatientHandler,
    GetPatientHandler,
    ListPatientsHandler,
    UpdatePatientHandler,
)
from .payment_handlers import (  # noqa
    AddPaymentHandler,
    EditPaymentHandler,
    GetLedgerSummaryHandler,
    ListPackageTransactionsHandler,
    ReconcileLedgerHandler,
    RemovePaymentHandler,
)
from .session_handlers import (  # noqa
    CompleteSessionHandler,
    ListAgendaHandler,
    MarkMissedSessionsHandler,
    RescheduleSessionHandler,
)
