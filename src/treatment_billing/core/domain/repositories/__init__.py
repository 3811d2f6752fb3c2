from .package_repository import PackageRepository
from .patient_repository import PatientRepository
from .session_repository import SessionRepository
from .transaction_repository import TransactionRepository
from .unit_of_work import SequentialUnitOfWork, UnitOfWork

__all__ = [
    "PackageRepository",
    "PatientRepository",
    "SequentialUnitOfWork",
    "SessionRepository",
    "TransactionRepository",
    "UnitOfWork",
]
