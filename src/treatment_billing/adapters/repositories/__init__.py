from .package_repo_impl import PackageRepoImpl
from .patient_repo_impl import PatientRepoImpl
from .session_repo_impl import SessionRepoImpl
from .transaction_repo_impl import TransactionRepoImpl
from .unit_of_work_impl import DjangoUnitOfWork

__all__ = [
    "DjangoUnitOfWork",
    "PackageRepoImpl",
    "PatientRepoImpl",
    "SessionRepoImpl",
    "TransactionRepoImpl",
]
