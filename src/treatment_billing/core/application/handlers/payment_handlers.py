from __future__ import annotations

from treatment_billing.core.application.cqrs import CommandHandler, HandlerResult, QueryHandler
from treatment_billing.core.application.dtos.ledger_dto import LedgerSummaryDTO
from treatment_billing.core.application.services.payment_ledger_service import PaymentLedgerService
from treatment_billing.core.domain.entities.transaction_entity import TransactionEntity
from treatment_billing.core.domain.events.exceptions import NotFound
from treatment_billing.core.domain.repositories import PackageRepository, TransactionRepository

from ..commands.payment_commands import (
    AddPaymentCommand,
    EditPaymentCommand,
    ReconcileLedgerCommand,
    RemovePaymentCommand,
)
from ..queries.package_queries import GetLedgerSummaryQuery, ListPackageTransactionsQuery


class AddPaymentHandler(CommandHandler[AddPaymentCommand]):
    def __init__(self, ledger: PaymentLedgerService):
        self.ledger = ledger

    def handle(self, cmd: AddPaymentCommand) -> HandlerResult[TransactionEntity]:
        return self.ledger.add_payment(
            cmd.package_id, cmd.payload.amount, date=cmd.payload.date, actor=cmd.created_by
        )


class EditPaymentHandler(CommandHandler[EditPaymentCommand]):
    def __init__(self, ledger: PaymentLedgerService):
        self.ledger = ledger

    def handle(self, cmd: EditPaymentCommand) -> HandlerResult[TransactionEntity]:
        return self.ledger.edit_payment(
            cmd.transaction_id, cmd.payload.amount, date=cmd.payload.date, actor=cmd.updated_by
        )


class RemovePaymentHandler(CommandHandler[RemovePaymentCommand]):
    def __init__(self, ledger: PaymentLedgerService):
        self.ledger = ledger

    def handle(self, cmd: RemovePaymentCommand) -> HandlerResult:
        return self.ledger.remove_payment(cmd.transaction_id, actor=cmd.removed_by)


class ReconcileLedgerHandler(CommandHandler[ReconcileLedgerCommand]):
    def __init__(self, ledger: PaymentLedgerService):
        self.ledger = ledger

    def handle(self, cmd: ReconcileLedgerCommand) -> HandlerResult:
        return self.ledger.reconcile(cmd.package_id, actor=cmd.requested_by)


class GetLedgerSummaryHandler(QueryHandler[GetLedgerSummaryQuery, LedgerSummaryDTO]):
    def __init__(self, ledger: PaymentLedgerService):
        self.ledger = ledger

    def handle(self, q: GetLedgerSummaryQuery) -> LedgerSummaryDTO:
        return self.ledger.summary(q.package_id)


class ListPackageTransactionsHandler(QueryHandler[ListPackageTransactionsQuery, list[TransactionEntity]]):
    def __init__(self, repo: PackageRepository, transaction_repo: TransactionRepository):
        self.repo = repo
        self.transaction_repo = transaction_repo

    def handle(self, q: ListPackageTransactionsQuery) -> list[TransactionEntity]:
        if self.repo.find_by_id(q.package_id, with_deleted=q.with_deleted) is None:
            raise NotFound("Package", q.package_id)
        return self.transaction_repo.list_by_package(q.package_id, with_deleted=q.with_deleted)
