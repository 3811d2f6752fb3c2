"""
Ledger de pagamentos de um pacote.

O histórico de transações é a fonte da verdade; `paid_payment` no pacote é
um saldo materializado. Toda mutação grava (1) a linha da transação e
(2) o saldo do pacote, nessa ordem, dentro da unidade de trabalho. Se a
segunda etapa se perder, `reconcile` reconstrói o saldo a partir do
histórico.
"""
from __future__ import annotations

from collections.abc import Callable
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

import structlog

from treatment_billing.core.application.cqrs import HandlerResult
from treatment_billing.core.application.dtos.ledger_dto import LedgerSummaryDTO, ReconcileResultDTO
from treatment_billing.core.domain.entities.package_entity import ZERO, PackageEntity
from treatment_billing.core.domain.entities.transaction_entity import TransactionEntity
from treatment_billing.core.domain.events.events import (
    LedgerReconciledEvent,
    PaymentAddedEvent,
    PaymentEditedEvent,
    PaymentRemovedEvent,
)
from treatment_billing.core.domain.events.exceptions import (
    InvalidInput,
    NotFound,
    PaymentExceedsRemaining,
)
from treatment_billing.core.domain.repositories import (
    PackageRepository,
    TransactionRepository,
    UnitOfWork,
)

logger = structlog.get_logger(__name__)

CENT = Decimal("0.01")


def _money(value) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


class PaymentLedgerService:
    def __init__(
        self,
        package_repo: PackageRepository,
        transaction_repo: TransactionRepository,
        uow_factory: Callable[[], UnitOfWork],
    ) -> None:
        self.package_repo = package_repo
        self.transaction_repo = transaction_repo
        self.uow_factory = uow_factory

    # ───────────────────────────── helpers ───────────────────────────── #

    def _load_package(self, package_id: UUID) -> PackageEntity:
        pkg = self.package_repo.find_by_id(package_id, for_update=True)
        if pkg is None:
            raise NotFound("Package", package_id)
        return pkg

    def _load_transaction(self, transaction_id: UUID) -> TransactionEntity:
        tx = self.transaction_repo.find_by_id(transaction_id)
        if tx is None:
            raise NotFound("Transaction", transaction_id)
        return tx

    def _lock_transaction(self, transaction_id: UUID) -> tuple[TransactionEntity, PackageEntity]:
        """
        Trava o pacote dono da transação e relê a transação já sob a trava,
        para que valor e status não venham de uma leitura anterior.
        """
        tx = self._load_transaction(transaction_id)
        pkg = self._load_package(tx.buyed_package_id)
        return self._load_transaction(transaction_id), pkg

    @staticmethod
    def _ensure_within_cap(pkg: PackageEntity, new_paid: Decimal) -> None:
        cap = pkg.payment_cap
        if new_paid > cap:
            raise PaymentExceedsRemaining(
                remaining=max(ZERO, cap - _money(pkg.paid_payment)),
                cap=cap,
                paid=_money(pkg.paid_payment),
            )

    @staticmethod
    def _positive(amount) -> Decimal:
        amount = _money(amount)
        if amount <= ZERO:
            raise InvalidInput(f"Valor do pagamento deve ser positivo (recebido {amount})")
        return amount

    # ─────────────────────────── API pública ─────────────────────────── #

    def add_payment(self, package_id: UUID, amount, date=None, actor: str | None = None) -> HandlerResult:
        amount = self._positive(amount)
        with self.uow_factory():
            pkg = self._load_package(package_id)
            new_paid = _money(pkg.paid_payment) + amount
            self._ensure_within_cap(pkg, new_paid)

            tx = self.transaction_repo.create(package_id, amount, date=date, created_by=actor)
            self.package_repo.update_paid_payment(package_id, new_paid, updated_by=actor)

        logger.info(
            "ledger.payment_added",
            package_id=str(package_id),
            transaction_id=str(tx.id),
            amount=str(amount),
            paid_payment=str(new_paid),
        )
        event = PaymentAddedEvent(
            transaction_id=tx.id, package_id=package_id, amount=amount, paid_payment=new_paid, actor=actor
        )
        return HandlerResult(tx, [event])

    def edit_payment(self, transaction_id: UUID, new_amount, date=None, actor: str | None = None) -> HandlerResult:
        new_amount = self._positive(new_amount)
        with self.uow_factory():
            tx, pkg = self._lock_transaction(transaction_id)
            old_amount = _money(tx.amount)
            delta = new_amount - old_amount
            if delta > ZERO:
                self._ensure_within_cap(pkg, _money(pkg.paid_payment) + delta)

            # grava só se a linha ainda estiver viva e com o valor lido
            updated = self.transaction_repo.update_amount(
                transaction_id, new_amount, date=date, updated_by=actor, expected_amount=old_amount
            )
            if updated is None:
                raise NotFound("Transaction", transaction_id)
            new_paid = max(ZERO, _money(pkg.paid_payment) + delta)
            self.package_repo.update_paid_payment(pkg.id, new_paid, updated_by=actor)

        logger.info(
            "ledger.payment_edited",
            package_id=str(pkg.id),
            transaction_id=str(transaction_id),
            old_amount=str(old_amount),
            new_amount=str(new_amount),
            paid_payment=str(new_paid),
        )
        event = PaymentEditedEvent(
            transaction_id=transaction_id,
            package_id=pkg.id,
            old_amount=old_amount,
            new_amount=new_amount,
            paid_payment=new_paid,
            actor=actor,
        )
        return HandlerResult(updated, [event])

    def remove_payment(self, transaction_id: UUID, actor: str | None = None) -> HandlerResult:
        """Remoção nunca viola o teto: só reduz o saldo (com piso zero)."""
        with self.uow_factory():
            tx, pkg = self._lock_transaction(transaction_id)

            if not self.transaction_repo.soft_delete(transaction_id, updated_by=actor):
                raise NotFound("Transaction", transaction_id)
            new_paid = max(ZERO, _money(pkg.paid_payment) - _money(tx.amount))
            self.package_repo.update_paid_payment(pkg.id, new_paid, updated_by=actor)

        logger.info(
            "ledger.payment_removed",
            package_id=str(pkg.id),
            transaction_id=str(transaction_id),
            amount=str(tx.amount),
            paid_payment=str(new_paid),
        )
        event = PaymentRemovedEvent(
            transaction_id=transaction_id,
            package_id=pkg.id,
            amount=_money(tx.amount),
            paid_payment=new_paid,
            actor=actor,
        )
        return HandlerResult(new_paid, [event])

    def reconcile(self, package_id: UUID, actor: str | None = None) -> HandlerResult:
        """
        Reconstrói `paid_payment` como a soma das transações não removidas.
        Idempotente; não é chamado automaticamente.
        """
        with self.uow_factory():
            pkg = self._load_package(package_id)
            previous = _money(pkg.paid_payment)
            actual = _money(self.transaction_repo.sum_active_amounts(package_id))
            if actual != previous:
                self.package_repo.update_paid_payment(package_id, actual, updated_by=actor)

        result = ReconcileResultDTO(package_id=package_id, previous_paid=previous, paid_payment=actual)
        if not result.changed:
            logger.debug("ledger.reconcile_noop", package_id=str(package_id), paid_payment=str(actual))
            return HandlerResult(result)

        logger.warning(
            "ledger.reconciled",
            package_id=str(package_id),
            previous_paid=str(previous),
            paid_payment=str(actual),
        )
        event = LedgerReconciledEvent(
            package_id=package_id, previous_paid=previous, paid_payment=actual, actor=actor
        )
        return HandlerResult(result, [event])

    def summary(self, package_id: UUID) -> LedgerSummaryDTO:
        pkg = self.package_repo.find_by_id(package_id)
        if pkg is None:
            raise NotFound("Package", package_id)
        cap = pkg.payment_cap
        paid = _money(pkg.paid_payment)
        progress = (paid / cap * 100).quantize(CENT) if cap > ZERO else Decimal("100.00")
        return LedgerSummaryDTO(
            package_id=pkg.id,
            total_payment=_money(pkg.total_payment),
            advance_payment=_money(pkg.advance_payment),
            cap=cap,
            paid_payment=paid,
            remaining=pkg.remaining_payment,
            progress_percent=progress,
            transactions=len(self.transaction_repo.list_by_package(package_id)),
        )
