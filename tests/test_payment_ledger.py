"""Ledger de pagamentos: teto, edição, remoção e reconciliação."""

from decimal import Decimal
from unittest.mock import patch
from uuid import uuid4

from django.test import TestCase

from plugins.django_interface.models import BuyedPackage, TransactionHistory
from tests.helpers.factories import add_payment, container, make_package, make_patient
from treatment_billing.adapters.repositories.transaction_repo_impl import TransactionRepoImpl
from treatment_billing.core.application.commands.payment_commands import (
    EditPaymentCommand,
    ReconcileLedgerCommand,
    RemovePaymentCommand,
)
from treatment_billing.core.application.dtos.ledger_dto import PaymentDTO
from treatment_billing.core.domain.events.exceptions import (
    InvalidInput,
    NotFound,
    PaymentExceedsRemaining,
)


class PaymentLedgerTests(TestCase):
    def setUp(self) -> None:
        self.bus = container().command_bus()
        self.ledger = container().ledger_service()
        self.patient = make_patient()

    def _paid(self, package_id) -> Decimal:
        return BuyedPackage.objects.get(id=package_id).paid_payment

    def _edit(self, tx_id, amount):
        return self.bus.dispatch(
            EditPaymentCommand(transaction_id=tx_id, payload=PaymentDTO(amount=Decimal(amount)), updated_by="tests")
        )

    # ─────────────── adição ─────────────── #

    def test_cap_is_total_minus_advance(self) -> None:
        pkg = make_package(self.patient.id, total_payment=Decimal("1000"), advance_payment=Decimal("200"))

        add_payment(pkg.id, "800")
        self.assertEqual(self._paid(pkg.id), Decimal("800.00"))

        with self.assertRaises(PaymentExceedsRemaining) as ctx:
            add_payment(pkg.id, "1")
        self.assertEqual(ctx.exception.remaining, Decimal("0.00"))
        self.assertEqual(self._paid(pkg.id), Decimal("800.00"))
        self.assertEqual(TransactionHistory.objects.filter(buyed_package_id=pkg.id).count(), 1)

    def test_rejection_reports_remaining_allowance(self) -> None:
        pkg = make_package(self.patient.id, total_payment=Decimal("500"), advance_payment=Decimal("0"))
        add_payment(pkg.id, "350.50")
        with self.assertRaises(PaymentExceedsRemaining) as ctx:
            add_payment(pkg.id, "200")
        self.assertEqual(ctx.exception.remaining, Decimal("149.50"))
        self.assertEqual(ctx.exception.to_dict()["remaining"], "149.50")

    def test_non_positive_amount_is_invalid(self) -> None:
        pkg = make_package(self.patient.id)
        with self.assertRaises(InvalidInput):
            self.ledger.add_payment(pkg.id, Decimal("0"))
        with self.assertRaises(InvalidInput):
            self.ledger.add_payment(pkg.id, Decimal("-10"))

    def test_unknown_package(self) -> None:
        with self.assertRaises(NotFound):
            self.ledger.add_payment(uuid4(), Decimal("10"))

    # ─────────────── edição ─────────────── #

    def test_edit_within_cap_adjusts_balance(self) -> None:
        pkg = make_package(self.patient.id, total_payment=Decimal("1000"), advance_payment=Decimal("0"))
        tx = add_payment(pkg.id, "500")

        updated = self._edit(tx.id, "600")
        self.assertEqual(updated.amount, Decimal("600.00"))
        self.assertEqual(self._paid(pkg.id), Decimal("600.00"))

        self._edit(tx.id, "100")
        self.assertEqual(self._paid(pkg.id), Decimal("100.00"))

    def test_edit_over_cap_mutates_nothing(self) -> None:
        pkg = make_package(self.patient.id, total_payment=Decimal("550"), advance_payment=Decimal("0"))
        tx = add_payment(pkg.id, "500")

        with self.assertRaises(PaymentExceedsRemaining):
            self._edit(tx.id, "600")
        self.assertEqual(TransactionHistory.objects.get(id=tx.id).amount, Decimal("500.00"))
        self.assertEqual(self._paid(pkg.id), Decimal("500.00"))

    def test_edit_removed_transaction_is_not_found(self) -> None:
        pkg = make_package(self.patient.id)
        tx = add_payment(pkg.id, "100")
        self.bus.dispatch(RemovePaymentCommand(transaction_id=tx.id, removed_by="tests"))
        with self.assertRaises(NotFound):
            self._edit(tx.id, "50")

    # ─────────────── remoção ─────────────── #

    def test_remove_never_goes_negative(self) -> None:
        pkg = make_package(self.patient.id, total_payment=Decimal("1000"), advance_payment=Decimal("0"))
        tx = add_payment(pkg.id, "500")

        paid = self.bus.dispatch(RemovePaymentCommand(transaction_id=tx.id, removed_by="tests"))
        self.assertEqual(paid, Decimal("0.00"))
        self.assertEqual(self._paid(pkg.id), Decimal("0.00"))
        self.assertTrue(TransactionHistory.objects.get(id=tx.id).is_deleted)

    def test_remove_clamps_drifted_balance(self) -> None:
        pkg = make_package(self.patient.id, total_payment=Decimal("1000"), advance_payment=Decimal("0"))
        tx = add_payment(pkg.id, "500")
        BuyedPackage.objects.filter(id=pkg.id).update(paid_payment=Decimal("100.00"))

        self.bus.dispatch(RemovePaymentCommand(transaction_id=tx.id, removed_by="tests"))
        self.assertEqual(self._paid(pkg.id), Decimal("0.00"))

    # ─────────────── leituras concorrentes ─────────────── #

    def _live_sum(self, package_id) -> Decimal:
        return TransactionRepoImpl().sum_active_amounts(package_id)

    def test_second_remove_with_outdated_read_keeps_balance(self) -> None:
        pkg = make_package(self.patient.id, total_payment=Decimal("1000"), advance_payment=Decimal("0"))
        add_payment(pkg.id, "300")
        tx = add_payment(pkg.id, "200")
        outdated = TransactionRepoImpl().find_by_id(tx.id)

        self.bus.dispatch(RemovePaymentCommand(transaction_id=tx.id, removed_by="tests"))
        with patch.object(TransactionRepoImpl, "find_by_id", return_value=outdated):
            with self.assertRaises(NotFound):
                self.ledger.remove_payment(tx.id, actor="tests")

        self.assertEqual(self._paid(pkg.id), Decimal("300.00"))
        self.assertEqual(self._paid(pkg.id), self._live_sum(pkg.id))

    def test_edit_with_outdated_amount_keeps_balance(self) -> None:
        pkg = make_package(self.patient.id, total_payment=Decimal("1000"), advance_payment=Decimal("0"))
        tx = add_payment(pkg.id, "300")
        outdated = TransactionRepoImpl().find_by_id(tx.id)

        self._edit(tx.id, "100")
        with patch.object(TransactionRepoImpl, "find_by_id", return_value=outdated):
            with self.assertRaises(NotFound):
                self.ledger.edit_payment(tx.id, Decimal("150"), actor="tests")

        self.assertEqual(TransactionHistory.objects.get(id=tx.id).amount, Decimal("100.00"))
        self.assertEqual(self._paid(pkg.id), Decimal("100.00"))
        self.assertEqual(self._paid(pkg.id), self._live_sum(pkg.id))

    # ─────────────── reconciliação ─────────────── #

    def test_reconcile_rebuilds_balance_from_history(self) -> None:
        pkg = make_package(self.patient.id, total_payment=Decimal("1000"), advance_payment=Decimal("0"))
        add_payment(pkg.id, "300")
        tx = add_payment(pkg.id, "200")
        self.bus.dispatch(RemovePaymentCommand(transaction_id=tx.id, removed_by="tests"))
        BuyedPackage.objects.filter(id=pkg.id).update(paid_payment=Decimal("999.00"))

        result = self.bus.dispatch(ReconcileLedgerCommand(package_id=pkg.id, requested_by="tests"))
        self.assertTrue(result.changed)
        self.assertEqual(result.previous_paid, Decimal("999.00"))
        self.assertEqual(result.paid_payment, Decimal("300.00"))
        self.assertEqual(self._paid(pkg.id), Decimal("300.00"))

        again = self.bus.dispatch(ReconcileLedgerCommand(package_id=pkg.id, requested_by="tests"))
        self.assertFalse(again.changed)

    def test_summary(self) -> None:
        pkg = make_package(self.patient.id, total_payment=Decimal("1000"), advance_payment=Decimal("200"))
        add_payment(pkg.id, "200")

        summary = self.ledger.summary(pkg.id)
        self.assertEqual(summary.cap, Decimal("800.00"))
        self.assertEqual(summary.paid_payment, Decimal("200.00"))
        self.assertEqual(summary.remaining, Decimal("600.00"))
        self.assertEqual(summary.progress_percent, Decimal("25.00"))
        self.assertEqual(summary.transactions, 1)

    def test_fully_advanced_package_accepts_no_payment(self) -> None:
        pkg = make_package(self.patient.id, total_payment=Decimal("300"), advance_payment=Decimal("300"))
        with self.assertRaises(PaymentExceedsRemaining):
            add_payment(pkg.id, "0.01")
        self.assertEqual(self.ledger.summary(pkg.id).progress_percent, Decimal("100.00"))
