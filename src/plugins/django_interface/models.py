"""
Domínio → ORM dos pacotes de tratamento.

⚑ Remoção sempre lógica (`is_deleted` + `updated_by`), nunca física
⚑ `paid_payment` materializa a soma das transações vivas
⚑ `sessions_completed`/`next_session_date` são apenas cache de leitura
⚑ Número de sessão único por pacote entre as linhas vivas
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.db import models
from django.db.models import CheckConstraint, F, Index, Q, UniqueConstraint


class AuditedModel(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    is_deleted = models.BooleanField(default=False, db_index=True)
    created_by = models.CharField(max_length=64, null=True, blank=True)
    updated_by = models.CharField(max_length=64, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


# ╭──────────────────────────────────────────────╮
# │ 1. Pacientes                                 │
# ╰──────────────────────────────────────────────╯
class Patient(AuditedModel):
    name = models.CharField(max_length=255)
    phone_number = models.CharField(max_length=32)
    address = models.TextField(null=True, blank=True)
    age = models.PositiveSmallIntegerField(null=True, blank=True)
    branch_name = models.CharField(max_length=120, null=True, blank=True)

    class Meta:
        db_table = "patients"
        ordering = ["-created_at"]
        indexes = [Index(fields=["name"]), Index(fields=["phone_number"])]

    def __str__(self) -> str:
        return self.name


# ╭──────────────────────────────────────────────╮
# │ 2. Pacotes                                   │
# ╰──────────────────────────────────────────────╯
class BuyedPackage(AuditedModel):
    patient = models.ForeignKey(Patient, on_delete=models.PROTECT, related_name="packages")
    no_of_sessions = models.PositiveIntegerField()
    total_payment = models.DecimalField(max_digits=12, decimal_places=2)
    advance_payment = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    paid_payment = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    gap_between_sessions = models.PositiveIntegerField()
    start_date = models.DateField()
    # cache, recalculado a cada mutação de sessão
    sessions_completed = models.PositiveIntegerField(default=0)
    next_session_date = models.DateField(null=True, blank=True)

    class Meta:
        db_table = "buyed_packages"
        ordering = ["-start_date"]
        indexes = [Index(fields=["patient", "is_deleted"]), Index(fields=["start_date"])]
        constraints = [
            CheckConstraint(condition=Q(advance_payment__lte=F("total_payment")), name="pkg_advance_lte_total"),
            CheckConstraint(condition=Q(paid_payment__gte=0), name="pkg_paid_gte_zero"),
        ]

    def __str__(self) -> str:
        return f"{self.patient_id} · {self.no_of_sessions} sessões desde {self.start_date}"


# ╭──────────────────────────────────────────────╮
# │ 3. Sessões                                   │
# ╰──────────────────────────────────────────────╯
class Session(AuditedModel):
    class Status(models.TextChoices):
        PLANNED = "planned", "Planned"
        COMPLETED = "completed", "Completed"
        MISSED = "missed", "Missed"
        RESCHEDULED = "rescheduled", "Rescheduled"

    buyed_package = models.ForeignKey(BuyedPackage, on_delete=models.PROTECT, related_name="sessions")
    session_number = models.PositiveIntegerField()
    scheduled_date = models.DateField(db_index=True)
    actual_date = models.DateField(null=True, blank=True)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PLANNED, db_index=True)

    class Meta:
        db_table = "sessions"
        ordering = ["session_number"]
        constraints = [
            UniqueConstraint(
                fields=["buyed_package", "session_number"],
                condition=Q(is_deleted=False),
                name="uniq_live_session_number",
            ),
        ]
        indexes = [Index(fields=["buyed_package", "is_deleted"]), Index(fields=["status", "scheduled_date"])]

    def __str__(self) -> str:
        return f"#{self.session_number} {self.scheduled_date} ({self.status})"


# ╭──────────────────────────────────────────────╮
# │ 4. Histórico de pagamentos                   │
# ╰──────────────────────────────────────────────╯
class TransactionHistory(AuditedModel):
    buyed_package = models.ForeignKey(BuyedPackage, on_delete=models.PROTECT, related_name="transactions")
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    date = models.DateField(null=True, blank=True)

    class Meta:
        db_table = "transaction_history"
        ordering = ["-date", "-created_at"]
        constraints = [CheckConstraint(condition=Q(amount__gt=0), name="tx_amount_positive")]
        indexes = [Index(fields=["buyed_package", "is_deleted"])]

    def __str__(self) -> str:
        return f"{self.amount} em {self.date}"
