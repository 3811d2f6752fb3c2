"""Atalhos para montar pacientes/pacotes pelos mesmos buses usados pela API."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal

from treatment_billing.adapters.config.composition_root import setup_di_container_from_settings
from treatment_billing.core.application.commands.package_commands import CreatePackageCommand
from treatment_billing.core.application.commands.patient_commands import CreatePatientCommand
from treatment_billing.core.application.commands.payment_commands import AddPaymentCommand
from treatment_billing.core.application.dtos.ledger_dto import PaymentDTO
from treatment_billing.core.application.dtos.package_dto import PackageDTO
from treatment_billing.core.application.dtos.patient_dto import PatientDTO

MONDAY = dt.date(2024, 1, 1)


def container():
    return setup_di_container_from_settings()


def make_patient(name: str = "Maria Souza", phone_number: str = "+55 11 99999-0000", **extra):
    dto = PatientDTO(name=name, phone_number=phone_number, **extra)
    return container().command_bus().dispatch(CreatePatientCommand(payload=dto, created_by="tests"))


def make_package(patient_id, **overrides):
    data = {
        "patient_id": patient_id,
        "no_of_sessions": 3,
        "total_payment": Decimal("1000.00"),
        "advance_payment": Decimal("200.00"),
        "gap_between_sessions": 7,
        "start_date": MONDAY,
    }
    data.update(overrides)
    dto = PackageDTO(**data)
    return container().command_bus().dispatch(CreatePackageCommand(payload=dto, created_by="tests"))


def add_payment(package_id, amount, date: dt.date | None = None):
    dto = PaymentDTO(amount=Decimal(str(amount)), date=date)
    return container().command_bus().dispatch(AddPaymentCommand(package_id=package_id, payload=dto, created_by="tests"))
