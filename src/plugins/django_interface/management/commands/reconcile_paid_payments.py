import uuid

from django.core.management.base import BaseCommand, CommandError

from treatment_billing.adapters.config.composition_root import setup_di_container_from_settings
from treatment_billing.core.application.commands.payment_commands import ReconcileLedgerCommand
from treatment_billing.core.domain.events.exceptions import ClinicOpsError


class Command(BaseCommand):
    """
    Reconstrói `paid_payment` a partir do histórico de transações.
    Idempotente: pacotes já consistentes não são alterados.
    """
    help = "Recalcula o saldo pago dos pacotes como a soma das transações não removidas."

    def add_arguments(self, parser):
        parser.add_argument(
            "--package-id",
            help="Reconciliar apenas este pacote (default: todos os pacotes vivos).",
        )

    def handle(self, *args, **options):
        container = setup_di_container_from_settings()
        cmd_bus = container.command_bus()

        if options["package_id"]:
            try:
                package_ids = [uuid.UUID(options["package_id"])]
            except ValueError as exc:
                raise CommandError(f"package-id inválido: {options['package_id']}") from exc
        else:
            package_ids = [p.id for p in container.package_repo().list_all()]

        fixed = unchanged = failed = 0
        for package_id in package_ids:
            try:
                result = cmd_bus.dispatch(ReconcileLedgerCommand(package_id=package_id, requested_by="system"))
            except ClinicOpsError as exc:
                failed += 1
                self.stderr.write(self.style.ERROR(f"Falhou p/ {package_id}: {exc}"))
                continue
            if result.changed:
                fixed += 1
                self.stdout.write(
                    f"🔧 {package_id}: {result.previous_paid} → {result.paid_payment}"
                )
            else:
                unchanged += 1

        self.stdout.write(self.style.SUCCESS(
            f"Corrigidos: {fixed} | Já consistentes: {unchanged} | Falhas: {failed}"
        ))
        if failed and options["package_id"]:
            raise CommandError(f"Não foi possível reconciliar {options['package_id']}")
