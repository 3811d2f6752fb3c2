from datetime import timedelta

from django.core.management.base import BaseCommand
from django.utils import timezone

from treatment_billing.adapters.config.composition_root import setup_di_container_from_settings
from treatment_billing.core.application.commands.session_commands import MarkMissedSessionsCommand


class Command(BaseCommand):
    help = "Marca como 'missed' as sessões planned/rescheduled vencidas há mais de N dias."

    def add_arguments(self, parser):
        parser.add_argument(
            "--grace-days",
            type=int,
            default=1,
            help="Dias de tolerância após a data agendada (default: 1).",
        )

    def handle(self, *args, **options):
        grace = max(0, options["grace_days"])
        cutoff = timezone.localdate() - timedelta(days=grace)

        container = setup_di_container_from_settings()
        missed = container.command_bus().dispatch(
            MarkMissedSessionsCommand(before=cutoff, updated_by="system")
        )
        self.stdout.write(self.style.SUCCESS(
            f"Sessões marcadas como missed (anteriores a {cutoff.isoformat()}): {missed}"
        ))
