from django.apps import AppConfig


class ClinicOpsConfig(AppConfig):
    name = "clinic_ops_api"
    verbose_name = "Clinic Ops API"

    def ready(self):
        from django.conf import settings

        # ─── DI container ───────────────────────────────────────────
        from treatment_billing.adapters.config.composition_root import (
            setup_di_container_from_settings,
        )

        setup_di_container_from_settings(settings)
