"""
Admin site registry
-------------------
Registro dinâmico dos modelos; somente leitura para o saldo e o cache de
progresso, que são mantidos pelo ledger e pelo agregador.
"""

import structlog
from django.contrib import admin as django_admin

from . import models

logger = structlog.get_logger(__name__)

# ╭──────────────────────────────────────────────╮
# │ Configuração de cada ModelAdmin             │
# ╰──────────────────────────────────────────────╯
MODEL_ADMIN_REGISTRY: dict[type[models.models.Model], dict] = {
    # 1. Pacientes
    models.Patient: dict(
        list_display=("name", "phone_number", "branch_name", "is_deleted"),
        search_fields=("name", "phone_number"),
        list_filter=("branch_name", "is_deleted"),
    ),
    # 2. Pacotes
    models.BuyedPackage: dict(
        list_display=(
            "patient",
            "no_of_sessions",
            "start_date",
            "total_payment",
            "advance_payment",
            "paid_payment",
            "is_deleted",
        ),
        search_fields=("patient__name",),
        list_filter=("is_deleted",),
        readonly_fields=("paid_payment", "sessions_completed", "next_session_date"),
    ),
    # 3. Sessões
    models.Session: dict(
        list_display=("buyed_package", "session_number", "scheduled_date", "actual_date", "status", "is_deleted"),
        list_filter=("status", "is_deleted"),
        date_hierarchy="scheduled_date",
    ),
    # 4. Transações
    models.TransactionHistory: dict(
        list_display=("buyed_package", "amount", "date", "is_deleted"),
        list_filter=("is_deleted",),
        readonly_fields=("amount",),
    ),
}

# ╭──────────────────────────────────────────────╮
# │ Registro dinâmico                           │
# ╰──────────────────────────────────────────────╯
for model, opts in MODEL_ADMIN_REGISTRY.items():
    admin_class = type(f"{model.__name__}Admin", (django_admin.ModelAdmin,), opts)
    django_admin.site.register(model, admin_class)
    logger.debug("Registered model in admin", model=model.__name__)
