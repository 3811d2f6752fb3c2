# =========================================================
# Serializers compatíveis com as *entities* (e não com os
# modelos Django): o progresso do pacote chega já recalculado.
# =========================================================
from rest_framework import serializers

MONEY = dict(max_digits=12, decimal_places=2)


# ───────────────────────────────────────────────
# Pacientes
# ───────────────────────────────────────────────
class PatientSerializer(serializers.Serializer):
    id           = serializers.UUIDField()
    name         = serializers.CharField()
    phone_number = serializers.CharField()
    address      = serializers.CharField(allow_blank=True, allow_null=True)
    age          = serializers.IntegerField(allow_null=True)
    branch_name  = serializers.CharField(allow_blank=True, allow_null=True)
    is_deleted   = serializers.BooleanField()
    created_by   = serializers.CharField(allow_null=True)
    updated_by   = serializers.CharField(allow_null=True)
    created_at   = serializers.DateTimeField()
    updated_at   = serializers.DateTimeField()


# ───────────────────────────────────────────────
# Pacotes
# ───────────────────────────────────────────────
class PackageSerializer(serializers.Serializer):
    id                   = serializers.UUIDField()
    patient_id           = serializers.UUIDField()
    no_of_sessions       = serializers.IntegerField()
    sessions_completed   = serializers.IntegerField()
    remaining_sessions   = serializers.IntegerField()
    next_session_date    = serializers.DateField(allow_null=True)
    gap_between_sessions = serializers.IntegerField()
    start_date           = serializers.DateField()
    total_payment        = serializers.DecimalField(**MONEY)
    advance_payment      = serializers.DecimalField(**MONEY)
    paid_payment         = serializers.DecimalField(**MONEY)
    payment_cap          = serializers.DecimalField(**MONEY)
    remaining_payment    = serializers.DecimalField(**MONEY)
    is_deleted           = serializers.BooleanField()
    created_by           = serializers.CharField(allow_null=True)
    updated_by           = serializers.CharField(allow_null=True)
    created_at           = serializers.DateTimeField()
    updated_at           = serializers.DateTimeField()


# ───────────────────────────────────────────────
# Sessões
# ───────────────────────────────────────────────
class SessionSerializer(serializers.Serializer):
    id               = serializers.UUIDField()
    buyed_package_id = serializers.UUIDField()
    session_number   = serializers.IntegerField()
    scheduled_date   = serializers.DateField()
    actual_date      = serializers.DateField(allow_null=True)
    status           = serializers.SerializerMethodField()
    is_deleted       = serializers.BooleanField()
    updated_by       = serializers.CharField(allow_null=True)

    def get_status(self, obj) -> str:
        return obj.status.value


class AgendaSessionSerializer(SessionSerializer):
    patient_name = serializers.CharField(allow_null=True)


# ───────────────────────────────────────────────
# Transações
# ───────────────────────────────────────────────
class TransactionSerializer(serializers.Serializer):
    id               = serializers.UUIDField()
    buyed_package_id = serializers.UUIDField()
    amount           = serializers.DecimalField(**MONEY)
    date             = serializers.DateField(allow_null=True)
    is_deleted       = serializers.BooleanField()
    created_by       = serializers.CharField(allow_null=True)
    updated_by       = serializers.CharField(allow_null=True)
    created_at       = serializers.DateTimeField()
