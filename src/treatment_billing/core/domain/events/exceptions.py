from __future__ import annotations

from decimal import Decimal
from typing import Any


class ClinicOpsError(Exception):
    """Classe base para todas as falhas tipadas do domínio de pacotes."""
    code = "clinic_ops_error"

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "detail": str(self)}


class InvalidInput(ClinicOpsError):
    """Contagens, intervalos ou valores fora da faixa aceita."""
    code = "invalid_input"


class InvalidTransition(ClinicOpsError):
    """Mudança de status de sessão não permitida pela máquina de estados."""
    code = "invalid_transition"

    def __init__(self, session_id: Any, current: str, action: str) -> None:
        self.session_id = session_id
        self.current = current
        self.action = action
        super().__init__(f"Sessão {session_id} em '{current}' não permite '{action}'")


class PaymentExceedsRemaining(ClinicOpsError):
    """
    O pagamento levaria `paid_payment` acima do teto (total - adiantamento).
    `remaining` é o valor ainda permitido, para exibir ao usuário.
    """
    code = "payment_exceeds_remaining"

    def __init__(self, remaining: Decimal, cap: Decimal, paid: Decimal) -> None:
        self.remaining = remaining
        self.cap = cap
        self.paid = paid
        super().__init__(f"Payment exceeds remaining amount. Remaining: {remaining}")

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(remaining=str(self.remaining), cap=str(self.cap), paid=str(self.paid))
        return data


class NotFound(ClinicOpsError):
    """Paciente, pacote, sessão ou transação inexistente ou já removido."""
    code = "not_found"

    def __init__(self, entity: str, identifier: Any) -> None:
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} {identifier} não encontrado ou removido")


class PersistenceFailure(ClinicOpsError):
    """Erro da camada de armazenamento, repassado de forma opaca."""
    code = "persistence_failure"


class CascadeDeletionError(ClinicOpsError):
    """
    Uma ou mais etapas da remoção em cascata falharam.
    As etapas já concluídas permanecem aplicadas; `report` mostra o que foi
    feito e `failures` lista (etapa, erro) na ordem em que ocorreram.
    """
    code = "cascade_deletion_failed"

    def __init__(self, failures: list[tuple[str, Exception]], report: Any) -> None:
        self.failures = failures
        self.report = report
        steps = ", ".join(step for step, _ in failures)
        super().__init__(f"Remoção em cascata incompleta (falhas: {steps})")

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["failures"] = [{"step": step, "error": str(err)} for step, err in self.failures]
        data["report"] = self.report.to_dict() if hasattr(self.report, "to_dict") else self.report
        return data
