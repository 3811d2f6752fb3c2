from prometheus_client import Counter

from treatment_billing.core.domain.events.events import (
    DomainEvent,
    LedgerReconciledEvent,
    PackageDeletedEvent,
    PatientDeletedEvent,
    PaymentAddedEvent,
    PaymentEditedEvent,
    PaymentRemovedEvent,
    SessionCompletedEvent,
    SessionMissedEvent,
    SessionRescheduledEvent,
    SessionsGeneratedEvent,
)

# registro padrão: exportado em /metrics/ pelo django-prometheus

LEDGER_OPERATIONS = Counter(
    "treatment_ledger_operations_total",
    "Operacoes do ledger de pagamentos",
    ["operation"],
)

SESSION_TRANSITIONS = Counter(
    "treatment_session_transitions_total",
    "Transicoes de status de sessao",
    ["target"],
)

SESSIONS_GENERATED = Counter(
    "treatment_sessions_generated_total",
    "Sessoes geradas pelo calendario",
)

CASCADE_DELETIONS = Counter(
    "treatment_cascade_deletions_total",
    "Remocoes logicas em cascata",
    ["entity"],
)

HTTP_REQUESTS = Counter(
    "treatment_http_requests_total",
    "Requisicoes HTTP por view e status",
    ["view", "method", "status"],
)

_LEDGER_EVENTS = {
    PaymentAddedEvent: "add",
    PaymentEditedEvent: "edit",
    PaymentRemovedEvent: "remove",
    LedgerReconciledEvent: "reconcile",
}

_TRANSITION_EVENTS = {
    SessionRescheduledEvent: "rescheduled",
    SessionCompletedEvent: "completed",
    SessionMissedEvent: "missed",
}


def record_domain_event(event: DomainEvent) -> None:
    """Assinante do EventDispatcher que alimenta os contadores."""
    kind = type(event)
    if kind in _LEDGER_EVENTS:
        LEDGER_OPERATIONS.labels(operation=_LEDGER_EVENTS[kind]).inc()
    elif kind in _TRANSITION_EVENTS:
        SESSION_TRANSITIONS.labels(target=_TRANSITION_EVENTS[kind]).inc()
    elif kind is SessionsGeneratedEvent:
        SESSIONS_GENERATED.inc(event.total)
    elif kind is PackageDeletedEvent:
        CASCADE_DELETIONS.labels(entity="package").inc()
    elif kind is PatientDeletedEvent:
        CASCADE_DELETIONS.labels(entity="patient").inc()
