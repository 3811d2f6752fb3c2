from collections.abc import Callable
from dataclasses import fields

import structlog

from treatment_billing.core.domain.events.events import DomainEvent

logger = structlog.get_logger(__name__)


class EventDispatcher:
    """
    Dispatcher síncrono de eventos de domínio.
    Falhas de um assinante são registradas e não interrompem o comando.
    """
    def __init__(self) -> None:
        self._subs: dict[type[DomainEvent], list[Callable[[DomainEvent], None]]] = {}
        self._catch_all: list[Callable[[DomainEvent], None]] = []

    def subscribe(self, event_type: type[DomainEvent], handler: Callable[[DomainEvent], None]) -> None:
        if event_type is DomainEvent:
            self._catch_all.append(handler)
        else:
            self._subs.setdefault(event_type, []).append(handler)
        logger.debug(
            "event.subscribed",
            event_type=event_type.__name__,
            handler_name=getattr(handler, "__name__", handler.__class__.__name__),
        )

    def dispatch(self, event: DomainEvent) -> None:
        handlers = [*self._subs.get(type(event), []), *self._catch_all]
        logger.debug(
            "event.dispatch",
            event_name=type(event).__name__,
            listeners=len(handlers),
        )
        for h in handlers:
            try:
                h(event)
            except Exception as e:
                logger.error(
                    "event.handler_error",
                    event_name=type(event).__name__,
                    handler_name=getattr(h, "__name__", h.__class__.__name__),
                    error=str(e),
                    exc_info=True,
                )


def log_domain_event(event: DomainEvent) -> None:
    """Assinante padrão: registra todo evento no log estruturado."""
    payload = {
        f.name: str(getattr(event, f.name))
        for f in fields(event)
        if f.name not in ("event_id", "occurred_at")
    }
    logger.info("domain_event", event_name=type(event).__name__, event_id=str(event.event_id), **payload)
